from fastapi import APIRouter

from .endpoints.candidates import router as candidates_router
from .endpoints.health import router as health_router
from .endpoints.search import router as search_router
from .endpoints.uploads import router as uploads_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(candidates_router)
api_router.include_router(search_router)
api_router.include_router(uploads_router)
