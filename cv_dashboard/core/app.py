from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from cv_dashboard.api.deps import get_search_session
from cv_dashboard.api.main import api_router
from cv_dashboard.core.errors import DashboardError
from cv_dashboard.services.profile_service import ProfileService
from cv_dashboard.services.search import SearchProviderClient, SearchRankingEngine, SearchSession
from cv_dashboard.services.store import SupabaseClient
from cv_dashboard.services.upload import IngestionClient

from .config import require_backend_config, settings
from .version import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the external clients once per process and close them on shutdown.

    Fails fast when the record store is not configured.
    """
    url, key = require_backend_config(settings)
    store = SupabaseClient(
        url,
        key,
        table=settings.SUPABASE_TABLE,
        bucket=settings.SUPABASE_BUCKET,
        timeout=settings.STORE_TIMEOUT_SECONDS,
        max_retries=settings.STORE_MAX_RETRIES,
    )
    search_client = SearchProviderClient(settings.SEARCH_WEBHOOK_URL, timeout=settings.SEARCH_TIMEOUT_SECONDS)
    ingestion_client = IngestionClient(settings.UPLOAD_WEBHOOK_URL, timeout=settings.UPLOAD_TIMEOUT_SECONDS)

    app.state.profile_service = ProfileService(store)
    app.state.search_engine = SearchRankingEngine(search_client)
    app.state.ingestion_client = ingestion_client
    logger.info("CV dashboard services initialised")

    yield

    for client in (store, search_client, ingestion_client):
        try:
            await client.close()
        except Exception as exc:
            logger.warning(f"Failed to close {type(client).__name__}: {exc}")


app = FastAPI(
    title="CV Dashboard",
    description="Candidate CV profile dashboard with semantic search",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.APP_ENV != "development" else "/docs",
    redoc_url=None if settings.APP_ENV != "development" else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# cv_dashboard/core/app.py -> cv_dashboard/core -> cv_dashboard
package_root = Path(__file__).resolve().parent.parent
templates_dir = package_root / "templates"

jinja_env = Environment(loader=FileSystemLoader(str(templates_dir)), autoescape=select_autoescape(["html"]))


@app.get("/", response_class=HTMLResponse)
async def dashboard_page(q: str = "", session: SearchSession = Depends(get_search_session)):
    """Server-rendered candidate table; `q` runs a semantic search over it."""
    await session.load()
    if q and not session.load_error:
        await session.search(q)

    template = jinja_env.get_template("index.html")
    html_content = template.render(
        app_version=__version__,
        query=session.query,
        ranked=session.ranked,
        profiles=session.visible,
        load_error=session.load_error,
        search_error=session.error.message if session.error else None,
    )
    return HTMLResponse(content=html_content, media_type="text/html")


app.include_router(api_router)
