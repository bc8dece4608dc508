from fastapi import Depends, Request

from cv_dashboard.services.profile_service import ProfileService
from cv_dashboard.services.search import SearchRankingEngine, SearchSession
from cv_dashboard.services.upload import IngestionClient


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def get_search_engine(request: Request) -> SearchRankingEngine:
    return request.app.state.search_engine


def get_ingestion_client(request: Request) -> IngestionClient:
    return request.app.state.ingestion_client


def get_search_session(
    profiles: ProfileService = Depends(get_profile_service),
    engine: SearchRankingEngine = Depends(get_search_engine),
) -> SearchSession:
    """A fresh session per request, built on the process-wide services."""
    return SearchSession(profiles, engine)
