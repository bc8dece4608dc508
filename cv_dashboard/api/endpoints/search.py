from fastapi import APIRouter, Depends

from cv_dashboard.api.deps import get_search_session
from cv_dashboard.core.errors import StoreError
from cv_dashboard.models.search import SearchError, SearchRequest, SearchResponse
from cv_dashboard.services.search import SearchSession

router = APIRouter(prefix="/api/search", tags=["search"])


@router.post("", response_model=SearchResponse, response_model_exclude_unset=True)
async def semantic_search(payload: SearchRequest, session: SearchSession = Depends(get_search_session)):
    """
    Rank CV profiles with the semantic search provider.

    Never fails because of the provider: on any provider error the full,
    unranked list is returned with `error` describing what went wrong.
    """
    await session.load()
    if session.load_error:
        raise StoreError(session.load_error)

    await session.search(payload.query)
    error = SearchError(**session.error.as_payload()) if session.error else None
    return SearchResponse(query=session.query, ranked=session.ranked, profiles=session.visible, error=error)
