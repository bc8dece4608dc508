from pydantic import BaseModel, Field, SerializeAsAny

from cv_dashboard.models.profile import ProfileRecord


class SearchResultEntry(BaseModel):
    """A provider hit correlated back to a profile id."""

    correlation_id: str
    score: float


class SearchRequest(BaseModel):
    query: str = Field(default="", description="Free-text semantic search query")


class SearchError(BaseModel):
    kind: str
    # "transport" for an unreachable provider or HTTP error status, "payload" for an unusable body
    category: str
    message: str


class SearchResponse(BaseModel):
    query: str
    ranked: bool = Field(description="False when the list is the unranked fallback")
    # RankedProfile entries keep their search_score when serialized
    profiles: list[SerializeAsAny[ProfileRecord]]
    error: SearchError | None = None
