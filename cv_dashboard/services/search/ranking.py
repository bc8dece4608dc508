import json
from typing import Any, Sequence

from loguru import logger

from cv_dashboard.core.errors import SearchUnavailable
from cv_dashboard.models.profile import ProfileRecord, RankedProfile
from cv_dashboard.models.search import SearchResultEntry
from cv_dashboard.services.search.client import SearchProviderClient

PRIMARY_ID_KEY = "supabase_record_id"
FALLBACK_ID_KEY = "supabase_id"

INVALID_FORMAT_MESSAGE = "Search service returned invalid data format. Please contact support."
MALFORMED_MESSAGE = "Search service returned malformed data. Please try again."


def _correlation_id(result: dict[str, Any]) -> str | None:
    document = result.get("document")
    metadata = document.get("metadata") if isinstance(document, dict) else None
    if not isinstance(metadata, dict):
        return None
    record_id = metadata.get(PRIMARY_ID_KEY) or metadata.get(FALLBACK_ID_KEY)
    return str(record_id) if record_id else None


def parse_results(body: str) -> list[SearchResultEntry]:
    """Parse the provider body into correlated entries.

    Entries without a correlation id or a numeric score are skipped.
    Raises SearchUnavailable("malformed") when the body is not a JSON array.
    """
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error(f"Search response is not JSON ({e}). Response was: {body[:500]}")
        message = INVALID_FORMAT_MESSAGE if body.lstrip().startswith("<") else MALFORMED_MESSAGE
        raise SearchUnavailable("malformed", message) from e

    if not isinstance(payload, list):
        logger.error(f"Search response is {type(payload).__name__}, expected a list")
        raise SearchUnavailable("malformed", MALFORMED_MESSAGE)

    entries = []
    for result in payload:
        if not isinstance(result, dict):
            continue
        record_id = _correlation_id(result)
        score = result.get("score")
        if not record_id or isinstance(score, bool) or not isinstance(score, (int, float)):
            continue
        entries.append(SearchResultEntry(correlation_id=record_id, score=float(score)))
    return entries


def apply_ranking(entries: Sequence[SearchResultEntry], records: Sequence[ProfileRecord]) -> list[RankedProfile]:
    """Keep the records that have a search hit and order them by score, highest first.

    A repeated correlation id keeps its last score. Equal scores keep the input order.
    """
    scores = {entry.correlation_id: entry.score for entry in entries}
    ranked = [
        RankedProfile.model_validate({**record.model_dump(exclude_unset=True), "search_score": scores[record.id]})
        for record in records
        if record.id in scores
    ]
    return sorted(ranked, key=lambda profile: profile.search_score, reverse=True)


class SearchRankingEngine:
    """Ranks the current profile set against the external semantic search provider."""

    def __init__(self, provider: SearchProviderClient):
        self.provider = provider

    async def rank(self, query: str, records: Sequence[ProfileRecord]) -> list[RankedProfile] | None:
        """
        Return the records matching `query`, best match first.

        Returns None for an empty query, meaning the caller should show the unranked list.
        Raises SearchUnavailable when the provider cannot be used.
        """
        if not query or not query.strip():
            return None

        body = await self.provider.fetch_results(query)
        entries = parse_results(body)
        ranked = apply_ranking(entries, records)
        logger.info(f"Search {query!r}: {len(entries)} provider hits, {len(ranked)} matching profiles")
        return ranked
