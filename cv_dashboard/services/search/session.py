from loguru import logger

from cv_dashboard.core.errors import SearchUnavailable, StoreError
from cv_dashboard.models.profile import ProfileRecord, RankedProfile
from cv_dashboard.services.profile_service import ProfileService
from cv_dashboard.services.search.ranking import SearchRankingEngine


class SearchSession:
    """
    Owns the profile list and the active search query for one dashboard view.

    State changes only when a response arrives. A search response is applied
    only if its query is still the active one, so the latest query always wins.
    Search failures fail open: `visible` falls back to the full list and
    `error` carries the message to show.
    """

    def __init__(self, profiles: ProfileService, engine: SearchRankingEngine):
        self.profiles = profiles
        self.engine = engine

        self.records: list[ProfileRecord] = []
        self.load_error: str | None = None
        self.query: str = ""
        self.results: list[RankedProfile] | None = None
        self.error: SearchUnavailable | None = None

    async def load(self) -> list[ProfileRecord]:
        try:
            self.records = await self.profiles.list()
            self.load_error = None
        except StoreError as e:
            logger.error(f"Failed to load CV profiles: {e}")
            self.records = []
            self.load_error = "Failed to fetch CV profiles"
        return self.records

    async def search(self, query: str) -> None:
        self.query = query
        self.results = None
        self.error = None

        if not query.strip():
            return

        records = list(self.records)
        try:
            ranked = await self.engine.rank(query, records)
        except SearchUnavailable as e:
            if self._is_stale(query):
                return
            self.error = e
            return

        if self._is_stale(query):
            return
        self.results = ranked

    def _is_stale(self, query: str) -> bool:
        if query != self.query:
            logger.debug(f"Discarding stale search response for {query!r} (active query {self.query!r})")
            return True
        return False

    def clear(self) -> None:
        self.query = ""
        self.results = None
        self.error = None

    @property
    def ranked(self) -> bool:
        return bool(self.query.strip()) and self.error is None and self.results is not None

    @property
    def visible(self) -> list[ProfileRecord]:
        if self.ranked:
            return list(self.results)
        return list(self.records)
