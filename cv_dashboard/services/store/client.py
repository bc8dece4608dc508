from typing import Any

import httpx
from loguru import logger

from cv_dashboard.core.base_client import BaseClient
from cv_dashboard.core.errors import StoreError
from cv_dashboard.core.security import redact_key
from cv_dashboard.core.version import __version__


def _quote(value: str) -> str:
    """Quote a filter value so commas and parentheses survive PostgREST's `or=(...)` syntax."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def ilike_any(columns: tuple[str, ...], term: str) -> str:
    """Build a PostgREST `or` filter matching `term` as a case-insensitive substring of any column."""
    pattern = _quote(f"*{term}*")
    return "(" + ",".join(f"{column}.ilike.{pattern}" for column in columns) + ")"


class SupabaseClient(BaseClient):
    """
    Client for the Supabase REST (PostgREST) and Storage APIs.

    Only the handful of operations the dashboard needs: select, insert, update,
    delete on one table and remove-by-name on one bucket. Every failure surfaces
    as `StoreError`.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "cv_profiles",
        bucket: str = "CVs",
        timeout: float = 10.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "User-Agent": f"cv-dashboard/{__version__}",
        }
        super().__init__(
            base_url=url.rstrip("/"), timeout=timeout, max_retries=max_retries, headers=headers, transport=transport
        )
        self.table = table
        self.bucket = bucket
        logger.info(f"Supabase client configured for {self.base_url} (key {redact_key(api_key)})")

    @property
    def table_path(self) -> str:
        return f"/rest/v1/{self.table}"

    async def select(
        self,
        filters: dict[str, str] | None = None,
        columns: str = "*",
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": columns}
        if filters:
            params.update(filters)
        if order:
            params["order"] = order
        try:
            data = await self.get(self.table_path, params=params)
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to select from {self.table}: {e}") from e
        return data if isinstance(data, list) else []

    async def insert(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            data = await self.post(
                self.table_path,
                json=[row],
                headers={"Prefer": "return=representation"},
                max_tries=1,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to insert into {self.table}: {e}") from e
        return data if isinstance(data, list) else []

    async def update(self, filters: dict[str, str], fields: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            data = await self.patch(
                self.table_path,
                json=fields,
                params=filters,
                headers={"Prefer": "return=representation"},
                max_tries=1,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to update {self.table}: {e}") from e
        return data if isinstance(data, list) else []

    async def delete_rows(self, filters: dict[str, str]) -> None:
        try:
            await self.delete(self.table_path, params=filters, max_tries=1)
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to delete from {self.table}: {e}") from e

    async def remove_files(self, names: list[str]) -> None:
        """Remove objects from the bucket by name."""
        try:
            await self._request(
                "DELETE",
                f"/storage/v1/object/{self.bucket}",
                json={"prefixes": names},
                max_tries=1,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to remove {names} from bucket {self.bucket}: {e}") from e


def eq(value: str) -> str:
    return f"eq.{value}"
