from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from loguru import logger

from cv_dashboard.core.errors import NotFound, StoreError
from cv_dashboard.models.profile import ProfileRecord
from cv_dashboard.services import codec
from cv_dashboard.services.store import SupabaseClient, eq, ilike_any

# Fields a client may never set through update()
_PROTECTED_FIELDS = {"id", "created_at", "updated_at"}


def storage_key_from_url(file_url: str | None) -> str | None:
    """Return the final path segment of a stored file URL, or None if there is none."""
    if not file_url:
        return None
    try:
        path = urlparse(file_url).path
    except ValueError as e:
        logger.warning(f"Could not parse file URL {file_url!r}: {e}")
        return None
    name = path.rsplit("/", 1)[-1]
    return name or None


class ProfileService:
    """
    CRUD operations on CV profiles.

    Every record leaving this service has passed through the field codec.
    """

    def __init__(self, store: SupabaseClient):
        self.store = store

    async def list(self, filter_text: str | None = None) -> list[ProfileRecord]:
        filters = {}
        if filter_text:
            filters["or"] = ilike_any(codec.LIST_FIELDS, filter_text)
        rows = await self.store.select(filters=filters, order="created_at.desc")
        logger.debug(f"Fetched {len(rows)} profile rows (filter={filter_text!r})")
        return codec.decode_many(rows)

    async def get(self, profile_id: str) -> ProfileRecord:
        rows = await self.store.select(filters={"id": eq(profile_id)})
        if not rows:
            raise NotFound("CV profile not found")
        return codec.decode(rows[0])

    async def create(self, payload: dict[str, Any]) -> ProfileRecord:
        row = codec.encode_for_insert(payload)
        rows = await self.store.insert(row)
        if not rows:
            raise StoreError("Failed to create CV profile")
        profile = codec.decode(rows[0])
        logger.info(f"Created CV profile {profile.id}")
        return profile

    async def update(self, profile_id: str, fields: dict[str, Any]) -> ProfileRecord:
        changes = {k: v for k, v in fields.items() if k not in _PROTECTED_FIELDS}
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()

        rows = await self.store.update({"id": eq(profile_id)}, changes)
        if not rows:
            raise NotFound("CV profile not found")
        logger.info(f"Updated CV profile {profile_id} ({', '.join(sorted(changes))})")
        return codec.decode(rows[0])

    async def delete(self, profile_id: str) -> None:
        rows = await self.store.select(filters={"id": eq(profile_id)}, columns="id,file_url")
        if not rows:
            raise NotFound("CV profile not found")

        file_name = storage_key_from_url(rows[0].get("file_url"))
        if file_name:
            try:
                await self.store.remove_files([file_name])
            except StoreError as e:
                # The row is still deleted when the file cannot be removed
                logger.warning(f"Failed to delete file {file_name} for CV profile {profile_id}: {e}")

        await self.store.delete_rows({"id": eq(profile_id)})
        logger.info(f"Deleted CV profile {profile_id}")
