import httpx
from loguru import logger

from cv_dashboard.core.base_client import BaseClient
from cv_dashboard.core.errors import UploadFailure
from cv_dashboard.models.upload import CandidateFile


class IngestionClient(BaseClient):
    """Client for the external CV ingestion webhook (multipart upload, single attempt)."""

    def __init__(self, url: str, timeout: float = 120.0, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(timeout=timeout, max_retries=1, transport=transport)
        self.url = url

    async def send(self, file: CandidateFile, time_filename: str) -> int:
        """Upload the file and return the response status. Raises UploadFailure otherwise."""
        files = {"data": (file.filename, file.content, file.content_type or "application/pdf")}
        try:
            response = await self._request(
                "POST", self.url, files=files, data={"time_filename": time_filename}, max_tries=1
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise UploadFailure(f"Upload failed with status: {status}", status=status) from e
        except httpx.RequestError as e:
            logger.error(f"Upload request error for {time_filename}: {e!r}")
            raise UploadFailure("Upload failed. Please try again.") from e
        return response.status_code
