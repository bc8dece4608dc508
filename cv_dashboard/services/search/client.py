import httpx
from loguru import logger

from cv_dashboard.core.base_client import BaseClient
from cv_dashboard.core.errors import SearchUnavailable

TRANSPORT_MESSAGE = "Unable to connect to search service. Please check your internet connection."
EMPTY_MESSAGE = "Search service is not configured properly. Please contact support."


class SearchProviderClient(BaseClient):
    """
    Client for the external semantic search webhook.

    Makes exactly one attempt per query and returns the raw response body.
    """

    def __init__(self, url: str, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(
            timeout=timeout,
            max_retries=1,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )
        self.url = url

    async def fetch_results(self, query: str) -> str:
        """POST the query and return the response text.

        Raises SearchUnavailable for transport errors, non-2xx statuses and empty bodies.
        """
        try:
            response = await self._request("POST", self.url, json={"message": query}, max_tries=1)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Search failed: {status} {e.response.reason_phrase}. Body: {e.response.text[:500]}")
            raise SearchUnavailable(
                "status", f"Search service error ({status}). Please try again later.", status=status
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Search request error: {e!r}")
            raise SearchUnavailable("transport", TRANSPORT_MESSAGE) from e

        body = response.text
        if not body or not body.strip():
            logger.error("Search webhook returned an empty response")
            raise SearchUnavailable("empty", EMPTY_MESSAGE, status=response.status_code)

        logger.debug(f"Search webhook returned {len(body)} bytes for query {query!r}")
        return body
