from typing import Literal


class DashboardError(Exception):
    """Base error for failures reported to API callers as {"error": message}."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Required input is missing or has the wrong type. Raised before any store or network call."""

    status_code = 400


class NotFound(DashboardError):
    status_code = 404


class StoreError(DashboardError):
    """The record store was reachable but the operation failed."""

    status_code = 500


SearchFailureKind = Literal["transport", "status", "empty", "malformed"]

# An HTTP error status is a transport-class failure; an unusable body is a payload failure
SEARCH_FAILURE_CATEGORY = {"transport": "transport", "status": "transport", "empty": "payload", "malformed": "payload"}


class SearchUnavailable(DashboardError):
    """
    The semantic search provider could not produce a usable ranking.

    Callers fail open: the unranked record set is shown together with `message`.
    """

    status_code = 503

    def __init__(self, kind: SearchFailureKind, message: str, status: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.status = status

    @property
    def category(self) -> str:
        return SEARCH_FAILURE_CATEGORY[self.kind]

    def as_payload(self) -> dict:
        return {"kind": self.kind, "category": self.category, "message": self.message}


class UploadFailure(DashboardError):
    status_code = 502

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
