from typing import Literal

from pydantic import BaseModel

PDF_MEDIA_TYPE = "application/pdf"


class CandidateFile(BaseModel):
    """A file picked (or dropped) by the user, held in memory until submitted."""

    filename: str
    content_type: str | None = None
    content: bytes = b""

    @property
    def is_pdf(self) -> bool:
        return (self.content_type or "").lower() == PDF_MEDIA_TYPE


class UploadOutcome(BaseModel):
    status: Literal["success", "error"]
    storage_name: str
    status_code: int | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "success"
