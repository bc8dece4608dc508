import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable

from loguru import logger

from cv_dashboard.core.errors import UploadFailure, ValidationError
from cv_dashboard.models.upload import CandidateFile, UploadOutcome
from cv_dashboard.services.upload.client import IngestionClient
from cv_dashboard.services.upload.naming import storage_name
from cv_dashboard.services.upload.progress import UploadProgress, simulate

PDF_ONLY_MESSAGE = "Please select a PDF file only."

SuccessHook = Callable[[], Awaitable[Any] | Any]


class UploadOrchestrator:
    """
    Drives one CV upload at a time: validation, naming, the ingestion call and
    progress reporting.

    The selected file survives a failed upload so the user can retry without
    picking it again. It is cleared only after a successful upload.
    """

    def __init__(
        self,
        client: IngestionClient,
        progress: UploadProgress | None = None,
        on_success: SuccessHook | None = None,
        clock: Callable[[], float] = time.time,
        tick_interval: float = 0.2,
    ):
        self.client = client
        self.progress = progress or UploadProgress()
        self.on_success = on_success
        self.clock = clock
        self.tick_interval = tick_interval

        self.selected: CandidateFile | None = None
        self.error_message: str = ""

    def select(self, file: CandidateFile) -> None:
        """Pick (or drop) a file. Anything other than a PDF clears the selection."""
        if not file.is_pdf:
            self.selected = None
            self.error_message = PDF_ONLY_MESSAGE
            raise ValidationError(PDF_ONLY_MESSAGE)
        self.selected = file
        self.error_message = ""

    async def submit(self, file: CandidateFile | None = None) -> UploadOutcome:
        if file is not None:
            self.select(file)
        if self.selected is None:
            raise ValidationError("No file selected")

        selected = self.selected
        name = storage_name(selected.filename, int(self.clock() * 1000))
        self.error_message = ""
        self.progress.reset()

        ticker = asyncio.create_task(simulate(self.progress, self.tick_interval))
        try:
            status = await self.client.send(selected, name)
        except UploadFailure as e:
            logger.error(f"Upload of {selected.filename} as {name} failed: {e.message}")
            self.error_message = e.message
            return UploadOutcome(status="error", storage_name=name, status_code=e.status, message=e.message)
        finally:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass
            self.progress.complete()

        logger.info(f"Uploaded {selected.filename} as {name} ({status})")
        self.selected = None
        await self._notify_success()
        return UploadOutcome(
            status="success", storage_name=name, status_code=status, message="CV uploaded successfully"
        )

    async def _notify_success(self) -> None:
        if self.on_success is None:
            return
        result = self.on_success()
        if inspect.isawaitable(result):
            await result
