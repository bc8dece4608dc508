from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from cv_dashboard.api.deps import get_ingestion_client
from cv_dashboard.models.upload import CandidateFile, UploadOutcome
from cv_dashboard.services.upload import IngestionClient, UploadOrchestrator

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


@router.post("", response_model=UploadOutcome)
async def upload_cv(file: UploadFile = File(...), client: IngestionClient = Depends(get_ingestion_client)):
    """Forward a PDF CV to the ingestion webhook."""
    orchestrator = UploadOrchestrator(client)
    candidate = CandidateFile(filename=file.filename or "", content_type=file.content_type)
    # Reject non-PDFs before reading the body
    orchestrator.select(candidate)
    candidate.content = await file.read()

    outcome = await orchestrator.submit(candidate)
    if not outcome.ok:
        return JSONResponse(status_code=502, content={"error": outcome.message, "outcome": outcome.model_dump()})
    return outcome
