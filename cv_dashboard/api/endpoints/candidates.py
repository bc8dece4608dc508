from typing import Any

from fastapi import APIRouter, Body, Depends
from loguru import logger

from cv_dashboard.api.deps import get_profile_service
from cv_dashboard.models.profile import ProfileRecord, ProfileUpdate
from cv_dashboard.services.profile_service import ProfileService

router = APIRouter(prefix="/api/candidates", tags=["candidates"])


@router.get("", response_model=list[ProfileRecord], response_model_exclude_unset=True)
async def list_candidates(search: str | None = None, service: ProfileService = Depends(get_profile_service)):
    """List CV profiles, newest first. `search` is a case-insensitive substring filter."""
    return await service.list(search or None)


@router.post("", response_model=ProfileRecord, status_code=201, response_model_exclude_unset=True)
async def create_candidate(
    payload: dict[str, Any] = Body(...),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.create(payload)


@router.get("/{profile_id}", response_model=ProfileRecord, response_model_exclude_unset=True)
async def get_candidate(profile_id: str, service: ProfileService = Depends(get_profile_service)):
    return await service.get(profile_id)


@router.put("/{profile_id}", response_model=ProfileRecord, response_model_exclude_unset=True)
async def update_candidate(
    profile_id: str,
    payload: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service),
):
    fields = payload.model_dump(exclude_unset=True)
    fields.update(payload.model_extra or {})
    return await service.update(profile_id, fields)


@router.delete("/{profile_id}")
async def delete_candidate(profile_id: str, service: ProfileService = Depends(get_profile_service)):
    """Delete a profile and, best effort, its stored CV file."""
    await service.delete(profile_id)
    logger.info(f"CV profile {profile_id} deleted via API")
    return {"message": "CV profile and file deleted successfully"}
