"""Consultation endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinicdesk.dependencies import CurrentUserId, Store
from clinicdesk.schemas.consultations import ConsultationResponse, ConsultationUpdate
from clinicdesk.schemas.lifecycle import DuplicateResult, EntityType, LifecycleResult
from clinicdesk.services.archive_service import ArchiveService
from clinicdesk.services.clinical_service import ClinicalService

router = APIRouter()


@router.get(
    "/{consultation_id}",
    response_model=ConsultationResponse,
    status_code=status.HTTP_200_OK,
    summary="Get consultation by ID",
)
async def get_consultation(
    consultation_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """Get a consultation."""
    return await ClinicalService(store).get_consultation(consultation_id, current_user_id)


@router.put(
    "/{consultation_id}",
    response_model=ConsultationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update consultation",
)
async def update_consultation(
    consultation_id: UUID,
    data: ConsultationUpdate,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """
    Edit an active consultation.

    Args:
        consultation_id: Consultation ID
        data: Fields to change
        current_user_id: Authenticated practitioner
        store: Entity store

    Returns:
        Updated consultation
    """
    return await ClinicalService(store).update_consultation(
        consultation_id, current_user_id, data
    )


@router.post(
    "/{consultation_id}/archive",
    response_model=LifecycleResult,
    status_code=status.HTTP_200_OK,
    summary="Archive consultation",
)
async def archive_consultation(
    consultation_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> LifecycleResult:
    """Archive a single consultation."""
    return await ArchiveService(store).archive_record(
        EntityType.CONSULTATION, consultation_id, current_user_id
    )


@router.post(
    "/{consultation_id}/restore",
    response_model=LifecycleResult,
    status_code=status.HTTP_200_OK,
    summary="Restore consultation",
)
async def restore_consultation(
    consultation_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
    confirm: bool = Query(False),
) -> LifecycleResult:
    """
    Restore a consultation.

    If its patient is archived, nothing changes unless ``confirm`` is set;
    the response then carries a preview of the patient-wide restore.
    """
    return await ArchiveService(store).restore_record(
        EntityType.CONSULTATION, consultation_id, current_user_id, confirm=confirm
    )


@router.post(
    "/{consultation_id}/duplicate",
    response_model=DuplicateResult,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate consultation",
)
async def duplicate_consultation(
    consultation_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> DuplicateResult:
    """Copy a consultation into the same medical history."""
    return await ArchiveService(store).duplicate_consultation(consultation_id, current_user_id)
