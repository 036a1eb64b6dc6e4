"""Prescription endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinicdesk.dependencies import CurrentUserId, Store
from clinicdesk.schemas.lifecycle import (
    DeletionResult,
    DuplicateResult,
    EntityType,
    LifecycleResult,
)
from clinicdesk.schemas.prescriptions import (
    PrescriptionCreate,
    PrescriptionListResponse,
    PrescriptionResponse,
    PrescriptionUpdate,
)
from clinicdesk.services.archive_service import ArchiveService
from clinicdesk.services.clinical_service import ClinicalService

router = APIRouter()


@router.post(
    "/",
    response_model=PrescriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Write prescription",
)
async def create_prescription(
    data: PrescriptionCreate,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """
    Write a prescription.

    Args:
        data: Prescription data, linked to a patient or with inline patient fields
        current_user_id: Authenticated practitioner
        store: Entity store

    Returns:
        Created prescription
    """
    return await ClinicalService(store).create_prescription(current_user_id, data)


@router.get(
    "/",
    response_model=PrescriptionListResponse,
    status_code=status.HTTP_200_OK,
    summary="List prescriptions",
)
async def list_prescriptions(
    current_user_id: CurrentUserId,
    store: Store,
    active: bool = Query(True),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> PrescriptionListResponse:
    """List the practitioner's prescriptions, most recent first."""
    items, total = await ClinicalService(store).list_prescriptions(
        current_user_id, active=active, skip=skip, limit=limit
    )
    return PrescriptionListResponse.model_validate({"items": items, "total": total})


@router.get(
    "/{prescription_id}",
    response_model=PrescriptionResponse,
    status_code=status.HTTP_200_OK,
    summary="Get prescription by ID",
)
async def get_prescription(
    prescription_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """Get a prescription."""
    return await ClinicalService(store).get_prescription(prescription_id, current_user_id)


@router.put(
    "/{prescription_id}",
    response_model=PrescriptionResponse,
    status_code=status.HTTP_200_OK,
    summary="Update prescription",
)
async def update_prescription(
    prescription_id: UUID,
    data: PrescriptionUpdate,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """
    Edit an active prescription.

    Args:
        prescription_id: Prescription ID
        data: Fields to change
        current_user_id: Authenticated practitioner
        store: Entity store

    Returns:
        Updated prescription
    """
    return await ClinicalService(store).update_prescription(
        prescription_id, current_user_id, data
    )


@router.delete(
    "/{prescription_id}",
    response_model=DeletionResult,
    status_code=status.HTTP_200_OK,
    summary="Delete prescription",
)
async def delete_prescription(
    prescription_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> DeletionResult:
    """Delete a prescription; clinical records are only ever archived."""
    return await ArchiveService(store).delete_prescription(prescription_id, current_user_id)


@router.post(
    "/{prescription_id}/archive",
    response_model=LifecycleResult,
    status_code=status.HTTP_200_OK,
    summary="Archive prescription",
)
async def archive_prescription(
    prescription_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> LifecycleResult:
    """Archive a single prescription."""
    return await ArchiveService(store).archive_record(
        EntityType.PRESCRIPTION, prescription_id, current_user_id
    )


@router.post(
    "/{prescription_id}/restore",
    response_model=LifecycleResult,
    status_code=status.HTTP_200_OK,
    summary="Restore prescription",
)
async def restore_prescription(
    prescription_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
    confirm: bool = Query(False),
) -> LifecycleResult:
    """
    Restore a prescription.

    If the prescription's patient is archived, nothing changes unless
    ``confirm`` is set; the response then carries the counts of
    consultations, prescriptions and representatives that would be restored
    with the patient.
    """
    return await ArchiveService(store).restore_record(
        EntityType.PRESCRIPTION, prescription_id, current_user_id, confirm=confirm
    )


@router.post(
    "/{prescription_id}/duplicate",
    response_model=DuplicateResult,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate prescription",
)
async def duplicate_prescription(
    prescription_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> DuplicateResult:
    """Create a standalone copy of a prescription dated today."""
    return await ArchiveService(store).duplicate_prescription(prescription_id, current_user_id)
