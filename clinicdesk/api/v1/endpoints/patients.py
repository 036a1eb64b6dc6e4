"""Patient endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinicdesk.dependencies import CurrentUserId, Store
from clinicdesk.schemas.consultations import ConsultationCreate, ConsultationResponse
from clinicdesk.schemas.lifecycle import (
    CascadePreview,
    DeletionResult,
    DuplicateResult,
    LifecycleResult,
)
from clinicdesk.schemas.patients import (
    PatientCreate,
    PatientDetailResponse,
    PatientListResponse,
    PatientUpdate,
)
from clinicdesk.services.archive_service import ArchiveService
from clinicdesk.services.clinical_service import ClinicalService
from clinicdesk.services.patient_service import PatientService

router = APIRouter()


@router.post(
    "/",
    response_model=PatientDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register patient",
)
async def create_patient(
    data: PatientCreate,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """
    Register a patient with its medical history and representatives.

    Args:
        data: Patient registration data
        current_user_id: Authenticated practitioner
        store: Entity store

    Returns:
        Registered patient
    """
    return await PatientService(store).create_patient(current_user_id, data)


@router.get(
    "/",
    response_model=PatientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List patients",
)
async def list_patients(
    current_user_id: CurrentUserId,
    store: Store,
    active: bool = Query(True),
    search: str | None = Query(None, min_length=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> PatientListResponse:
    """
    List the practitioner's patients, most recent first.

    Args:
        current_user_id: Authenticated practitioner
        store: Entity store
        active: List active (true) or archived (false) patients
        search: Match on name or national ID
        skip: Number of records to skip
        limit: Maximum number of records

    Returns:
        Patients
    """
    items, total = await PatientService(store).list_patients(
        current_user_id, active=active, search=search, skip=skip, limit=limit
    )
    return PatientListResponse.model_validate({"items": items, "total": total})


@router.get(
    "/{patient_id}",
    response_model=PatientDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get patient by ID",
)
async def get_patient(
    patient_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """Get a patient with representatives and medical history."""
    return await PatientService(store).get_patient(patient_id, current_user_id)


@router.put(
    "/{patient_id}",
    response_model=PatientDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update patient",
)
async def update_patient(
    patient_id: UUID,
    data: PatientUpdate,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """Update patient demographics."""
    return await PatientService(store).update_patient(patient_id, current_user_id, data)


@router.delete(
    "/{patient_id}",
    response_model=DeletionResult,
    status_code=status.HTTP_200_OK,
    summary="Delete patient",
)
async def delete_patient(
    patient_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> DeletionResult:
    """
    Delete a patient.

    Patients with any clinical history are archived instead of deleted.
    """
    return await ArchiveService(store).delete_patient(patient_id, current_user_id)


@router.get(
    "/{patient_id}/cascade-preview",
    response_model=CascadePreview,
    status_code=status.HTTP_200_OK,
    summary="Preview patient cascade",
)
async def preview_patient_cascade(
    patient_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> CascadePreview:
    """Counts of records archiving or restoring the patient would touch."""
    return await ArchiveService(store).preview_patient(patient_id, current_user_id)


@router.post(
    "/{patient_id}/archive",
    response_model=LifecycleResult,
    status_code=status.HTTP_200_OK,
    summary="Archive patient",
)
async def archive_patient(
    patient_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> LifecycleResult:
    """Archive a patient together with its clinical history."""
    return await ArchiveService(store).archive_patient(patient_id, current_user_id)


@router.post(
    "/{patient_id}/restore",
    response_model=LifecycleResult,
    status_code=status.HTTP_200_OK,
    summary="Restore patient",
)
async def restore_patient(
    patient_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> LifecycleResult:
    """Restore a patient together with its clinical history."""
    return await ArchiveService(store).restore_patient(patient_id, current_user_id)


@router.post(
    "/{patient_id}/duplicate",
    response_model=DuplicateResult,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate patient",
)
async def duplicate_patient(
    patient_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
) -> DuplicateResult:
    """Create an active copy of a patient without its national ID."""
    return await ArchiveService(store).duplicate_patient(patient_id, current_user_id)


@router.post(
    "/{patient_id}/consultations",
    response_model=ConsultationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record consultation",
)
async def create_consultation(
    patient_id: UUID,
    data: ConsultationCreate,
    current_user_id: CurrentUserId,
    store: Store,
) -> dict:
    """Record a consultation in the patient's medical history."""
    return await ClinicalService(store).create_consultation(patient_id, current_user_id, data)


@router.get(
    "/{patient_id}/consultations",
    response_model=list[ConsultationResponse],
    status_code=status.HTTP_200_OK,
    summary="List patient consultations",
)
async def list_consultations(
    patient_id: UUID,
    current_user_id: CurrentUserId,
    store: Store,
    active: bool = Query(True),
) -> list[dict]:
    """List the patient's consultations, most recent first."""
    return await ClinicalService(store).list_consultations(
        patient_id, current_user_id, active=active
    )
