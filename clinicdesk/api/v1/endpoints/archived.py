"""Archived records endpoint."""

from fastapi import APIRouter, status

from clinicdesk.dependencies import CurrentUserId, Store
from clinicdesk.schemas.archived import ArchivedResponse
from clinicdesk.services.archive_service import ArchiveService

router = APIRouter()


@router.get(
    "/archived",
    response_model=ArchivedResponse,
    status_code=status.HTTP_200_OK,
    summary="List archived records",
)
async def list_archived(current_user_id: CurrentUserId, store: Store) -> dict:
    """Archived patients, consultations and prescriptions, most recent first."""
    return await ArchiveService(store).list_archived(current_user_id)
