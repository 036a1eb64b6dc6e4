"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.exceptions import UnauthenticatedException
from clinicdesk.core.security import current_doctor_id
from clinicdesk.database import get_db
from clinicdesk.services.entity_store import EntityStore

# Security; missing credentials are reported by get_current_user_id
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Extract the authenticated practitioner ID from the bearer token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Practitioner ID from token

    Raises:
        UnauthenticatedException: If there is no valid session
    """
    doctor_id = current_doctor_id(credentials.credentials if credentials else None)
    if doctor_id is None:
        raise UnauthenticatedException("Could not validate credentials")
    return doctor_id


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


async def get_entity_store(db: DatabaseSession) -> EntityStore:
    """Entity store bound to the request's database session."""
    return EntityStore(db)


# Type aliases for dependency injection
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
Store = Annotated[EntityStore, Depends(get_entity_store)]
