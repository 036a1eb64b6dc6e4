"""Ownership checks for practitioner-scoped records."""

from uuid import UUID

import structlog

from clinicdesk.core.exceptions import NotFoundException
from clinicdesk.schemas.lifecycle import EntityType
from clinicdesk.services.entity_store import EntityStore

logger = structlog.get_logger()


class OwnershipVerifier:
    """Confirms a record belongs to the requesting practitioner."""

    def __init__(self, store: EntityStore):
        """Initialize verifier with an entity store."""
        self.store = store

    async def owner_of(self, entity_type: EntityType, record: dict) -> UUID | None:
        """Resolve the owning practitioner of a record."""
        if entity_type is EntityType.REPRESENTATIVE:
            patient = await self.store.get(EntityType.PATIENT, record["patient_id"])
            return patient["doctor_id"] if patient else None
        return record.get("doctor_id")

    async def is_owner(self, entity_type: EntityType, entity_id: UUID, owner_id: UUID) -> bool:
        """Check ownership without raising."""
        record = await self.store.get(entity_type, entity_id)
        if record is None:
            return False
        return await self.owner_of(entity_type, record) == owner_id

    async def verify(self, entity_type: EntityType, entity_id: UUID, owner_id: UUID) -> dict:
        """
        Load a record and confirm it belongs to ``owner_id``.

        Args:
            entity_type: Collection of the record
            entity_id: Record ID
            owner_id: Requesting practitioner ID

        Returns:
            The record

        Raises:
            NotFoundException: If the record is missing or owned by someone else
        """
        record = await self.store.get(entity_type, entity_id)
        if record is None or await self.owner_of(entity_type, record) != owner_id:
            logger.info(
                "ownership_denied",
                entity_type=entity_type.value,
                entity_id=str(entity_id),
                owner_id=str(owner_id),
            )
            raise NotFoundException(f"{entity_type.label.capitalize()} not found")
        return record
