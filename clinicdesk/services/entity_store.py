"""Entity store over SQLAlchemy Core tables."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.exceptions import StoreError
from clinicdesk.models.consultations import consultations
from clinicdesk.models.medical_histories import medical_histories
from clinicdesk.models.patient_representatives import patient_representatives
from clinicdesk.models.patients import patients
from clinicdesk.models.prescriptions import prescriptions
from clinicdesk.schemas.lifecycle import EntityType

logger = structlog.get_logger()

TABLES: dict[EntityType, Table] = {
    EntityType.PATIENT: patients,
    EntityType.REPRESENTATIVE: patient_representatives,
    EntityType.MEDICAL_HISTORY: medical_histories,
    EntityType.CONSULTATION: consultations,
    EntityType.PRESCRIPTION: prescriptions,
}


class EntityStore:
    """Record lookup, filtered queries and single-row writes per entity collection.

    Every write commits on its own; the store offers no multi-row transaction.
    Driver errors are wrapped in ``StoreError``.
    """

    def __init__(self, db: AsyncSession):
        """Initialize store with database session."""
        self.db = db

    @staticmethod
    def table(entity_type: EntityType) -> Table:
        """Table backing an entity collection."""
        return TABLES[entity_type]

    async def get(self, entity_type: EntityType, entity_id: UUID) -> dict | None:
        """Get a record by id."""
        table = self.table(entity_type)
        try:
            result = await self.db.execute(select(table).where(table.c.id == entity_id))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load {entity_type.label}: {e}") from e
        row = result.mappings().first()
        return dict(row) if row else None

    async def find(
        self,
        entity_type: EntityType,
        order_by_recent: bool = False,
        **filters: Any,
    ) -> list[dict]:
        """Find records matching equality filters.

        Args:
            entity_type: Collection to query
            order_by_recent: Order most recently created first
            **filters: Column equality filters; ``None`` matches NULL

        Returns:
            Matching records
        """
        table = self.table(entity_type)
        conditions = []
        for column, value in filters.items():
            if value is None:
                conditions.append(table.c[column].is_(None))
            else:
                conditions.append(table.c[column] == value)

        query = select(table).where(*conditions)
        if order_by_recent:
            query = query.order_by(table.c.created_at.desc())

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to query {entity_type.label}: {e}") from e
        return [dict(row) for row in result.mappings().all()]

    async def update(self, entity_type: EntityType, entity_id: UUID, patch: dict) -> dict:
        """Update fields of one record and return it."""
        table = self.table(entity_type)
        values = {**patch, "updated_at": datetime.now(UTC)}

        try:
            result = await self.db.execute(
                update(table).where(table.c.id == entity_id).values(**values)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(f"Failed to update {entity_type.label}: {e}") from e

        if result.rowcount == 0:
            raise StoreError(f"{entity_type.label.capitalize()} {entity_id} does not exist")

        record = await self.get(entity_type, entity_id)
        if record is None:
            raise StoreError(f"{entity_type.label.capitalize()} {entity_id} does not exist")
        return record

    async def insert(self, entity_type: EntityType, fields: dict) -> dict:
        """Insert a record and return it."""
        table = self.table(entity_type)
        values = {"id": uuid4(), **fields}

        try:
            await self.db.execute(insert(table).values(**values))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise StoreError(
                f"Failed to create {entity_type.label}: {e.orig}", conflict=True
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(f"Failed to create {entity_type.label}: {e}") from e

        record = await self.get(entity_type, values["id"])
        if record is None:
            raise StoreError(f"Failed to create {entity_type.label}")
        return record

    async def delete(self, entity_type: EntityType, entity_id: UUID) -> None:
        """Permanently delete a record."""
        table = self.table(entity_type)
        try:
            await self.db.execute(delete(table).where(table.c.id == entity_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError(f"Failed to delete {entity_type.label}: {e}") from e

        logger.info("record_deleted", entity_type=entity_type.value, entity_id=str(entity_id))
