"""Fresh copies of patients, consultations and prescriptions."""

from datetime import date
from uuid import UUID

import structlog

from clinicdesk.config import settings
from clinicdesk.core.exceptions import (
    AppException,
    ConflictException,
    PartialFailureException,
    StoreError,
    ValidationException,
)
from clinicdesk.schemas.lifecycle import EntityType
from clinicdesk.schemas.patients import FULL_NAME_MAX_LENGTH
from clinicdesk.services.entity_store import EntityStore
from clinicdesk.services.ownership import OwnershipVerifier

logger = structlog.get_logger()

# Patient fields carried over to a copy; the national id is never among them
PATIENT_COPY_FIELDS = ("birth_date", "gender", "email", "phone", "address")

CONSULTATION_COPY_FIELDS = (
    "medical_history_id",
    "consultation_date",
    "reason",
    "symptoms",
    "physical_examination",
    "diagnosis",
    "treatment",
    "notes",
    "vital_signs",
)

PRESCRIPTION_COPY_FIELDS = (
    "patient_name",
    "patient_age",
    "patient_cedula",
    "patient_phone",
    "patient_address",
    "diagnosis",
    "allergies",
    "medications",
    "instructions",
    "notes",
)


def copy_name(name: str) -> str:
    """Name of a patient copy, shortened so the suffix still fits the column limit."""
    suffix = f" {settings.duplicate_name_suffix}"
    return name[: FULL_NAME_MAX_LENGTH - len(suffix)].rstrip() + suffix


class DuplicationService:
    """Creates fresh, active copies without violating uniqueness constraints."""

    def __init__(self, store: EntityStore, verifier: OwnershipVerifier | None = None):
        """Initialize service with an entity store."""
        self.store = store
        self.verifier = verifier or OwnershipVerifier(store)

    async def duplicate(self, entity_type: EntityType, source_id: UUID, owner_id: UUID) -> UUID:
        """
        Duplicate a patient, a consultation or a prescription.

        Args:
            entity_type: Patient, consultation or prescription
            source_id: Record to copy
            owner_id: Requesting practitioner ID

        Returns:
            ID of the new record

        Raises:
            NotFoundException: If the source is missing or not owned by ``owner_id``
            PartialFailureException: If the copy was created but a dependent was not
        """
        if entity_type is EntityType.PATIENT:
            return await self.duplicate_patient(source_id, owner_id)
        if entity_type is EntityType.CONSULTATION:
            return await self.duplicate_consultation(source_id, owner_id)
        if entity_type is EntityType.PRESCRIPTION:
            return await self.duplicate_prescription(source_id, owner_id)
        raise ValidationException(f"A {entity_type.label} cannot be duplicated")

    async def duplicate_patient(self, source_id: UUID, owner_id: UUID) -> UUID:
        """Verify ownership of a patient and copy it."""
        source = await self.verifier.verify(EntityType.PATIENT, source_id, owner_id)
        return await self.copy_patient(source, owner_id)

    async def copy_patient(self, source: dict, owner_id: UUID) -> UUID:
        """Copy an already verified patient and give the copy an empty medical history."""
        source_id = source["id"]

        fields = {field: source.get(field) for field in PATIENT_COPY_FIELDS}
        fields.update(
            doctor_id=owner_id,
            full_name=copy_name(source["full_name"]),
            cedula=None,
            is_active=True,
        )

        try:
            copy = await self.store.insert(EntityType.PATIENT, fields)
        except StoreError as e:
            if e.conflict:
                raise ConflictException(f"Could not duplicate patient: {e.message}") from e
            raise AppException(f"Could not duplicate patient: {e.message}") from e

        try:
            await self.store.insert(
                EntityType.MEDICAL_HISTORY,
                {
                    "patient_id": copy["id"],
                    "doctor_id": owner_id,
                    "notes": settings.duplicate_note_template.format(name=source["full_name"]),
                    "is_active": True,
                },
            )
        except StoreError as e:
            logger.error(
                "duplicate_history_failed",
                source_id=str(source_id),
                patient_id=str(copy["id"]),
                error=e.message,
            )
            raise PartialFailureException(
                f"Patient copy created but its medical history could not be: {e.message}",
                created_id=copy["id"],
            ) from e

        logger.info("patient_duplicated", source_id=str(source_id), patient_id=str(copy["id"]))
        return copy["id"]

    async def duplicate_consultation(self, source_id: UUID, owner_id: UUID) -> UUID:
        """Verify ownership of a consultation and copy it."""
        source = await self.verifier.verify(EntityType.CONSULTATION, source_id, owner_id)
        return await self.copy_consultation(source, owner_id)

    async def copy_consultation(self, source: dict, owner_id: UUID) -> UUID:
        """Copy an already verified consultation into the same medical history."""
        fields = {field: source.get(field) for field in CONSULTATION_COPY_FIELDS}
        fields.update(doctor_id=owner_id, is_active=True)

        try:
            copy = await self.store.insert(EntityType.CONSULTATION, fields)
        except StoreError as e:
            raise AppException(f"Could not duplicate consultation: {e.message}") from e

        logger.info(
            "consultation_duplicated",
            source_id=str(source["id"]),
            consultation_id=str(copy["id"]),
        )
        return copy["id"]

    async def duplicate_prescription(self, source_id: UUID, owner_id: UUID) -> UUID:
        """Verify ownership of a prescription and copy it."""
        source = await self.verifier.verify(EntityType.PRESCRIPTION, source_id, owner_id)
        return await self.copy_prescription(source, owner_id)

    async def copy_prescription(self, source: dict, owner_id: UUID) -> UUID:
        """Copy an already verified prescription as a standalone record dated today."""
        source_id = source["id"]

        fields = {field: source.get(field) for field in PRESCRIPTION_COPY_FIELDS}
        fields.update(
            doctor_id=owner_id,
            medical_history_id=None,
            consultation_id=None,
            date_prescribed=date.today(),
            is_active=True,
        )

        try:
            copy = await self.store.insert(EntityType.PRESCRIPTION, fields)
        except StoreError as e:
            raise AppException(f"Could not duplicate prescription: {e.message}") from e

        logger.info(
            "prescription_duplicated",
            source_id=str(source_id),
            prescription_id=str(copy["id"]),
        )
        return copy["id"]
