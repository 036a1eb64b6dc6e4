"""Patient service for business logic."""

from datetime import date
from uuid import UUID

import structlog
from sqlalchemy import func, or_, select

from clinicdesk.config import settings
from clinicdesk.core.exceptions import (
    AppException,
    ConflictException,
    PartialFailureException,
    StoreError,
    ValidationException,
)
from clinicdesk.models.patients import patients
from clinicdesk.schemas.lifecycle import EntityType
from clinicdesk.schemas.patients import PatientCreate, PatientUpdate
from clinicdesk.services.entity_store import EntityStore
from clinicdesk.services.ownership import OwnershipVerifier

logger = structlog.get_logger()


def calculate_age(birth_date: date | None, today: date | None = None) -> int | None:
    """Age in whole years at ``today``."""
    if birth_date is None:
        return None
    today = today or date.today()
    had_birthday = (today.month, today.day) >= (birth_date.month, birth_date.day)
    return today.year - birth_date.year - (0 if had_birthday else 1)


def is_minor(birth_date: date | None, today: date | None = None) -> bool:
    """Whether a patient is legally a minor and needs a representative."""
    age = calculate_age(birth_date, today)
    return age is not None and age < settings.adult_age


class PatientService:
    """Service for patient registration and lookup."""

    def __init__(self, store: EntityStore):
        """Initialize service with an entity store."""
        self.store = store
        self.verifier = OwnershipVerifier(store)

    async def _ensure_cedula_free(
        self,
        owner_id: UUID,
        cedula: str | None,
        exclude_id: UUID | None = None,
    ) -> None:
        if not cedula:
            return
        existing = await self.store.find(EntityType.PATIENT, doctor_id=owner_id, cedula=cedula)
        if any(p["id"] != exclude_id for p in existing):
            raise ConflictException(f"A patient with national ID {cedula} already exists")

    async def create_patient(self, owner_id: UUID, data: PatientCreate) -> dict:
        """
        Register a patient with its medical history and representatives.

        Args:
            owner_id: Practitioner registering the patient
            data: Patient registration data

        Returns:
            Patient detail

        Raises:
            ValidationException: If a minor has no representative or several are primary
            ConflictException: If the national ID is already registered
            PartialFailureException: If the patient was stored but a dependent was not
        """
        if is_minor(data.birth_date) and not data.representatives:
            raise ValidationException("A representative is required for patients under age")

        primaries = [r for r in data.representatives if r.is_primary]
        if len(primaries) > 1:
            raise ValidationException("Only one representative can be primary")

        await self._ensure_cedula_free(owner_id, data.cedula)

        values = data.model_dump(exclude={"medical_history", "representatives"})
        values["gender"] = data.gender.value if data.gender else None
        values.update(doctor_id=owner_id, is_active=True)

        try:
            patient = await self.store.insert(EntityType.PATIENT, values)
        except StoreError as e:
            if e.conflict:
                raise ConflictException(f"Could not register patient: {e.message}") from e
            raise AppException(f"Could not register patient: {e.message}") from e

        history_values = data.medical_history.model_dump() if data.medical_history else {}
        history_values.update(patient_id=patient["id"], doctor_id=owner_id, is_active=True)

        try:
            await self.store.insert(EntityType.MEDICAL_HISTORY, history_values)
            for index, representative in enumerate(data.representatives):
                rep_values = representative.model_dump()
                rep_values["relationship"] = representative.relationship.value
                rep_values["is_primary"] = representative.is_primary or (
                    not primaries and index == 0
                )
                rep_values.update(patient_id=patient["id"], is_active=True)
                await self.store.insert(EntityType.REPRESENTATIVE, rep_values)
        except StoreError as e:
            logger.error(
                "patient_dependents_failed", patient_id=str(patient["id"]), error=e.message
            )
            raise PartialFailureException(
                f"Patient registered but its records could not be completed: {e.message}",
                created_id=patient["id"],
            ) from e

        logger.info(
            "patient_created",
            patient_id=str(patient["id"]),
            minor=is_minor(data.birth_date),
        )
        return await self.get_patient(patient["id"], owner_id)

    async def get_patient(self, patient_id: UUID, owner_id: UUID) -> dict:
        """Get a patient with representatives, medical history and age."""
        patient = await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)

        patient["age"] = calculate_age(patient["birth_date"])
        patient["is_minor"] = is_minor(patient["birth_date"])
        patient["representatives"] = await self.store.find(
            EntityType.REPRESENTATIVE, patient_id=patient_id
        )
        histories = await self.store.find(EntityType.MEDICAL_HISTORY, patient_id=patient_id)
        patient["medical_history"] = histories[0] if histories else None

        return patient

    async def list_patients(
        self,
        owner_id: UUID,
        active: bool = True,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[dict], int]:
        """
        List a practitioner's patients, most recent first.

        Returns:
            Tuple of (page of patients, total matching patients)
        """
        conditions = [patients.c.doctor_id == owner_id, patients.c.is_active == active]
        if search:
            conditions.append(
                or_(
                    patients.c.full_name.ilike(f"%{search}%"),
                    patients.c.cedula.ilike(f"%{search}%"),
                )
            )

        # Count total
        count_stmt = select(func.count()).select_from(patients).where(*conditions)
        total = (await self.store.db.execute(count_stmt)).scalar() or 0

        # Get paginated results
        query = (
            select(patients)
            .where(*conditions)
            .order_by(patients.c.created_at.desc())
            .offset(skip)
            .limit(limit)
        )

        result = await self.store.db.execute(query)
        return [dict(row) for row in result.mappings().all()], total

    async def update_patient(self, patient_id: UUID, owner_id: UUID, data: PatientUpdate) -> dict:
        """
        Update patient demographics.

        Args:
            patient_id: Patient ID
            owner_id: Requesting practitioner ID
            data: Fields to change; omitted fields are left untouched

        Returns:
            Patient detail

        Raises:
            NotFoundException: If the patient is not found
            ValidationException: If the new birth date makes a patient without
                an active representative a minor
            ConflictException: If the national ID is already registered
        """
        await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)

        update_values = data.model_dump(exclude_unset=True)
        if "gender" in update_values and data.gender is not None:
            update_values["gender"] = data.gender.value
        if not update_values:
            return await self.get_patient(patient_id, owner_id)

        if is_minor(update_values.get("birth_date")):
            representatives = await self.store.find(
                EntityType.REPRESENTATIVE, patient_id=patient_id, is_active=True
            )
            if not representatives:
                raise ValidationException("A representative is required for patients under age")

        await self._ensure_cedula_free(owner_id, update_values.get("cedula"), exclude_id=patient_id)

        try:
            await self.store.update(EntityType.PATIENT, patient_id, update_values)
        except StoreError as e:
            logger.error("patient_update_failed", patient_id=str(patient_id), error=e.message)
            if e.conflict:
                raise ConflictException("Could not update patient: conflicting record") from e
            raise AppException("Could not update patient") from e

        logger.info("patient_updated", patient_id=str(patient_id), fields=sorted(update_values))
        return await self.get_patient(patient_id, owner_id)
