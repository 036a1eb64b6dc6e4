"""Consultation and prescription service for business logic."""

from datetime import UTC, date, datetime
from uuid import UUID

import structlog
from sqlalchemy import func, select

from clinicdesk.core.exceptions import AppException, StoreError, ValidationException
from clinicdesk.models.prescriptions import prescriptions
from clinicdesk.schemas.consultations import ConsultationCreate, ConsultationUpdate
from clinicdesk.schemas.lifecycle import EntityType
from clinicdesk.schemas.prescriptions import PrescriptionCreate, PrescriptionUpdate
from clinicdesk.services.entity_store import EntityStore
from clinicdesk.services.ownership import OwnershipVerifier
from clinicdesk.services.patient_service import calculate_age

logger = structlog.get_logger()


def patient_snapshot(patient: dict) -> dict:
    """Identity fields a prescription copies from its patient when written."""
    return {
        "patient_name": patient["full_name"],
        "patient_age": calculate_age(patient["birth_date"]),
        "patient_cedula": patient["cedula"],
        "patient_phone": patient["phone"],
        "patient_address": patient["address"],
    }


class ClinicalService:
    """Service for consultations and prescriptions written during encounters."""

    def __init__(self, store: EntityStore):
        """Initialize service with an entity store."""
        self.store = store
        self.verifier = OwnershipVerifier(store)

    async def _active_patient(self, patient_id: UUID, owner_id: UUID) -> dict:
        patient = await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)
        if not patient["is_active"]:
            raise ValidationException(
                f"Patient {patient['full_name']} is archived; restore it before adding records"
            )
        return patient

    async def _history_for(self, patient: dict, owner_id: UUID) -> dict:
        """Medical history of a patient, created on first use."""
        histories = await self.store.find(EntityType.MEDICAL_HISTORY, patient_id=patient["id"])
        if histories:
            return histories[0]

        try:
            history = await self.store.insert(
                EntityType.MEDICAL_HISTORY,
                {"patient_id": patient["id"], "doctor_id": owner_id, "is_active": True},
            )
        except StoreError as e:
            raise AppException(f"Could not open medical history: {e.message}") from e

        logger.info("medical_history_created", patient_id=str(patient["id"]))
        return history

    async def _edit(
        self,
        entity_type: EntityType,
        record_id: UUID,
        owner_id: UUID,
        update_values: dict,
    ) -> dict:
        """Apply a partial update to an owned, active clinical record."""
        record = await self.verifier.verify(entity_type, record_id, owner_id)
        if not record["is_active"]:
            raise ValidationException(
                f"The {entity_type.label} is archived; restore it before editing"
            )
        if not update_values:
            return record

        try:
            updated = await self.store.update(entity_type, record_id, update_values)
        except StoreError as e:
            logger.error(
                f"{entity_type.value}_update_failed", record_id=str(record_id), error=e.message
            )
            raise AppException(f"Could not update {entity_type.label}") from e

        logger.info(
            f"{entity_type.value}_updated", record_id=str(record_id), fields=sorted(update_values)
        )
        return updated

    # ------------------------------------------------------------------
    # Consultations
    # ------------------------------------------------------------------

    async def create_consultation(
        self,
        patient_id: UUID,
        owner_id: UUID,
        data: ConsultationCreate,
    ) -> dict:
        """
        Record a consultation in a patient's medical history.

        Args:
            patient_id: Patient seen
            owner_id: Practitioner recording the consultation
            data: Consultation data

        Returns:
            Created consultation

        Raises:
            NotFoundException: If the patient is not found
            ValidationException: If the patient is archived
        """
        patient = await self._active_patient(patient_id, owner_id)
        history = await self._history_for(patient, owner_id)

        values = data.model_dump(exclude={"vital_signs"})
        values["consultation_date"] = data.consultation_date or datetime.now(UTC)
        values["vital_signs"] = data.vital_signs.to_map() if data.vital_signs else None
        values.update(medical_history_id=history["id"], doctor_id=owner_id, is_active=True)

        try:
            consultation = await self.store.insert(EntityType.CONSULTATION, values)
        except StoreError as e:
            raise AppException(f"Could not record consultation: {e.message}") from e

        logger.info(
            "consultation_created",
            consultation_id=str(consultation["id"]),
            patient_id=str(patient_id),
        )
        return consultation

    async def get_consultation(self, consultation_id: UUID, owner_id: UUID) -> dict:
        """Get a consultation."""
        return await self.verifier.verify(EntityType.CONSULTATION, consultation_id, owner_id)

    async def list_consultations(
        self,
        patient_id: UUID,
        owner_id: UUID,
        active: bool = True,
    ) -> list[dict]:
        """List consultations of a patient, most recent first."""
        await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)
        histories = await self.store.find(EntityType.MEDICAL_HISTORY, patient_id=patient_id)
        if not histories:
            return []

        return await self.store.find(
            EntityType.CONSULTATION,
            order_by_recent=True,
            medical_history_id=histories[0]["id"],
            is_active=active,
        )

    async def update_consultation(
        self,
        consultation_id: UUID,
        owner_id: UUID,
        data: ConsultationUpdate,
    ) -> dict:
        """
        Edit a consultation.

        Args:
            consultation_id: Consultation ID
            owner_id: Requesting practitioner ID
            data: Fields to change; omitted fields are left untouched

        Returns:
            Updated consultation

        Raises:
            NotFoundException: If the consultation is not found
            ValidationException: If the consultation is archived
        """
        update_values = data.model_dump(exclude_unset=True, exclude={"vital_signs"})
        if "vital_signs" in data.model_fields_set:
            update_values["vital_signs"] = (
                data.vital_signs.to_map() if data.vital_signs else None
            )
        return await self._edit(
            EntityType.CONSULTATION, consultation_id, owner_id, update_values
        )

    # ------------------------------------------------------------------
    # Prescriptions
    # ------------------------------------------------------------------

    async def create_prescription(self, owner_id: UUID, data: PrescriptionCreate) -> dict:
        """
        Write a prescription.

        A prescription for a registered patient is linked to its medical
        history and snapshots the patient's identity fields. Without a patient
        the inline fields are stored and the prescription stays detached.

        Args:
            owner_id: Prescribing practitioner
            data: Prescription data

        Returns:
            Created prescription
        """
        values = data.model_dump(exclude={"patient_id"})
        values["date_prescribed"] = data.date_prescribed or date.today()
        values.update(doctor_id=owner_id, is_active=True, medical_history_id=None)

        if data.consultation_id is not None:
            consultation = await self.verifier.verify(
                EntityType.CONSULTATION, data.consultation_id, owner_id
            )
            values["medical_history_id"] = consultation["medical_history_id"]

        if data.patient_id is not None:
            patient = await self._active_patient(data.patient_id, owner_id)
            history = await self._history_for(patient, owner_id)
            if values["medical_history_id"] not in (None, history["id"]):
                raise ValidationException("Consultation belongs to a different patient")

            values["medical_history_id"] = history["id"]
            values.update(patient_snapshot(patient))
        elif values["medical_history_id"] is not None:
            history = await self.store.get(
                EntityType.MEDICAL_HISTORY, values["medical_history_id"]
            )
            patient = await self._active_patient(history["patient_id"], owner_id)
            for field, value in patient_snapshot(patient).items():
                if values[field] is None:
                    values[field] = value

        try:
            prescription = await self.store.insert(EntityType.PRESCRIPTION, values)
        except StoreError as e:
            raise AppException(f"Could not write prescription: {e.message}") from e

        logger.info(
            "prescription_created",
            prescription_id=str(prescription["id"]),
            detached=prescription["medical_history_id"] is None,
        )
        return prescription

    async def get_prescription(self, prescription_id: UUID, owner_id: UUID) -> dict:
        """Get a prescription."""
        return await self.verifier.verify(EntityType.PRESCRIPTION, prescription_id, owner_id)

    async def update_prescription(
        self,
        prescription_id: UUID,
        owner_id: UUID,
        data: PrescriptionUpdate,
    ) -> dict:
        """Edit an active prescription; its patient and consultation links stay fixed."""
        return await self._edit(
            EntityType.PRESCRIPTION,
            prescription_id,
            owner_id,
            data.model_dump(exclude_unset=True),
        )

    async def list_prescriptions(
        self,
        owner_id: UUID,
        active: bool = True,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[dict], int]:
        """
        List a practitioner's prescriptions, most recent first.

        Returns:
            Tuple of (page of prescriptions, total matching prescriptions)
        """
        conditions = [prescriptions.c.doctor_id == owner_id, prescriptions.c.is_active == active]

        # Count total
        count_stmt = select(func.count()).select_from(prescriptions).where(*conditions)
        total = (await self.store.db.execute(count_stmt)).scalar() or 0

        # Get paginated results
        query = (
            select(prescriptions)
            .where(*conditions)
            .order_by(prescriptions.c.created_at.desc())
            .offset(skip)
            .limit(limit)
        )

        result = await self.store.db.execute(query)
        return [dict(row) for row in result.mappings().all()], total
