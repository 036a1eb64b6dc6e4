"""Resolution of the records that transition together with a root entity."""

from uuid import UUID

from clinicdesk.core.exceptions import NotFoundException, ValidationException
from clinicdesk.schemas.lifecycle import CascadeSet, EntityType
from clinicdesk.services.entity_store import EntityStore


class CascadeResolver:
    """Read-only computation of cascade sets.

    A patient root covers its representatives, its medical history, and every
    consultation and prescription under that history. A consultation or
    prescription root stays on its own unless it hangs off the history of an
    archived patient, in which case the whole patient hierarchy is pulled in.
    """

    ROOT_TYPES = (EntityType.PATIENT, EntityType.PRESCRIPTION, EntityType.CONSULTATION)

    def __init__(self, store: EntityStore):
        """Initialize resolver with an entity store."""
        self.store = store

    async def resolve(
        self,
        root_type: EntityType,
        root_id: UUID,
        expand_archived_patient: bool = True,
    ) -> CascadeSet:
        """
        Compute the cascade set of a root entity.

        Args:
            root_type: Patient, prescription or consultation
            root_id: Root record ID
            expand_archived_patient: For consultation/prescription roots, include
                the owning patient hierarchy when that patient is archived

        Returns:
            Cascade set

        Raises:
            NotFoundException: If the root record does not exist
            ValidationException: If the entity type cannot be a root
        """
        if root_type is EntityType.PATIENT:
            return await self._resolve_patient(root_id)
        if root_type in (EntityType.PRESCRIPTION, EntityType.CONSULTATION):
            return await self._resolve_clinical_record(root_type, root_id, expand_archived_patient)
        raise ValidationException(f"A {root_type.label} cannot be archived on its own")

    async def _resolve_patient(self, patient_id: UUID) -> CascadeSet:
        patient = await self.store.get(EntityType.PATIENT, patient_id)
        if patient is None:
            raise NotFoundException("Patient not found")

        cascade = CascadeSet(
            root_type=EntityType.PATIENT,
            root_id=patient_id,
            patient_id=patient_id,
            patient_name=patient["full_name"],
            patient_active=patient["is_active"],
        )

        representatives = await self.store.find(EntityType.REPRESENTATIVE, patient_id=patient_id)
        cascade.representative_ids = [r["id"] for r in representatives]

        # At most one history per patient; absent until the first clinical record
        histories = await self.store.find(EntityType.MEDICAL_HISTORY, patient_id=patient_id)
        if not histories:
            return cascade

        history_id = histories[0]["id"]
        cascade.medical_history_id = history_id

        consultation_rows = await self.store.find(
            EntityType.CONSULTATION, medical_history_id=history_id
        )
        cascade.consultation_ids = [c["id"] for c in consultation_rows]

        prescription_rows = await self.store.find(
            EntityType.PRESCRIPTION, medical_history_id=history_id
        )
        cascade.prescription_ids = [p["id"] for p in prescription_rows]

        return cascade

    async def _resolve_clinical_record(
        self,
        root_type: EntityType,
        root_id: UUID,
        expand_archived_patient: bool,
    ) -> CascadeSet:
        record = await self.store.get(root_type, root_id)
        if record is None:
            raise NotFoundException(f"{root_type.label.capitalize()} not found")

        single = CascadeSet(root_type=root_type, root_id=root_id)
        if root_type is EntityType.PRESCRIPTION:
            single.prescription_ids = [root_id]
        else:
            single.consultation_ids = [root_id]

        history_id = record.get("medical_history_id")
        if history_id is None:
            return single

        history = await self.store.get(EntityType.MEDICAL_HISTORY, history_id)
        if history is None:
            return single

        patient = await self.store.get(EntityType.PATIENT, history["patient_id"])
        if patient is None:
            return single

        single.patient_name = patient["full_name"]
        single.patient_active = patient["is_active"]
        if patient["is_active"] or not expand_archived_patient:
            return single

        cascade = await self._resolve_patient(patient["id"])
        cascade.root_type = root_type
        cascade.root_id = root_id

        if root_type is EntityType.PRESCRIPTION:
            ids = cascade.prescription_ids
        else:
            ids = cascade.consultation_ids
        if root_id not in ids:
            ids.append(root_id)

        return cascade
