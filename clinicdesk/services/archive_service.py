"""Archive lifecycle manager: archive, restore, duplicate and delete clinical records."""

from uuid import UUID

import structlog

from clinicdesk.core.exceptions import AppException, StoreError, ValidationException
from clinicdesk.schemas.lifecycle import (
    CascadePreview,
    DeletionMode,
    DeletionResult,
    Direction,
    DuplicateResult,
    EntityType,
    LifecycleResult,
    Outcome,
    OutcomeKind,
    TransitionReport,
)
from clinicdesk.services.cascade_resolver import CascadeResolver
from clinicdesk.services.duplication_service import DuplicationService
from clinicdesk.services.entity_store import EntityStore
from clinicdesk.services.lifecycle_engine import LifecycleEngine
from clinicdesk.services.ownership import OwnershipVerifier

logger = structlog.get_logger()

_PAST_TENSE = {Direction.ARCHIVE: "archived", Direction.RESTORE: "restored"}


def _describe(entity_type: EntityType, record: dict) -> str:
    """Display name of a record for notification messages."""
    if entity_type is EntityType.PATIENT:
        return record["full_name"]
    if entity_type is EntityType.PRESCRIPTION:
        return f"the prescription for {record['patient_name']}"
    return "the consultation"


def _sentence(text: str) -> str:
    return text[:1].upper() + text[1:]


def build_outcome(
    report: TransitionReport,
    subject: str,
    title: str,
) -> Outcome:
    """Turn a transition report into a notification outcome.

    Dependent failures downgrade the outcome to a warning that names the
    entity types which could not be updated.
    """
    verb = _PAST_TENSE[report.direction]
    message = f"{subject} has been {verb}"
    if not report.has_failures:
        return Outcome(kind=OutcomeKind.SUCCESS, title=title, message=message)

    failed = ", ".join(t.label for t, errors in report.failures.items() if errors)
    return Outcome(
        kind=OutcomeKind.WARNING,
        title=title,
        message=f"{message}, but some related records could not be {verb}: {failed}",
    )


class ArchiveService:
    """Entry point for lifecycle operations on practitioner-owned records.

    Each operation verifies ownership before any mutation, resolves the
    cascade, and applies it through the lifecycle engine.
    """

    def __init__(self, store: EntityStore):
        """Initialize service with an entity store."""
        self.store = store
        self.verifier = OwnershipVerifier(store)
        self.resolver = CascadeResolver(store)
        self.engine = LifecycleEngine(store)
        self.duplicator = DuplicationService(store, self.verifier)

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    async def preview_patient(self, patient_id: UUID, owner_id: UUID) -> CascadePreview:
        """Counts of records archiving or restoring a patient would touch."""
        await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)
        cascade = await self.resolver.resolve(EntityType.PATIENT, patient_id)
        return self.engine.preview(cascade)

    async def archive_patient(self, patient_id: UUID, owner_id: UUID) -> LifecycleResult:
        """Archive a patient with its whole clinical hierarchy."""
        patient = await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)
        return await self._transition_patient(patient, Direction.ARCHIVE)

    async def restore_patient(self, patient_id: UUID, owner_id: UUID) -> LifecycleResult:
        """Restore a patient with its whole clinical hierarchy."""
        patient = await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)
        return await self._transition_patient(patient, Direction.RESTORE)

    async def _transition_patient(self, patient: dict, direction: Direction) -> LifecycleResult:
        patient_id = patient["id"]
        cascade = await self.resolver.resolve(EntityType.PATIENT, patient_id)
        report = await self.engine.transition(cascade, direction)

        logger.info(
            f"patient_{_PAST_TENSE[direction]}",
            patient_id=str(patient_id),
            consultations=len(cascade.consultation_ids),
            prescriptions=len(cascade.prescription_ids),
            representatives=len(cascade.representative_ids),
        )

        title = f"Patient {_PAST_TENSE[direction]}"
        subject = f"{patient['full_name']} and their clinical history"
        return LifecycleResult(
            outcome=build_outcome(report, subject, title),
            report=report,
            preview=self.engine.preview(cascade),
        )

    async def delete_patient(self, patient_id: UUID, owner_id: UUID) -> DeletionResult:
        """
        Delete a patient.

        The row is removed only when no medical history was ever created for
        it; any clinical footprint turns the delete into an archive.
        """
        patient = await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)

        histories = await self.store.find(EntityType.MEDICAL_HISTORY, patient_id=patient_id)
        if histories:
            result = await self._transition_patient(patient, Direction.ARCHIVE)
            return DeletionResult(
                mode=DeletionMode.ARCHIVED,
                outcome=result.outcome,
                report=result.report,
            )

        try:
            for representative in await self.store.find(
                EntityType.REPRESENTATIVE, patient_id=patient_id
            ):
                await self.store.delete(EntityType.REPRESENTATIVE, representative["id"])
            await self.store.delete(EntityType.PATIENT, patient_id)
        except StoreError as e:
            raise AppException(
                f"Could not delete patient {patient['full_name']}: {e.message}"
            ) from e

        logger.info("patient_deleted", patient_id=str(patient_id))
        return DeletionResult(
            mode=DeletionMode.DELETED,
            outcome=Outcome(
                kind=OutcomeKind.SUCCESS,
                title="Patient deleted",
                message=f"{patient['full_name']} has been permanently deleted",
            ),
        )

    async def duplicate_patient(self, patient_id: UUID, owner_id: UUID) -> DuplicateResult:
        """Create an active copy of a patient with a fresh medical history."""
        source = await self.verifier.verify(EntityType.PATIENT, patient_id, owner_id)
        new_id = await self.duplicator.copy_patient(source, owner_id)
        return DuplicateResult(
            id=new_id,
            outcome=Outcome(
                kind=OutcomeKind.SUCCESS,
                title="Patient duplicated",
                message=f"A copy of {source['full_name']} has been created",
            ),
        )

    # ------------------------------------------------------------------
    # Prescriptions and consultations
    # ------------------------------------------------------------------

    async def archive_record(
        self,
        entity_type: EntityType,
        record_id: UUID,
        owner_id: UUID,
    ) -> LifecycleResult:
        """Archive a single prescription or consultation."""
        self._check_record_type(entity_type)
        record = await self.verifier.verify(entity_type, record_id, owner_id)
        cascade = await self.resolver.resolve(
            entity_type, record_id, expand_archived_patient=False
        )
        report = await self.engine.transition(cascade, Direction.ARCHIVE)
        logger.info(f"{entity_type.value}_archived", record_id=str(record_id))

        return LifecycleResult(
            outcome=build_outcome(
                report,
                _sentence(_describe(entity_type, record)),
                f"{entity_type.label.capitalize()} archived",
            ),
            report=report,
        )

    async def restore_record(
        self,
        entity_type: EntityType,
        record_id: UUID,
        owner_id: UUID,
        confirm: bool = False,
    ) -> LifecycleResult:
        """
        Restore a prescription or consultation.

        When the record hangs off an archived patient, restoring it means
        restoring the whole patient hierarchy. Without ``confirm`` nothing is
        mutated and the result carries a preview of the affected counts.

        Args:
            entity_type: Prescription or consultation
            record_id: Record ID
            owner_id: Requesting practitioner ID
            confirm: Proceed with the patient-wide restore

        Returns:
            Lifecycle result with either a report or a confirmation preview
        """
        self._check_record_type(entity_type)
        record = await self.verifier.verify(entity_type, record_id, owner_id)
        cascade = await self.resolver.resolve(entity_type, record_id)
        preview = self.engine.preview(cascade)

        if preview.requires_confirmation and not confirm:
            logger.info(
                "restore_confirmation_required",
                entity_type=entity_type.value,
                record_id=str(record_id),
                patient_id=str(cascade.patient_id),
            )
            return LifecycleResult(
                outcome=Outcome(
                    kind=OutcomeKind.WARNING,
                    title="Confirmation required",
                    message=(
                        f"Patient {cascade.patient_name} is archived. Restoring "
                        f"{_describe(entity_type, record)} also restores the patient, "
                        f"{preview.consultations} consultation(s), "
                        f"{preview.prescriptions} prescription(s) and "
                        f"{preview.representatives} representative(s)"
                    ),
                ),
                preview=preview,
            )

        report = await self.engine.transition(cascade, Direction.RESTORE)
        logger.info(
            f"{entity_type.value}_restored",
            record_id=str(record_id),
            with_patient=cascade.includes_patient,
        )

        subject = _sentence(_describe(entity_type, record))
        if cascade.includes_patient:
            subject = f"{subject} and patient {cascade.patient_name}"
        return LifecycleResult(
            outcome=build_outcome(
                report, subject, f"{entity_type.label.capitalize()} restored"
            ),
            report=report,
            preview=preview,
        )

    async def delete_prescription(self, prescription_id: UUID, owner_id: UUID) -> DeletionResult:
        """Delete a prescription, which only ever archives it."""
        result = await self.archive_record(EntityType.PRESCRIPTION, prescription_id, owner_id)
        return DeletionResult(
            mode=DeletionMode.ARCHIVED,
            outcome=result.outcome,
            report=result.report,
        )

    async def duplicate_prescription(
        self,
        prescription_id: UUID,
        owner_id: UUID,
    ) -> DuplicateResult:
        """Create a standalone copy of a prescription dated today."""
        source = await self.verifier.verify(EntityType.PRESCRIPTION, prescription_id, owner_id)
        new_id = await self.duplicator.copy_prescription(source, owner_id)
        return DuplicateResult(
            id=new_id,
            outcome=Outcome(
                kind=OutcomeKind.SUCCESS,
                title="Prescription duplicated",
                message=f"A copy of the prescription for {source['patient_name']} has been created",
            ),
        )

    async def duplicate_consultation(
        self,
        consultation_id: UUID,
        owner_id: UUID,
    ) -> DuplicateResult:
        """Create an active copy of a consultation in the same medical history."""
        source = await self.verifier.verify(EntityType.CONSULTATION, consultation_id, owner_id)
        new_id = await self.duplicator.copy_consultation(source, owner_id)
        return DuplicateResult(
            id=new_id,
            outcome=Outcome(
                kind=OutcomeKind.SUCCESS,
                title="Consultation duplicated",
                message="A copy of the consultation has been created",
            ),
        )

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_archived(self, owner_id: UUID) -> dict[str, list[dict]]:
        """Archived patients, consultations and prescriptions, most recent first."""
        return {
            "patients": await self.store.find(
                EntityType.PATIENT, order_by_recent=True, doctor_id=owner_id, is_active=False
            ),
            "consultations": await self.store.find(
                EntityType.CONSULTATION, order_by_recent=True, doctor_id=owner_id, is_active=False
            ),
            "prescriptions": await self.store.find(
                EntityType.PRESCRIPTION, order_by_recent=True, doctor_id=owner_id, is_active=False
            ),
        }

    @staticmethod
    def _check_record_type(entity_type: EntityType) -> None:
        if entity_type not in (EntityType.PRESCRIPTION, EntityType.CONSULTATION):
            raise ValidationException(f"Unsupported record type: {entity_type.label}")
