"""Archive/restore transitions over cascade sets."""

from uuid import UUID

import structlog

from clinicdesk.core.exceptions import RootUpdateException, StoreError
from clinicdesk.schemas.lifecycle import (
    CascadePreview,
    CascadeSet,
    Direction,
    EntityType,
    TransitionReport,
)
from clinicdesk.services.entity_store import EntityStore

logger = structlog.get_logger()

# Children before parents, so an interrupted archive never leaves an active
# child under an archived parent
ARCHIVE_ORDER = (
    EntityType.CONSULTATION,
    EntityType.PRESCRIPTION,
    EntityType.MEDICAL_HISTORY,
    EntityType.REPRESENTATIVE,
    EntityType.PATIENT,
)

RESTORE_ORDER = (
    EntityType.PATIENT,
    EntityType.MEDICAL_HISTORY,
    EntityType.CONSULTATION,
    EntityType.PRESCRIPTION,
    EntityType.REPRESENTATIVE,
)


class LifecycleEngine:
    """Applies ``is_active`` flips to a cascade set in dependency order.

    Updates run one at a time. A failing dependent is recorded and skipped;
    a failing root (or the patient anchoring the set) aborts the transition.
    """

    def __init__(self, store: EntityStore):
        """Initialize engine with an entity store."""
        self.store = store

    @staticmethod
    def order_for(direction: Direction) -> tuple[EntityType, ...]:
        """Entity type order for a direction."""
        return ARCHIVE_ORDER if direction is Direction.ARCHIVE else RESTORE_ORDER

    @staticmethod
    def _ids_of(cascade: CascadeSet, entity_type: EntityType) -> list[UUID]:
        if entity_type is EntityType.PATIENT:
            return [cascade.patient_id] if cascade.patient_id else []
        if entity_type is EntityType.MEDICAL_HISTORY:
            return [cascade.medical_history_id] if cascade.medical_history_id else []
        if entity_type is EntityType.CONSULTATION:
            return list(cascade.consultation_ids)
        if entity_type is EntityType.PRESCRIPTION:
            return list(cascade.prescription_ids)
        return list(cascade.representative_ids)

    def preview(self, cascade: CascadeSet) -> CascadePreview:
        """Counts of records a transition would touch. Never mutates."""
        return CascadePreview(
            root_type=cascade.root_type,
            root_id=cascade.root_id,
            includes_patient=cascade.includes_patient,
            patient_id=cascade.patient_id,
            patient_name=cascade.patient_name,
            consultations=len(cascade.consultation_ids),
            prescriptions=len(cascade.prescription_ids),
            representatives=len(cascade.representative_ids),
            requires_confirmation=(
                cascade.includes_patient and cascade.root_type is not EntityType.PATIENT
            ),
        )

    async def transition(self, cascade: CascadeSet, direction: Direction) -> TransitionReport:
        """
        Apply an archive or restore transition to every record of a cascade set.

        Args:
            cascade: Resolved cascade set
            direction: Archive or restore

        Returns:
            Transition report; ``success`` is true once the root has been updated

        Raises:
            RootUpdateException: If the root or anchoring patient update fails
        """
        report = TransitionReport(
            root_type=cascade.root_type,
            root_id=cascade.root_id,
            direction=direction,
        )
        fatal = {(cascade.root_type, cascade.root_id), cascade.anchor}
        patch = {"is_active": direction.target_active}

        for entity_type in self.order_for(direction):
            for entity_id in self._ids_of(cascade, entity_type):
                try:
                    await self.store.update(entity_type, entity_id, patch)
                except StoreError as e:
                    if (entity_type, entity_id) in fatal:
                        logger.error(
                            "cascade_root_failed",
                            direction=direction.value,
                            entity_type=entity_type.value,
                            entity_id=str(entity_id),
                            error=e.message,
                        )
                        report.record_failure(entity_type, entity_id, e.message)
                        raise RootUpdateException(
                            f"Could not {direction.value} {entity_type.label} {entity_id}",
                            report=report,
                        ) from e

                    logger.warning(
                        "cascade_step_failed",
                        direction=direction.value,
                        entity_type=entity_type.value,
                        entity_id=str(entity_id),
                        error=e.message,
                    )
                    report.record_failure(entity_type, entity_id, e.message)
                    continue

                report.record_success(entity_type)

        report.success = True
        logger.info(
            "cascade_transition_completed",
            direction=direction.value,
            root_type=cascade.root_type.value,
            root_id=str(cascade.root_id),
            counts={k.value: v for k, v in report.counts.items()},
            failed={k.value: len(v) for k, v in report.failures.items()},
        )
        return report
