"""Archive/restore lifecycle value types."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class EntityType(str, Enum):
    """Entity collections managed by the lifecycle."""

    PATIENT = "patient"
    REPRESENTATIVE = "representative"
    MEDICAL_HISTORY = "medical_history"
    CONSULTATION = "consultation"
    PRESCRIPTION = "prescription"

    @property
    def label(self) -> str:
        """Human readable name."""
        return self.value.replace("_", " ")


class Direction(str, Enum):
    """Lifecycle transition direction."""

    ARCHIVE = "archive"
    RESTORE = "restore"

    @property
    def target_active(self) -> bool:
        """Value written to ``is_active`` by this transition."""
        return self is Direction.RESTORE


class OutcomeKind(str, Enum):
    """Notification kinds a UI renders as toasts."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class Outcome(BaseModel):
    """Structured result message for the notification sink."""

    kind: OutcomeKind
    title: str
    message: str


class CascadeSet(BaseModel):
    """Records that must change state together with a root entity.

    Holds ids only; references point from child to parent and are resolved
    by the cascade resolver, never navigated from the parent.
    """

    root_type: EntityType
    root_id: UUID
    patient_id: UUID | None = None
    patient_name: str | None = None
    patient_active: bool | None = None
    medical_history_id: UUID | None = None
    consultation_ids: list[UUID] = Field(default_factory=list)
    prescription_ids: list[UUID] = Field(default_factory=list)
    representative_ids: list[UUID] = Field(default_factory=list)

    @property
    def includes_patient(self) -> bool:
        """Whether the set covers a whole patient hierarchy."""
        return self.patient_id is not None

    @property
    def anchor(self) -> tuple[EntityType, UUID]:
        """Top-most entity of the set; its update failing is fatal."""
        if self.patient_id is not None:
            return EntityType.PATIENT, self.patient_id
        return self.root_type, self.root_id

    def size(self) -> int:
        """Total number of rows in the set."""
        total = len(self.consultation_ids) + len(self.prescription_ids)
        total += len(self.representative_ids)
        if self.medical_history_id is not None:
            total += 1
        if self.patient_id is not None:
            total += 1
        return total


class CascadePreview(BaseModel):
    """Counts of records a transition would touch, computed without mutating."""

    root_type: EntityType
    root_id: UUID
    includes_patient: bool
    patient_id: UUID | None = None
    patient_name: str | None = None
    consultations: int = 0
    prescriptions: int = 0
    representatives: int = 0
    requires_confirmation: bool = False


class TransitionReport(BaseModel):
    """Result of applying a transition to a cascade set."""

    root_type: EntityType
    root_id: UUID
    direction: Direction
    success: bool = False
    counts: dict[EntityType, int] = Field(default_factory=dict)
    failures: dict[EntityType, list[str]] = Field(default_factory=dict)

    @property
    def has_failures(self) -> bool:
        """Whether any dependent update failed."""
        return any(self.failures.values())

    def record_success(self, entity_type: EntityType) -> None:
        """Count one transitioned row."""
        self.counts[entity_type] = self.counts.get(entity_type, 0) + 1

    def record_failure(self, entity_type: EntityType, entity_id: UUID, error: str) -> None:
        """Record one failed row."""
        self.failures.setdefault(entity_type, []).append(f"{entity_id}: {error}")


class LifecycleResult(BaseModel):
    """Response of an archive/restore operation."""

    outcome: Outcome
    report: TransitionReport | None = None
    preview: CascadePreview | None = None


class DuplicateResult(BaseModel):
    """Response of a duplicate operation."""

    id: UUID
    outcome: Outcome


class DeletionMode(str, Enum):
    """How a delete request was carried out."""

    DELETED = "deleted"
    ARCHIVED = "archived"


class DeletionResult(BaseModel):
    """Response of a delete operation."""

    mode: DeletionMode
    outcome: Outcome
    report: TransitionReport | None = None
