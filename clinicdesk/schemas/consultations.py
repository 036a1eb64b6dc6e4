"""Consultation schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

VitalSignValue = float | str


class VitalSigns(BaseModel):
    """Vital signs recorded during a consultation.

    Only the fixed vocabulary below is accepted; absent signs are omitted
    from the stored map.
    """

    blood_pressure: VitalSignValue | None = None
    temperature: VitalSignValue | None = None
    heart_rate: VitalSignValue | None = None
    respiratory_rate: VitalSignValue | None = None
    height: VitalSignValue | None = None
    weight: VitalSignValue | None = None
    oxygen_saturation: VitalSignValue | None = None
    glucose: VitalSignValue | None = None

    model_config = {"extra": "forbid"}

    def to_map(self) -> dict[str, VitalSignValue]:
        """Sparse key to value map."""
        return self.model_dump(exclude_none=True)


class ConsultationCreate(BaseModel):
    """Schema for recording a consultation."""

    consultation_date: datetime | None = None
    reason: str = Field(..., min_length=1, max_length=500)
    symptoms: str | None = None
    physical_examination: str | None = None
    diagnosis: str | None = None
    treatment: str | None = None
    notes: str | None = Field(None, max_length=2000)
    vital_signs: VitalSigns | None = None


class ConsultationUpdate(BaseModel):
    """Schema for editing a consultation; omitted fields are left untouched."""

    consultation_date: datetime | None = None
    reason: str | None = Field(None, min_length=1, max_length=500)
    symptoms: str | None = None
    physical_examination: str | None = None
    diagnosis: str | None = None
    treatment: str | None = None
    notes: str | None = Field(None, max_length=2000)
    vital_signs: VitalSigns | None = None

    @model_validator(mode="after")
    def validate_required_fields(self) -> "ConsultationUpdate":
        """Refuse an explicit null for the date or the reason."""
        for field in ("consultation_date", "reason"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class ConsultationResponse(BaseModel):
    """Consultation response schema."""

    id: UUID
    medical_history_id: UUID
    doctor_id: UUID
    consultation_date: datetime
    reason: str
    symptoms: str | None = None
    physical_examination: str | None = None
    diagnosis: str | None = None
    treatment: str | None = None
    notes: str | None = None
    vital_signs: dict[str, VitalSignValue] | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
