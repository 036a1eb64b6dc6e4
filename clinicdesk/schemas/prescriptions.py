"""Prescription schemas for request/response validation."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

REQUIRED_PRESCRIPTION_FIELDS = (
    "patient_name",
    "diagnosis",
    "medications",
    "instructions",
    "date_prescribed",
)


class PrescriptionCreate(BaseModel):
    """Schema for writing a prescription.

    Either ``patient_id`` links the prescription to a registered patient, or
    the inline patient fields describe a one-time patient.
    """

    patient_id: UUID | None = None
    consultation_id: UUID | None = None
    patient_name: str | None = Field(None, min_length=1, max_length=200)
    patient_age: int | None = Field(None, ge=0, le=150)
    patient_cedula: str | None = Field(None, max_length=30)
    patient_phone: str | None = Field(None, max_length=20)
    patient_address: str | None = None
    diagnosis: str = Field(..., min_length=1)
    allergies: str | None = None
    medications: str = Field(..., min_length=1)
    instructions: str = Field(..., min_length=1)
    notes: str | None = None
    date_prescribed: date | None = None

    @model_validator(mode="after")
    def validate_patient(self) -> "PrescriptionCreate":
        """Require a registered patient, a consultation or a patient name."""
        if self.patient_id is None and self.consultation_id is None and not self.patient_name:
            raise ValueError("patient_id, consultation_id or patient_name is required")
        return self


class PrescriptionUpdate(BaseModel):
    """Schema for editing a prescription; omitted fields are left untouched.

    Links to a patient or consultation are fixed once written.
    """

    patient_name: str | None = Field(None, min_length=1, max_length=200)
    patient_age: int | None = Field(None, ge=0, le=150)
    patient_cedula: str | None = Field(None, max_length=30)
    patient_phone: str | None = Field(None, max_length=20)
    patient_address: str | None = None
    diagnosis: str | None = Field(None, min_length=1)
    allergies: str | None = None
    medications: str | None = Field(None, min_length=1)
    instructions: str | None = Field(None, min_length=1)
    notes: str | None = None
    date_prescribed: date | None = None

    @model_validator(mode="after")
    def validate_required_fields(self) -> "PrescriptionUpdate":
        """Refuse an explicit null for fields every prescription carries."""
        for field in REQUIRED_PRESCRIPTION_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class PrescriptionResponse(BaseModel):
    """Prescription response schema."""

    id: UUID
    medical_history_id: UUID | None = None
    consultation_id: UUID | None = None
    doctor_id: UUID
    patient_name: str
    patient_age: int | None = None
    patient_cedula: str | None = None
    patient_phone: str | None = None
    patient_address: str | None = None
    diagnosis: str
    allergies: str | None = None
    medications: str
    instructions: str
    notes: str | None = None
    date_prescribed: date
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PrescriptionListResponse(BaseModel):
    """List of prescriptions."""

    items: list[PrescriptionResponse]
    total: int

