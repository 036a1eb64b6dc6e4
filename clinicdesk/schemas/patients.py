"""Patient schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

FULL_NAME_MAX_LENGTH = 200


class Gender(str, Enum):
    """Patient gender enumeration."""

    MALE = "male"
    FEMALE = "female"


class RepresentativeRelationship(str, Enum):
    """Relationship of a representative to the patient."""

    PARENT = "parent"
    GUARDIAN = "guardian"
    EMERGENCY_CONTACT = "emergency_contact"
    OTHER = "other"


def _validate_phone(v: str | None) -> str | None:
    if v is None:
        return v
    cleaned = v.replace("-", "").replace(" ", "").replace("(", "").replace(")", "").replace("+", "")
    if not cleaned.isdigit():
        raise ValueError("Phone number must contain only digits and separators")
    if len(cleaned) < 7:
        raise ValueError("Phone number must have at least 7 digits")
    return v


def _validate_birth_date(v: date | None) -> date | None:
    if v and v > date.today():
        raise ValueError("Birth date cannot be in the future")
    return v


# ============================================================================
# Representative Schemas
# ============================================================================


class RepresentativeCreate(BaseModel):
    """Schema for registering a patient representative."""

    full_name: str = Field(..., min_length=1, max_length=200)
    relationship: RepresentativeRelationship
    cedula: str | None = Field(None, max_length=30)
    phone: str | None = Field(None, max_length=20)
    email: str | None = None
    address: str | None = None
    is_primary: bool = False

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        return _validate_phone(v)


class RepresentativeResponse(BaseModel):
    """Representative response schema."""

    id: UUID
    patient_id: UUID
    full_name: str
    relationship: RepresentativeRelationship
    cedula: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    is_primary: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ============================================================================
# Medical History Schemas
# ============================================================================


class MedicalHistoryData(BaseModel):
    """Clinical metadata captured with a patient."""

    blood_type: str | None = Field(None, max_length=10)
    allergies: str | None = None
    chronic_conditions: str | None = None
    current_medications: str | None = None
    family_history: str | None = None
    notes: str | None = None


class MedicalHistoryResponse(MedicalHistoryData):
    """Medical history response schema."""

    id: UUID
    patient_id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ============================================================================
# Patient Schemas
# ============================================================================


class PatientFields(BaseModel):
    """Patient fields as stored, without write-time validation."""

    full_name: str
    cedula: str | None = None
    birth_date: date | None = None
    gender: Gender | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class PatientBase(PatientFields):
    """Base patient schema with common fields."""

    full_name: str = Field(..., min_length=1, max_length=FULL_NAME_MAX_LENGTH)
    cedula: str | None = Field(None, min_length=1, max_length=30)
    phone: str | None = Field(None, max_length=20)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        return _validate_phone(v)

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date | None) -> date | None:
        """Reject birth dates in the future."""
        return _validate_birth_date(v)


class PatientCreate(PatientBase):
    """Schema for registering a patient."""

    medical_history: MedicalHistoryData | None = None
    representatives: list[RepresentativeCreate] = Field(default_factory=list)


class PatientUpdate(BaseModel):
    """Schema for updating a patient.

    Omitted fields are left untouched; ``full_name`` may be omitted but not
    cleared.
    """

    full_name: str | None = Field(None, min_length=1, max_length=FULL_NAME_MAX_LENGTH)
    cedula: str | None = Field(None, min_length=1, max_length=30)
    birth_date: date | None = None
    gender: Gender | None = None
    email: str | None = None
    phone: str | None = Field(None, max_length=20)
    address: str | None = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        return _validate_phone(v)

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date | None) -> date | None:
        """Reject birth dates in the future."""
        return _validate_birth_date(v)

    @model_validator(mode="after")
    def validate_required_fields(self) -> "PatientUpdate":
        """Refuse an explicit null for the patient's name."""
        if "full_name" in self.model_fields_set and self.full_name is None:
            raise ValueError("full_name cannot be null")
        return self


class PatientResponse(PatientFields):
    """Patient response schema."""

    id: UUID
    doctor_id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PatientDetailResponse(PatientResponse):
    """Patient with representatives and medical history."""

    age: int | None = None
    is_minor: bool = False
    representatives: list[RepresentativeResponse] = Field(default_factory=list)
    medical_history: MedicalHistoryResponse | None = None


class PatientListResponse(BaseModel):
    """List of patients."""

    items: list[PatientResponse]
    total: int
