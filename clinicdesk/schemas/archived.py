"""Archived records listing schema."""

from pydantic import BaseModel

from clinicdesk.schemas.consultations import ConsultationResponse
from clinicdesk.schemas.patients import PatientResponse
from clinicdesk.schemas.prescriptions import PrescriptionResponse


class ArchivedResponse(BaseModel):
    """Archived records of a practitioner, most recent first."""

    patients: list[PatientResponse]
    consultations: list[ConsultationResponse]
    prescriptions: list[PrescriptionResponse]
