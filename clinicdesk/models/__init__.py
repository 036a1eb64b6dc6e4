"""Database models."""

from clinicdesk.models.base import metadata
from clinicdesk.models.consultations import consultations
from clinicdesk.models.doctors import doctors
from clinicdesk.models.medical_histories import medical_histories
from clinicdesk.models.patient_representatives import patient_representatives
from clinicdesk.models.patients import patients
from clinicdesk.models.prescriptions import prescriptions

__all__ = [
    "consultations",
    "doctors",
    "medical_histories",
    "metadata",
    "patient_representatives",
    "patients",
    "prescriptions",
]
