"""Prescription model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    Uuid,
    func,
    true,
)

from clinicdesk.models.base import metadata

prescriptions = Table(
    "prescriptions",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Optional links; a prescription for a one-time patient has neither
    Column("medical_history_id", Uuid, ForeignKey("medical_histories.id"), index=True),
    Column("consultation_id", Uuid, ForeignKey("consultations.id")),
    Column("doctor_id", Uuid, ForeignKey("doctors.id"), nullable=False, index=True),
    # Snapshot fields (denormalized for history)
    Column("patient_name", Text, nullable=False),
    Column("patient_age", Integer),
    Column("patient_cedula", String(30)),
    Column("patient_phone", String(20)),
    Column("patient_address", Text),
    # Clinical content
    Column("diagnosis", Text, nullable=False),
    Column("allergies", Text),
    Column("medications", Text, nullable=False),
    Column("instructions", Text, nullable=False),
    Column("notes", Text),
    Column("date_prescribed", Date, nullable=False),
    # Soft delete
    Column("is_active", Boolean, nullable=False, default=True, server_default=true(), index=True),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
