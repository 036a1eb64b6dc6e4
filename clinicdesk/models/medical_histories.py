"""Medical history model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Table,
    Text,
    Uuid,
    func,
    true,
)

from clinicdesk.models.base import metadata

medical_histories = Table(
    "medical_histories",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # One history per patient
    Column(
        "patient_id",
        Uuid,
        ForeignKey("patients.id"),
        nullable=False,
        unique=True,
        index=True,
    ),
    Column("doctor_id", Uuid, ForeignKey("doctors.id"), nullable=False, index=True),
    # Clinical metadata
    Column("blood_type", String(10)),
    Column("allergies", Text),
    Column("chronic_conditions", Text),
    Column("current_medications", Text),
    Column("family_history", Text),
    Column("notes", Text),
    # Soft delete
    Column("is_active", Boolean, nullable=False, default=True, server_default=true()),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
