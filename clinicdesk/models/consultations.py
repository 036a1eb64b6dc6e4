"""Consultation model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Table,
    Text,
    Uuid,
    func,
    true,
)

from clinicdesk.models.base import metadata

consultations = Table(
    "consultations",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "medical_history_id",
        Uuid,
        ForeignKey("medical_histories.id"),
        nullable=False,
        index=True,
    ),
    Column("doctor_id", Uuid, ForeignKey("doctors.id"), nullable=False, index=True),
    # Encounter details
    Column("consultation_date", DateTime(timezone=True), nullable=False),
    Column("reason", Text, nullable=False),
    Column("symptoms", Text),
    Column("physical_examination", Text),
    Column("diagnosis", Text),
    Column("treatment", Text),
    Column("notes", Text),
    # Sparse map keyed by the vital sign vocabulary
    Column("vital_signs", JSON),
    # Soft delete
    Column("is_active", Boolean, nullable=False, default=True, server_default=true(), index=True),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
