"""Patient model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    true,
)

from clinicdesk.models.base import metadata

patients = Table(
    "patients",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Owning practitioner
    Column(
        "doctor_id",
        Uuid,
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Identity
    Column("full_name", Text, nullable=False),
    Column("cedula", String(30)),
    Column("birth_date", Date),
    Column("gender", String(20)),
    # Contact
    Column("email", Text),
    Column("phone", String(20)),
    Column("address", Text),
    # Soft delete
    Column("is_active", Boolean, nullable=False, default=True, server_default=true(), index=True),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("doctor_id", "cedula", name="patients_doctor_cedula_key"),
)
