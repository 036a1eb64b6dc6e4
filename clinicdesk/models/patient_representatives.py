"""Patient representative model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
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

patient_representatives = Table(
    "patient_representatives",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "patient_id",
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("full_name", Text, nullable=False),
    Column("relationship", String(30), nullable=False),
    Column("cedula", String(30)),
    Column("phone", String(20)),
    Column("email", Text),
    Column("address", Text),
    Column("is_primary", Boolean, nullable=False, default=False),
    # Soft delete
    Column("is_active", Boolean, nullable=False, default=True, server_default=true()),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "relationship IN ('parent', 'guardian', 'emergency_contact', 'other')",
        name="patient_representatives_relationship_check",
    ),
)
