"""Create clinical record tables

Revision ID: 001_create_clinical_tables
Revises:
Create Date: 2026-10-17

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
    ]


def _is_active_column() -> sa.Column:
    return sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False)


def upgrade() -> None:
    """Create doctors, patients and clinical record tables."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    op.create_table(
        "doctors",
        _id_column(),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("license_number", sa.String(length=100), nullable=True),
        sa.Column("specialty", sa.String(length=200), nullable=True),
        sa.Column("is_verified", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        _is_active_column(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="doctors_email_key"),
        sa.UniqueConstraint("license_number", name="doctors_license_number_key"),
    )

    op.create_table(
        "patients",
        _id_column(),
        sa.Column("doctor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("cedula", sa.String(length=30), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        _is_active_column(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("doctor_id", "cedula", name="patients_doctor_cedula_key"),
    )
    op.create_index("idx_patients_doctor_id", "patients", ["doctor_id"])
    op.create_index("idx_patients_is_active", "patients", ["is_active"])

    op.create_table(
        "patient_representatives",
        _id_column(),
        sa.Column("patient_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("relationship", sa.String(length=30), nullable=False),
        sa.Column("cedula", sa.String(length=30), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_primary", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        _is_active_column(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "relationship IN ('parent', 'guardian', 'emergency_contact', 'other')",
            name="patient_representatives_relationship_check",
        ),
    )
    op.create_index(
        "idx_patient_representatives_patient_id", "patient_representatives", ["patient_id"]
    )

    op.create_table(
        "medical_histories",
        _id_column(),
        sa.Column("patient_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("doctor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("blood_type", sa.String(length=10), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("chronic_conditions", sa.Text(), nullable=True),
        sa.Column("current_medications", sa.Text(), nullable=True),
        sa.Column("family_history", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _is_active_column(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"]),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"]),
        sa.UniqueConstraint("patient_id", name="medical_histories_patient_id_key"),
    )
    op.create_index("idx_medical_histories_doctor_id", "medical_histories", ["doctor_id"])

    op.create_table(
        "consultations",
        _id_column(),
        sa.Column("medical_history_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("doctor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("consultation_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("symptoms", sa.Text(), nullable=True),
        sa.Column("physical_examination", sa.Text(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("treatment", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("vital_signs", postgresql.JSON(astext_type=sa.Text()), nullable=True),
        _is_active_column(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["medical_history_id"], ["medical_histories.id"]),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"]),
    )
    op.create_index(
        "idx_consultations_medical_history_id", "consultations", ["medical_history_id"]
    )
    op.create_index("idx_consultations_doctor_id", "consultations", ["doctor_id"])
    op.create_index("idx_consultations_is_active", "consultations", ["is_active"])

    op.create_table(
        "prescriptions",
        _id_column(),
        sa.Column("medical_history_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("consultation_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("doctor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("patient_name", sa.Text(), nullable=False),
        sa.Column("patient_age", sa.Integer(), nullable=True),
        sa.Column("patient_cedula", sa.String(length=30), nullable=True),
        sa.Column("patient_phone", sa.String(length=20), nullable=True),
        sa.Column("patient_address", sa.Text(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=False),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("medications", sa.Text(), nullable=False),
        sa.Column("instructions", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("date_prescribed", sa.Date(), nullable=False),
        _is_active_column(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["medical_history_id"], ["medical_histories.id"]),
        sa.ForeignKeyConstraint(["consultation_id"], ["consultations.id"]),
        sa.ForeignKeyConstraint(["doctor_id"], ["doctors.id"]),
    )
    op.create_index(
        "idx_prescriptions_medical_history_id", "prescriptions", ["medical_history_id"]
    )
    op.create_index("idx_prescriptions_doctor_id", "prescriptions", ["doctor_id"])
    op.create_index("idx_prescriptions_is_active", "prescriptions", ["is_active"])


def downgrade() -> None:
    """Drop clinical record tables."""
    op.drop_table("prescriptions")
    op.drop_table("consultations")
    op.drop_table("medical_histories")
    op.drop_table("patient_representatives")
    op.drop_table("patients")
    op.drop_table("doctors")
