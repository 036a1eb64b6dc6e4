"""Tests for cascade set resolution."""

from datetime import date
from uuid import uuid4

import pytest

from clinicdesk.core.exceptions import NotFoundException, ValidationException
from clinicdesk.schemas.lifecycle import EntityType
from clinicdesk.services.cascade_resolver import CascadeResolver


@pytest.mark.asyncio
async def test_patient_root_covers_hierarchy(store, seed_patient):
    """Test that a patient cascade includes every dependent record."""
    seeded = await seed_patient(consultations=2, prescriptions=3, representatives=1)
    patient_id = seeded["patient"]["id"]

    cascade = await CascadeResolver(store).resolve(EntityType.PATIENT, patient_id)

    assert cascade.patient_id == patient_id
    assert cascade.patient_name == "Ana Pérez"
    assert cascade.medical_history_id == seeded["history"]["id"]
    assert set(cascade.consultation_ids) == set(seeded["consultation_ids"])
    assert set(cascade.prescription_ids) == set(seeded["prescription_ids"])
    assert cascade.representative_ids == seeded["representative_ids"]
    assert cascade.size() == 8


@pytest.mark.asyncio
async def test_patient_without_history(store, seed_patient):
    """Test a patient that never had a medical history."""
    seeded = await seed_patient(with_history=False, representatives=2)

    cascade = await CascadeResolver(store).resolve(EntityType.PATIENT, seeded["patient"]["id"])

    assert cascade.medical_history_id is None
    assert cascade.consultation_ids == []
    assert cascade.prescription_ids == []
    assert len(cascade.representative_ids) == 2


@pytest.mark.asyncio
async def test_detached_prescription_stays_alone(store, doctor):
    """Test that a prescription without history is its own cascade."""
    prescription = await store.insert(
        EntityType.PRESCRIPTION,
        {
            "doctor_id": doctor["id"],
            "patient_name": "Walk-in",
            "diagnosis": "Cold",
            "medications": "Rest",
            "instructions": "Drink fluids",
            "date_prescribed": date(2026, 3, 1),
            "is_active": True,
        },
    )

    cascade = await CascadeResolver(store).resolve(EntityType.PRESCRIPTION, prescription["id"])

    assert cascade.prescription_ids == [prescription["id"]]
    assert not cascade.includes_patient
    assert cascade.size() == 1


@pytest.mark.asyncio
async def test_record_of_active_patient_stays_alone(store, seed_patient):
    """Test that a consultation of an active patient is not expanded."""
    seeded = await seed_patient()
    consultation_id = seeded["consultation_ids"][0]

    cascade = await CascadeResolver(store).resolve(EntityType.CONSULTATION, consultation_id)

    assert cascade.consultation_ids == [consultation_id]
    assert cascade.prescription_ids == []
    assert not cascade.includes_patient
    assert cascade.patient_active is True


@pytest.mark.asyncio
async def test_record_of_archived_patient_expands(store, seed_patient):
    """Test that a prescription of an archived patient pulls in the patient."""
    seeded = await seed_patient()
    patient_id = seeded["patient"]["id"]
    await store.update(EntityType.PATIENT, patient_id, {"is_active": False})
    prescription_id = seeded["prescription_ids"][1]

    cascade = await CascadeResolver(store).resolve(EntityType.PRESCRIPTION, prescription_id)

    assert cascade.root_type is EntityType.PRESCRIPTION
    assert cascade.root_id == prescription_id
    assert cascade.patient_id == patient_id
    assert prescription_id in cascade.prescription_ids
    assert set(cascade.consultation_ids) == set(seeded["consultation_ids"])
    assert cascade.representative_ids == seeded["representative_ids"]


@pytest.mark.asyncio
async def test_expansion_can_be_disabled(store, seed_patient):
    """Test that expansion of an archived patient is optional."""
    seeded = await seed_patient()
    await store.update(EntityType.PATIENT, seeded["patient"]["id"], {"is_active": False})

    cascade = await CascadeResolver(store).resolve(
        EntityType.PRESCRIPTION,
        seeded["prescription_ids"][0],
        expand_archived_patient=False,
    )

    assert not cascade.includes_patient
    assert cascade.prescription_ids == [seeded["prescription_ids"][0]]


@pytest.mark.asyncio
async def test_missing_root(store):
    """Test that an unknown root is not found."""
    with pytest.raises(NotFoundException):
        await CascadeResolver(store).resolve(EntityType.PATIENT, uuid4())


@pytest.mark.asyncio
async def test_representative_cannot_be_root(store, seed_patient):
    """Test that only patients and clinical records can be roots."""
    seeded = await seed_patient()

    with pytest.raises(ValidationException):
        await CascadeResolver(store).resolve(
            EntityType.REPRESENTATIVE, seeded["representative_ids"][0]
        )
