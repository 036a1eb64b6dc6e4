"""Tests for the entity store."""

from datetime import date
from uuid import uuid4

import pytest

from clinicdesk.core.exceptions import StoreError
from clinicdesk.schemas.lifecycle import EntityType


@pytest.mark.asyncio
async def test_insert_and_get(store, doctor):
    """Test inserting a patient and reading it back."""
    patient = await store.insert(
        EntityType.PATIENT,
        {"doctor_id": doctor["id"], "full_name": "Luis Rojas", "is_active": True},
    )

    assert patient["id"] is not None
    assert patient["full_name"] == "Luis Rojas"
    assert patient["created_at"] is not None

    loaded = await store.get(EntityType.PATIENT, patient["id"])
    assert loaded == patient


@pytest.mark.asyncio
async def test_get_missing_returns_none(store):
    """Test that a missing record yields None."""
    assert await store.get(EntityType.PRESCRIPTION, uuid4()) is None


@pytest.mark.asyncio
async def test_find_with_filters(store, seed_patient):
    """Test equality and NULL filters."""
    seeded = await seed_patient()
    await store.insert(
        EntityType.PRESCRIPTION,
        {
            "doctor_id": seeded["patient"]["doctor_id"],
            "patient_name": "Walk-in",
            "diagnosis": "Cold",
            "medications": "Rest",
            "instructions": "Drink fluids",
            "date_prescribed": date(2026, 3, 1),
            "is_active": True,
        },
    )

    linked = await store.find(
        EntityType.PRESCRIPTION, medical_history_id=seeded["history"]["id"]
    )
    detached = await store.find(EntityType.PRESCRIPTION, medical_history_id=None)

    assert {p["id"] for p in linked} == set(seeded["prescription_ids"])
    assert [p["patient_name"] for p in detached] == ["Walk-in"]


@pytest.mark.asyncio
async def test_update_returns_record(store, seed_patient):
    """Test that update patches a single row and returns it."""
    seeded = await seed_patient()
    consultation_id = seeded["consultation_ids"][0]

    updated = await store.update(EntityType.CONSULTATION, consultation_id, {"is_active": False})

    assert updated["id"] == consultation_id
    assert updated["is_active"] is False
    other = await store.get(EntityType.CONSULTATION, seeded["consultation_ids"][1])
    assert other["is_active"] is True


@pytest.mark.asyncio
async def test_update_missing_raises(store):
    """Test that updating a missing record raises StoreError."""
    with pytest.raises(StoreError):
        await store.update(EntityType.PATIENT, uuid4(), {"is_active": False})


@pytest.mark.asyncio
async def test_insert_duplicate_cedula_is_conflict(store, seed_patient, doctor):
    """Test that a unique constraint violation is flagged as a conflict."""
    await seed_patient(cedula="V-1")

    with pytest.raises(StoreError) as exc_info:
        await store.insert(
            EntityType.PATIENT,
            {"doctor_id": doctor["id"], "full_name": "Someone", "cedula": "V-1"},
        )

    assert exc_info.value.conflict is True


@pytest.mark.asyncio
async def test_delete(store, seed_patient):
    """Test permanently deleting a record."""
    seeded = await seed_patient(with_history=False, representatives=0)

    await store.delete(EntityType.PATIENT, seeded["patient"]["id"])

    assert await store.get(EntityType.PATIENT, seeded["patient"]["id"]) is None
