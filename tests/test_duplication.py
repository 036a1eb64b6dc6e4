"""Tests for patient and prescription duplication."""

from datetime import date

import pytest

from clinicdesk.core.exceptions import (
    NotFoundException,
    PartialFailureException,
    StoreError,
    ValidationException,
)
from clinicdesk.schemas.lifecycle import EntityType
from clinicdesk.services.duplication_service import DuplicationService, copy_name
from clinicdesk.services.entity_store import EntityStore


class NoHistoryStore(EntityStore):
    """Store that cannot create medical histories."""

    async def insert(self, entity_type, fields):
        if entity_type is EntityType.MEDICAL_HISTORY:
            raise StoreError("medical_histories is read-only")
        return await super().insert(entity_type, fields)


@pytest.mark.asyncio
async def test_duplicate_patient(store, seed_patient, doctor):
    """Test the copy's name, national ID, history note and status."""
    seeded = await seed_patient(full_name="Ana López", cedula="V-9999")

    new_id = await DuplicationService(store).duplicate(
        EntityType.PATIENT, seeded["patient"]["id"], doctor["id"]
    )

    copy = await store.get(EntityType.PATIENT, new_id)
    assert new_id != seeded["patient"]["id"]
    assert copy["full_name"] == "Ana López (Copy)"
    assert copy["cedula"] is None
    assert copy["is_active"] is True
    assert copy["birth_date"] == seeded["patient"]["birth_date"]
    assert copy["doctor_id"] == doctor["id"]

    histories = await store.find(EntityType.MEDICAL_HISTORY, patient_id=new_id)
    assert len(histories) == 1
    assert histories[0]["notes"] == "Duplicated from: Ana López"
    assert histories[0]["is_active"] is True

    # Nothing clinical is carried over
    assert await store.find(EntityType.CONSULTATION, medical_history_id=histories[0]["id"]) == []
    assert await store.find(EntityType.REPRESENTATIVE, patient_id=new_id) == []


@pytest.mark.asyncio
async def test_duplicate_archived_patient_is_active(store, seed_patient, doctor):
    """Test that a copy of an archived patient starts active."""
    seeded = await seed_patient()
    await store.update(EntityType.PATIENT, seeded["patient"]["id"], {"is_active": False})

    new_id = await DuplicationService(store).duplicate_patient(
        seeded["patient"]["id"], doctor["id"]
    )

    assert (await store.get(EntityType.PATIENT, new_id))["is_active"] is True


@pytest.mark.asyncio
async def test_duplicate_twice_never_reuses_cedula(store, seed_patient, doctor):
    """Test that repeated copies never collide on the national ID."""
    seeded = await seed_patient(cedula="V-555")
    service = DuplicationService(store)

    first = await service.duplicate_patient(seeded["patient"]["id"], doctor["id"])
    second = await service.duplicate_patient(seeded["patient"]["id"], doctor["id"])

    cedulas = [(await store.get(EntityType.PATIENT, i))["cedula"] for i in (first, second)]
    assert cedulas == [None, None]


@pytest.mark.asyncio
async def test_duplicate_history_failure_is_partial(db_session, seed_patient, doctor, store):
    """Test that a failed history insert reports the orphaned copy."""
    seeded = await seed_patient()

    with pytest.raises(PartialFailureException) as exc_info:
        await DuplicationService(NoHistoryStore(db_session)).duplicate_patient(
            seeded["patient"]["id"], doctor["id"]
        )

    created_id = exc_info.value.created_id
    assert created_id is not None
    assert (await store.get(EntityType.PATIENT, created_id))["full_name"].endswith("(Copy)")
    assert exc_info.value.details == {"created_id": str(created_id)}


@pytest.mark.asyncio
async def test_duplicate_prescription_is_detached(store, seed_patient, doctor):
    """Test that a prescription copy has no links and is dated today."""
    seeded = await seed_patient()
    source_id = seeded["prescription_ids"][0]
    await store.update(EntityType.PRESCRIPTION, source_id, {"is_active": False})

    new_id = await DuplicationService(store).duplicate(
        EntityType.PRESCRIPTION, source_id, doctor["id"]
    )

    source = await store.get(EntityType.PRESCRIPTION, source_id)
    copy = await store.get(EntityType.PRESCRIPTION, new_id)
    assert copy["medical_history_id"] is None
    assert copy["consultation_id"] is None
    assert copy["date_prescribed"] == date.today()
    assert copy["is_active"] is True
    assert copy["medications"] == source["medications"]
    assert copy["patient_name"] == source["patient_name"]


@pytest.mark.asyncio
async def test_duplicate_foreign_patient_not_found(store, seed_patient, other_doctor):
    """Test that another practitioner cannot duplicate a patient."""
    seeded = await seed_patient()

    with pytest.raises(NotFoundException):
        await DuplicationService(store).duplicate_patient(
            seeded["patient"]["id"], other_doctor["id"]
        )

    assert len(await store.find(EntityType.PATIENT)) == 1


@pytest.mark.asyncio
async def test_duplicate_representative_rejected(store, seed_patient, doctor):
    """Test that representatives cannot be duplicated on their own."""
    seeded = await seed_patient()

    with pytest.raises(ValidationException):
        await DuplicationService(store).duplicate(
            EntityType.REPRESENTATIVE, seeded["representative_ids"][0], doctor["id"]
        )


def test_copy_name_fits_column_limit():
    """Test that a long name is shortened so the suffix still fits."""
    name = copy_name("A" * 200)

    assert len(name) == 200
    assert name.endswith(" (Copy)")
    assert copy_name("Ana López") == "Ana López (Copy)"


@pytest.mark.asyncio
async def test_duplicate_consultation(store, seed_patient, doctor):
    """Test that a consultation copy stays in the same history and is active."""
    seeded = await seed_patient()
    source_id = seeded["consultation_ids"][0]
    await store.update(EntityType.CONSULTATION, source_id, {"is_active": False})

    new_id = await DuplicationService(store).duplicate(
        EntityType.CONSULTATION, source_id, doctor["id"]
    )

    source = await store.get(EntityType.CONSULTATION, source_id)
    copy = await store.get(EntityType.CONSULTATION, new_id)
    assert new_id != source_id
    assert copy["medical_history_id"] == seeded["history"]["id"]
    assert copy["reason"] == source["reason"]
    assert copy["is_active"] is True
