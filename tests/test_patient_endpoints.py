"""Tests for patient endpoints."""

from datetime import date

import pytest

from clinicdesk.schemas.lifecycle import EntityType


@pytest.fixture
def sample_patient_data() -> dict:
    """Sample patient registration payload."""
    return {
        "full_name": "Ana López",
        "cedula": "V-12345678",
        "birth_date": "1985-04-12",
        "gender": "female",
        "phone": "+58 414 555 1234",
        "address": "Av. Principal 12, Caracas",
        "medical_history": {"blood_type": "A+", "allergies": "Penicillin"},
        "representatives": [{"full_name": "Pedro López", "relationship": "emergency_contact"}],
    }


@pytest.mark.asyncio
async def test_create_patient(client, auth_headers, sample_patient_data):
    """Test registering a patient."""
    response = await client.post(
        "/api/v1/patients/", json=sample_patient_data, headers=auth_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["full_name"] == "Ana López"
    assert data["is_active"] is True
    assert data["medical_history"]["blood_type"] == "A+"
    assert data["representatives"][0]["is_primary"] is True
    assert data["age"] >= 40


@pytest.mark.asyncio
async def test_create_patient_unauthenticated(client, sample_patient_data):
    """Test that registration requires a session."""
    response = await client.post("/api/v1/patients/", json=sample_patient_data)

    assert response.status_code == 401
    assert response.json()["error"] == "UnauthenticatedException"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_create_patient_invalid_token(client, sample_patient_data):
    """Test that a malformed token is rejected."""
    response = await client.post(
        "/api/v1/patients/",
        json=sample_patient_data,
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_patient_invalid_phone(client, auth_headers, sample_patient_data):
    """Test request validation errors."""
    sample_patient_data["phone"] = "call me"

    response = await client.post(
        "/api/v1/patients/", json=sample_patient_data, headers=auth_headers
    )

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_create_patient_duplicate_cedula(client, auth_headers, sample_patient_data):
    """Test that a repeated national ID conflicts."""
    await client.post("/api/v1/patients/", json=sample_patient_data, headers=auth_headers)

    response = await client.post(
        "/api/v1/patients/", json=sample_patient_data, headers=auth_headers
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_and_get_patients(client, auth_headers, sample_patient_data):
    """Test listing, searching and fetching patients."""
    created = (
        await client.post("/api/v1/patients/", json=sample_patient_data, headers=auth_headers)
    ).json()

    listed = await client.get("/api/v1/patients/", headers=auth_headers)
    searched = await client.get(
        "/api/v1/patients/", params={"search": "nobody"}, headers=auth_headers
    )
    fetched = await client.get(f"/api/v1/patients/{created['id']}", headers=auth_headers)

    assert listed.json()["total"] == 1
    assert searched.json()["items"] == []
    assert fetched.status_code == 200
    assert fetched.json()["id"] == created["id"]


@pytest.mark.asyncio
async def test_get_foreign_patient(client, auth_headers, other_auth_headers, sample_patient_data):
    """Test that another practitioner gets a 404."""
    created = (
        await client.post("/api/v1/patients/", json=sample_patient_data, headers=auth_headers)
    ).json()

    response = await client.get(f"/api/v1/patients/{created['id']}", headers=other_auth_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Patient not found"


@pytest.mark.asyncio
async def test_update_patient(client, auth_headers, sample_patient_data):
    """Test updating a patient."""
    created = (
        await client.post("/api/v1/patients/", json=sample_patient_data, headers=auth_headers)
    ).json()

    response = await client.put(
        f"/api/v1/patients/{created['id']}",
        json={"address": "Calle 5, Valencia"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["address"] == "Calle 5, Valencia"


@pytest.mark.asyncio
async def test_record_consultation(client, auth_headers, sample_patient_data):
    """Test recording and listing consultations."""
    created = (
        await client.post("/api/v1/patients/", json=sample_patient_data, headers=auth_headers)
    ).json()

    response = await client.post(
        f"/api/v1/patients/{created['id']}/consultations",
        json={
            "reason": "Chest pain",
            "vital_signs": {"blood_pressure": "140/90", "heart_rate": 88},
        },
        headers=auth_headers,
    )
    listed = await client.get(
        f"/api/v1/patients/{created['id']}/consultations", headers=auth_headers
    )

    assert response.status_code == 201
    assert response.json()["vital_signs"] == {"blood_pressure": "140/90", "heart_rate": 88}
    assert [c["id"] for c in listed.json()] == [response.json()["id"]]


@pytest.mark.asyncio
async def test_unknown_vital_sign_rejected(client, auth_headers, sample_patient_data):
    """Test that vital signs outside the vocabulary are rejected."""
    created = (
        await client.post("/api/v1/patients/", json=sample_patient_data, headers=auth_headers)
    ).json()

    response = await client.post(
        f"/api/v1/patients/{created['id']}/consultations",
        json={"reason": "Checkup", "vital_signs": {"pulse": 70}},
        headers=auth_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_total_counts_beyond_page(client, auth_headers, seed_patient):
    """Test that the total is the number of matches, not the page size."""
    for index in range(3):
        await seed_patient(full_name=f"Patient {index}", cedula=f"V-{index}")

    response = await client.get(
        "/api/v1/patients/", params={"limit": 2}, headers=auth_headers
    )

    assert len(response.json()["items"]) == 2
    assert response.json()["total"] == 3


@pytest.mark.asyncio
async def test_duplicate_long_name_stays_readable(client, auth_headers, seed_patient):
    """Test that copying a patient with a maximum-length name keeps the list readable."""
    seeded = await seed_patient(full_name="A" * 200)

    response = await client.post(
        f"/api/v1/patients/{seeded['patient']['id']}/duplicate", headers=auth_headers
    )
    listed = await client.get("/api/v1/patients/", headers=auth_headers)
    fetched = await client.get(f"/api/v1/patients/{response.json()['id']}", headers=auth_headers)

    assert response.status_code == 201
    assert listed.status_code == 200
    assert listed.json()["total"] == 2
    assert fetched.status_code == 200
    assert len(fetched.json()["full_name"]) == 200
    assert fetched.json()["full_name"].endswith(" (Copy)")


@pytest.mark.asyncio
async def test_update_future_birth_date_rejected(client, auth_headers, store, seed_patient):
    """Test that a future birth date is refused before it is stored."""
    seeded = await seed_patient()
    patient_id = seeded["patient"]["id"]

    response = await client.put(
        f"/api/v1/patients/{patient_id}",
        json={"birth_date": "2099-01-01"},
        headers=auth_headers,
    )
    fetched = await client.get(f"/api/v1/patients/{patient_id}", headers=auth_headers)

    assert response.status_code == 422
    assert fetched.status_code == 200
    assert fetched.json()["birth_date"] == "1985-04-12"


@pytest.mark.asyncio
async def test_stored_rows_always_readable(client, auth_headers, store, seed_patient):
    """Test that responses do not re-apply write validation to stored data."""
    seeded = await seed_patient()
    patient_id = seeded["patient"]["id"]
    await store.update(EntityType.PATIENT, patient_id, {"birth_date": date(2099, 1, 1)})

    response = await client.get(f"/api/v1/patients/{patient_id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["birth_date"] == "2099-01-01"


@pytest.mark.asyncio
async def test_update_null_name_rejected(client, auth_headers, seed_patient):
    """Test that clearing the name is a validation error without database details."""
    seeded = await seed_patient()

    response = await client.put(
        f"/api/v1/patients/{seeded['patient']['id']}",
        json={"full_name": None},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert "SQL" not in response.text


@pytest.mark.asyncio
async def test_update_to_minor_without_representative(client, auth_headers, store, seed_patient):
    """Test that a patient without representatives cannot become a minor."""
    seeded = await seed_patient(representatives=0)
    patient_id = seeded["patient"]["id"]

    response = await client.put(
        f"/api/v1/patients/{patient_id}",
        json={"birth_date": "2020-01-01"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationException"
    assert (await store.get(EntityType.PATIENT, patient_id))["birth_date"] == date(1985, 4, 12)
