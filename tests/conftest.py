import os
from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Load environment variables from .env file
load_dotenv()

# Tests run against an in-memory database unless TEST_DATABASE_URL says otherwise
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from clinicdesk.core.security import create_access_token  # noqa: E402
from clinicdesk.database import get_db  # noqa: E402
from clinicdesk.main import app  # noqa: E402
from clinicdesk.models import doctors, metadata  # noqa: E402
from clinicdesk.schemas.lifecycle import EntityType  # noqa: E402
from clinicdesk.services.entity_store import EntityStore  # noqa: E402


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh schema."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,  # Set to True for SQL debugging
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestSessionLocal() as session:
        yield session

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def store(db_session: AsyncSession) -> EntityStore:
    """Entity store bound to the test session."""
    return EntityStore(db_session)


async def _insert_doctor(db_session: AsyncSession, email: str, full_name: str) -> dict:
    doctor_id = uuid4()
    doctor_data = {
        "id": doctor_id,
        "email": email,
        "full_name": full_name,
        "license_number": f"LIC-{doctor_id.hex[:8]}",
        "specialty": "General Medicine",
        "is_verified": True,
        "is_active": True,
    }
    await db_session.execute(insert(doctors).values(**doctor_data))
    await db_session.commit()
    return doctor_data


@pytest_asyncio.fixture
async def doctor(db_session: AsyncSession) -> dict:
    """Create the practitioner the tests act as."""
    return await _insert_doctor(db_session, "house@example.com", "Dr. Gregory House")


@pytest_asyncio.fixture
async def other_doctor(db_session: AsyncSession) -> dict:
    """Create a second practitioner owning nothing of the first one's."""
    return await _insert_doctor(db_session, "wilson@example.com", "Dr. James Wilson")


@pytest.fixture
def auth_headers(doctor) -> dict:
    """Create authentication headers for testing protected endpoints."""
    token = create_access_token(doctor["id"], expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_doctor) -> dict:
    """Authentication headers of the second practitioner."""
    token = create_access_token(other_doctor["id"], expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seed_patient(store: EntityStore, doctor):
    """Factory building a patient hierarchy directly through the store.

    Returns a dict with the patient, its history (or None) and the ids of
    its consultations, prescriptions and representatives.
    """

    async def _seed(
        full_name: str = "Ana Pérez",
        cedula: str | None = "V-12345678",
        consultations: int = 2,
        prescriptions: int = 3,
        representatives: int = 1,
        with_history: bool = True,
        owner_id=None,
    ) -> dict:
        owner_id = owner_id or doctor["id"]
        patient = await store.insert(
            EntityType.PATIENT,
            {
                "doctor_id": owner_id,
                "full_name": full_name,
                "cedula": cedula,
                "birth_date": date(1985, 4, 12),
                "gender": "female",
                "phone": "0414-5551234",
                "address": "Av. Principal 12",
                "is_active": True,
            },
        )

        representative_ids = []
        for index in range(representatives):
            representative = await store.insert(
                EntityType.REPRESENTATIVE,
                {
                    "patient_id": patient["id"],
                    "full_name": f"Representative {index}",
                    "relationship": "parent",
                    "is_primary": index == 0,
                    "is_active": True,
                },
            )
            representative_ids.append(representative["id"])

        seeded = {
            "patient": patient,
            "history": None,
            "consultation_ids": [],
            "prescription_ids": [],
            "representative_ids": representative_ids,
        }
        if not with_history:
            return seeded

        history = await store.insert(
            EntityType.MEDICAL_HISTORY,
            {"patient_id": patient["id"], "doctor_id": owner_id, "is_active": True},
        )
        seeded["history"] = history

        for index in range(consultations):
            consultation = await store.insert(
                EntityType.CONSULTATION,
                {
                    "medical_history_id": history["id"],
                    "doctor_id": owner_id,
                    "consultation_date": datetime(2026, 1, index + 1, 9, 30, tzinfo=UTC),
                    "reason": f"Follow-up {index}",
                    "is_active": True,
                },
            )
            seeded["consultation_ids"].append(consultation["id"])

        for index in range(prescriptions):
            prescription = await store.insert(
                EntityType.PRESCRIPTION,
                {
                    "medical_history_id": history["id"],
                    "doctor_id": owner_id,
                    "patient_name": full_name,
                    "patient_cedula": cedula,
                    "diagnosis": "Hypertension",
                    "medications": f"Losartan {50 * (index + 1)}mg",
                    "instructions": "Once daily",
                    "date_prescribed": date(2026, 2, index + 1),
                    "is_active": True,
                },
            )
            seeded["prescription_ids"].append(prescription["id"])

        return seeded

    return _seed
