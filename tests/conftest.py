import os
from collections.abc import AsyncGenerator

# Settings are read at import time, so the test environment goes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_bootstrap.db"
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_FORMAT"] = "console"

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Never overrides the values set above
load_dotenv()

from app.core.redis_client import get_redis_client
from app.database import get_db
from app.main import app
from app.models import metadata

API = "/api/v1"


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the app uses."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex
        return True

    def get(self, key):
        return self.data.get(key)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def exists(self, key):
        return int(key in self.data)

    def ping(self):
        return True

    def close(self):
        pass


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh SQLite database per test with the full schema."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the database and Redis replaced by test doubles."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = lambda: fake_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def login(client: AsyncClient, role: str, email: str, password: str) -> str:
    response = await client.post(
        f"{API}/accounts/{role}/login",
        json={"email": email, "mot_de_passe": password},
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


@pytest.fixture
def admin_data() -> dict:
    return {
        "nom": "Martin",
        "prenom": "Claire",
        "email": "admin@clinic.example.com",
        "mot_de_passe": "admin-pass",
        "telephone": "+33 1 23 45 67 89",
    }


@pytest.fixture
def patient_data() -> dict:
    return {
        "nom": "Durand",
        "prenom": "Paul",
        "email": "paul@patients.example.com",
        "mot_de_passe": "patient-pass",
        "date_naissance": "1985-04-12",
    }


@pytest_asyncio.fixture
async def admin(client, admin_data) -> dict:
    response = await client.post(f"{API}/accounts/admin", json=admin_data)
    assert response.status_code == 201, response.text
    token = await login(client, "admin", admin_data["email"], admin_data["mot_de_passe"])
    return {"id": response.json()["data"]["id"], "token": token, "headers": bearer(token)}


@pytest_asyncio.fixture
async def patient(client, patient_data) -> dict:
    response = await client.post(f"{API}/accounts/patient", json=patient_data)
    assert response.status_code == 201, response.text
    token = await login(client, "patient", patient_data["email"], patient_data["mot_de_passe"])
    return {"id": response.json()["data"]["id"], "token": token, "headers": bearer(token)}


async def create_staff(client, admin_headers, kind: str, role: str, email: str, **extra) -> dict:
    payload = {
        "nom": "Staff",
        "prenom": email.split("@")[0],
        "email": email,
        "mot_de_passe": "staff-pass",
        **extra,
    }
    response = await client.post(f"{API}/admin/{kind}", json=payload, headers=admin_headers)
    assert response.status_code == 201, response.text
    token = await login(client, role, email, "staff-pass")
    return {"id": response.json()["data"]["id"], "token": token, "headers": bearer(token)}


@pytest_asyncio.fixture
async def doctor(client, admin) -> dict:
    return await create_staff(
        client,
        admin["headers"],
        "doctors",
        "docteur",
        "house@clinic.example.com",
        specialite="Cardiologie",
    )


@pytest_asyncio.fixture
async def other_doctor(client, admin) -> dict:
    return await create_staff(
        client,
        admin["headers"],
        "doctors",
        "docteur",
        "wilson@clinic.example.com",
        specialite="Oncologie",
    )


@pytest_asyncio.fixture
async def secretary(client, admin) -> dict:
    return await create_staff(
        client, admin["headers"], "secretaries", "secretaire", "desk@clinic.example.com"
    )


@pytest.fixture
def appointment_data() -> dict:
    return {"date": "2026-02-15", "heure": "10:00", "symptomes": "chest pain"}


@pytest_asyncio.fixture
async def requested_appointment(client, patient, appointment_data) -> dict:
    response = await client.post(
        f"{API}/appointments", json=appointment_data, headers=patient["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def pending_appointment(client, secretary, doctor, requested_appointment) -> dict:
    response = await client.put(
        f"{API}/secretary/appointments/{requested_appointment['id']}/assign",
        json={"docteur_id": doctor["id"]},
        headers=secretary["headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]
