"""
Centralized Test Configuration.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from dataclasses import dataclass, field

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database import get_db, Base
from app.core.cache import RedisCache
from app.core.redis_lifecyle import get_cache
from app import models  # noqa: F401

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

@event.listens_for(engine.sync_engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}

    async def ping(self):
        return True

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                removed += 1
        return removed

    async def aclose(self):
        self.store = {}


@pytest.fixture
def redis_client():
    return MockRedis()


@pytest.fixture(autouse=True)
async def setup_database(redis_client):
    """Create tables and wire overrides before each test, drop afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_cache():
        yield RedisCache(redis_client)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = override_get_cache

    yield

    app.dependency_overrides = {}
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for assertions against the database
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@dataclass
class RegisteredUser:
    id: str
    username: str
    email: str
    headers: dict = field(default_factory=dict)


@pytest.fixture
def create_user(client):
    async def _create_user(username: str) -> RegisteredUser:
        email = f"{username}@expensio.io"
        password = "password123"
        response = await client.post(
            "/auth/signup",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        login = await client.post("/auth/login", json={"username": username, "password": password})
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        return RegisteredUser(
            id=response.json()["id"],
            username=username,
            email=email,
            headers={"Authorization": f"Bearer {token}"},
        )
    return _create_user


@pytest.fixture
def create_trip(client):
    async def _create_trip(owner: RegisteredUser, **overrides) -> dict:
        payload = {
            "destination": "Lisbon",
            "purpose": "Team offsite",
            "start_date": "2026-11-02",
            "end_date": "2026-11-06",
            "budget": "1000",
        }
        payload.update(overrides)
        response = await client.post("/trips", json=payload, headers=owner.headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create_trip


@pytest.fixture
async def owner(create_user):
    return await create_user("owner")


@pytest.fixture
async def collaborator(create_user):
    return await create_user("carol")


@pytest.fixture
async def trip(create_trip, owner):
    return await create_trip(owner)


@pytest.fixture
async def accepted_trip(client, trip, owner, collaborator):
    """A trip where ``collaborator`` accepted a 200 pledge."""
    invite = await client.post(
        f"/collaborations/{trip['id']}/invite",
        json={"email": collaborator.email, "budget_contribution": 200},
        headers=owner.headers,
    )
    assert invite.status_code == 200, invite.text
    reply = await client.patch(
        f"/collaborations/{trip['id']}/respond",
        json={"status": "accepted"},
        headers=collaborator.headers,
    )
    assert reply.status_code == 200, reply.text
    return trip
