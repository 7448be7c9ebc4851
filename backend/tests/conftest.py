"""
Centralized Test Configuration.

Every test gets a fresh in-memory SQLite database seeded with the demo
dataset (users u1-u5, parcels p1-p4), a MockRedis in place of the real
client, and a text generator without an API key.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.core.config import settings
from backend.app.core.jwt import create_access_token
from backend.app.core.redis_client import get_redis
from backend.app.core.reliability import ai_circuit_breaker
from backend.app.repositories.demo_data import DEMO_USERS, build_demo_parcels, build_demo_users
from backend.app.repositories.memory import InMemoryStore
from backend.app.services.text_generation import TextGenerator, get_text_generator
import backend.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None, nx=False):
        if self._closed:
            return False
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


# Redis Fixture (Session Scope)
@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session."""

    # Patch the global redis client used by token revocation and the request guard
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return redis_client_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_text_generator] = lambda: TextGenerator(api_key=None)
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create and seed tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestingSessionLocal() as session:
        session.add_all(build_demo_users())
        await session.flush()
        session.add_all(build_demo_parcels())
        await session.commit()

    await redis_client_session.flushdb()
    ai_circuit_breaker.reset_state()
    app.state.memory_store = None

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def mock_backend(monkeypatch):
    """Serve users and parcels from a fresh in-memory demo store."""
    monkeypatch.setattr(settings, "use_mock_backend", True)
    store = InMemoryStore()
    app.state.memory_store = store
    return store


def token_for(user_id: str) -> str:
    """Access token for a demo user."""
    user = next(u for u in DEMO_USERS if u["id"] == user_id)
    return create_access_token(
        data={"sub": user["email"], "user_id": user["id"], "role": user["role"].value}
    )


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {token_for(user_id)}"}


@pytest.fixture
def headers_for():
    """Factory: auth headers for any demo user id."""
    return auth_headers


@pytest.fixture
def admin_headers():
    return auth_headers("u1")


@pytest.fixture
def staff_headers():
    return auth_headers("u2")


@pytest.fixture
def client_a_headers():
    return auth_headers("u4")


@pytest.fixture
def client_b_headers():
    return auth_headers("u5")
