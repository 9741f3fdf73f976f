"""
SocialConnect Backend — Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any `app` import so the settings
       singleton and the engine point at a throwaway SQLite file.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── db_tables:       create_all / drop_all around one test
    ├── test_client:     HTTPX AsyncClient bound to the ASGI app (needs db_tables)
    ├── register_user:   factory that registers an account over HTTP
    ├── alice, bob:      registered users {id, username, email, token, headers}
    └── clean_hub:       empties the realtime hub after the test
"""

import os
import tempfile
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any app import)
# ══════════════════════════════════════════════════════════════════════════

_test_dir = tempfile.mkdtemp(prefix="socialconnect_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from app.database import Base, engine  # noqa: E402
import app.models  # noqa: E402,F401
from app.services.realtime import notification_hub  # noqa: E402

PASSWORD = "secret123"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.execute.return_value.first.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def clean_hub():
    yield notification_hub
    notification_hub.unsubscribe_all()


# ══════════════════════════════════════════════════════════════════════════
# Database + HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_tables():
    """Fresh schema for one test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(db_tables):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def register_user(test_client):
    """Factory: register a user and return its id, token and auth headers."""

    async def _register(username: str, email: str = None, password: str = PASSWORD) -> dict:
        email = email or f"{username}@example.com"
        response = await test_client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "username": username},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {
            "id": data["user"]["id"],
            "uuid": uuid.UUID(data["user"]["id"]),
            "username": username,
            "email": email,
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _register


@pytest_asyncio.fixture
async def alice(register_user):
    return await register_user("alice")


@pytest_asyncio.fixture
async def bob(register_user):
    return await register_user("bob")
