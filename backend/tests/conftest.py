"""
Salon Booking Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   API tests run the real app (lifespan included) against a throwaway
       SQLite file per test; store tests use a mocked AsyncSession.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:   Settings pointing at tmp_path SQLite, bcrypt rounds 4
    ├── client_for:      factory → running app + AsyncClient with setting overrides
    ├── app / client:    default running app and its client
    ├── register_user:   posts a valid registration (unique email/phone per call)
    └── mock_db_session: AsyncMock standing in for AsyncSession
"""

import itertools
import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Override settings BEFORE any salon imports: salon.main builds a default app
# from the environment at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"

from salon.config import Settings  # noqa: E402
from salon.main import create_app  # noqa: E402

VALID_PASSWORD = "correct-horse-42"


@pytest.fixture
def test_settings(tmp_path):
    """Settings for one test: its own SQLite file, fast bcrypt, no rate limit."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'salon_test.db'}",
        db_create_all=True,
        db_connect_attempts=1,
        db_connect_wait=0.0,
        bcrypt_rounds=4,
        rate_limit_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def client_for(test_settings):
    """
    Factory for a started app with overridden settings.

    Usage:
        async with client_for(allow_double_booking=False) as client:
            ...
    """

    @asynccontextmanager
    async def _client_for(**overrides):
        settings = test_settings.model_copy(update=overrides)
        application = create_app(settings)
        # ASGITransport does not send lifespan events; run startup/shutdown here
        async with application.router.lifespan_context(application):
            transport = ASGITransport(app=application)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client

    return _client_for


@pytest_asyncio.fixture
async def app(test_settings):
    """The application with startup complete (tables created, catalog seeded)."""
    application = create_app(test_settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def register_user(client):
    """
    Registers a user; keyword arguments override camelCase body fields.

    Each call gets a fresh email and phone unless overridden.
    """
    counter = itertools.count(1)

    async def _register(**overrides):
        n = next(counter)
        payload = {
            "firstName": "Anna",
            "lastName": "Lindqvist",
            "email": f"anna.{n}@hairmail.se",
            "mobilePhone": f"+4670123450{n}",
            "password": VALID_PASSWORD,
        }
        payload.update(overrides)
        return await client.post("/register", json=payload)

    return _register


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Results must be set explicitly, e.g.:
        result = MagicMock()
        result.scalar_one_or_none.return_value = user
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


def scalar_result(value):
    """A mocked Result whose scalar_one_or_none() returns `value`."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def make_result():
    return scalar_result
