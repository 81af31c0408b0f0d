"""Pytest fixtures for API tests.

The app runs against a throwaway SQLite file so requests go through the real
SQLAlchemy adapters without needing a PostgreSQL server.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tally.infrastructure.persistence.sqlalchemy.models.base import Base
from tally.presentation.api.app import API_V1_PREFIX, create_app
from tally.presentation.api.dependencies import get_db_session
from tally_config.settings import Settings
from tests.shared.fixtures.database import create_test_engine
from tests.shared.fixtures.records import TEST_USER_ID


def _run(coro):
    """Run setup code in a fresh event loop to avoid conflicts with TestClient."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def api_v1_prefix() -> str:
    return API_V1_PREFIX


@pytest.fixture
def analytics_url(api_v1_prefix) -> str:
    return f"{api_v1_prefix}/analytics"


@pytest.fixture
def api_settings() -> Settings:
    """Test API settings with debug enabled."""
    return Settings(
        postgres_password=SecretStr("test-password"),
        api_host="127.0.0.1",
        api_port=8000,
        api_cors_origins="http://localhost:3000",
        debug=True,
    )


@pytest.fixture
def api_engine(tmp_path):
    engine = create_test_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")

    async def _setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    _run(_setup())
    yield engine
    _run(engine.dispose())


@pytest.fixture
def api_session_maker(api_engine):
    return async_sessionmaker(api_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def seed(api_session_maker):
    """Insert model instances before the request is made."""

    def _seed(*rows):
        async def _insert():
            async with api_session_maker() as session:
                session.add_all(rows)
                await session.commit()

        _run(_insert())

    return _seed


@pytest.fixture
def query_db(api_session_maker):
    """Run a read-only coroutine function against the test database."""

    def _query(fn):
        async def _with_session():
            async with api_session_maker() as session:
                return await fn(session)

        return _run(_with_session())

    return _query


@pytest.fixture
def test_client(api_settings, api_session_maker):
    """Test client with the database session pointed at the SQLite file.

    The lifespan is not entered, so nothing tries to reach PostgreSQL.
    """
    app = create_app(settings=api_settings)

    async def override_get_db_session():
        async with api_session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session

    yield TestClient(app)


@pytest.fixture
def user_headers() -> dict:
    return {"X-User-Id": str(TEST_USER_ID)}
