"""Adapter tests run on in-memory SQLite unless TEST_DATABASE_URL is set."""

import os

import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from tally.infrastructure.persistence.sqlalchemy.models.base import Base
from tests.shared.fixtures.database import create_test_engine

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def async_engine():
    """Engine for the test database, disposed after each test."""
    if url := os.environ.get("TEST_DATABASE_URL"):
        engine = create_test_engine(url)
    else:
        # In-memory SQLite keeps one shared connection for the engine's life
        engine = create_async_engine(SQLITE_URL, echo=False)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def async_session(async_engine):
    """Session on a freshly created schema, rolled back and dropped afterwards."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    make_session = async_sessionmaker(async_engine, expire_on_commit=False)
    async with make_session() as session:
        yield session
        await session.rollback()

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
