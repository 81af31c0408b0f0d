"""Fixtures for tests against a real PostgreSQL server (Testcontainers)."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tally.infrastructure.persistence.sqlalchemy.models.base import Base
from tests.shared.fixtures.database import (
    create_test_engine,
    postgres_container,
    postgres_url,
)

# Make fixtures available to tests in this directory
__all__ = ["postgres_container", "postgres_url"]


@pytest_asyncio.fixture(scope="function")
async def pg_session(postgres_url):
    """Fresh schema and session on the container for every test."""
    engine = create_test_engine(postgres_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
