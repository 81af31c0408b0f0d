"""Create or reset the analytics schema for local development.

In production the tables belong to the hosted store; these commands only
exist so a developer can run the service against an empty local PostgreSQL.

    tally-db-init            create missing tables
    tally-db-reset [--force] drop everything and start over
"""

import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# Registers every model on Base.metadata
import tally.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from tally.infrastructure.persistence.sqlalchemy.models.base import Base
from tally_config.settings import get_settings

logger = logging.getLogger(__name__)


def _engine() -> AsyncEngine:
    return create_async_engine(get_settings().database_url, pool_pre_ping=True)


async def create_tables(engine: AsyncEngine) -> None:
    """Create the tables that do not exist yet; existing data is untouched."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


async def drop_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("Dropped all analytics tables")


async def _run(*steps) -> None:
    engine = _engine()
    try:
        for step in steps:
            await step(engine)
    finally:
        await engine.dispose()


def _confirm_reset() -> bool:
    target = get_settings().database_url.rsplit("@", 1)[-1]
    answer = input(f"Drop every table in {target}? Type 'yes' to continue: ")
    return answer.strip().lower() == "yes"


def db_init() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_run(create_tables))


def db_reset() -> None:
    logging.basicConfig(level=logging.INFO)
    force = bool({"--force", "-f"} & set(sys.argv[1:]))
    if not force and not _confirm_reset():
        print("Aborted.")
        sys.exit(1)
    asyncio.run(_run(drop_tables, create_tables))
