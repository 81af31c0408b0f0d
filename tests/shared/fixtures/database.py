"""
Database fixtures and row builders for persistence and API tests.

Provides an ephemeral PostgreSQL instance via Testcontainers for the
integration tests, plus builders for the raw tables the analytics adapters
read from.

Usage:
    from tests.shared.fixtures.database import seed_category, transaction_row

    async def test_something(async_session):
        food = await seed_category(async_session, "Food")
        async_session.add(transaction_row(TEST_USER_ID, date(2024, 3, 1), "9.99"))
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

from tally.infrastructure.persistence.sqlalchemy.models.analytics import (
    BudgetModel,
    CategoryModel,
    GoalModel,
    TransactionModel,
)

# Use same Postgres version as production
POSTGRES_IMAGE = "postgres:16-alpine"


@pytest.fixture(scope="session")
def postgres_container():
    """
    Start a PostgreSQL container for the test session.

    Each test gets a clean database state via table drop/create.
    """
    with PostgresContainer(POSTGRES_IMAGE) as postgres:
        yield postgres


@pytest.fixture(scope="session")
def postgres_url(postgres_container) -> str:
    """Connection URL of the test container in asyncpg format."""
    connection_url = postgres_container.get_connection_url()
    # Testcontainers may return postgresql+psycopg2:// or postgresql://
    async_url = connection_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    )
    return async_url.replace("postgresql://", "postgresql+asyncpg://")


def create_test_engine(url: str):
    # NullPool: every event loop gets its own connections
    return create_async_engine(url, echo=False, poolclass=NullPool)


def category_row(name: str, user_id: UUID | None = None) -> CategoryModel:
    return CategoryModel(id=uuid4(), user_id=user_id, name=name)


async def seed_category(session: AsyncSession, name: str, user_id: UUID | None = None):
    category = category_row(name, user_id)
    session.add(category)
    await session.flush()
    return category


def transaction_row(
    user_id: UUID,
    day: date,
    amount: str,
    kind: str = "expense",
    category: CategoryModel | None = None,
) -> TransactionModel:
    return TransactionModel(
        id=uuid4(),
        user_id=user_id,
        category_id=category.id if category else None,
        type=kind,
        amount=Decimal(amount),
        date=day,
    )


def budget_row(
    user_id: UUID,
    amount: str,
    period: str = "monthly",
    category: CategoryModel | None = None,
) -> BudgetModel:
    return BudgetModel(
        id=uuid4(),
        user_id=user_id,
        category_id=category.id if category else None,
        amount=Decimal(amount),
        period=period,
    )


def goal_row(user_id: UUID, title: str, target: str, deadline: date) -> GoalModel:
    return GoalModel(
        id=uuid4(),
        user_id=user_id,
        title=title,
        target_amount=Decimal(target),
        current_amount=Decimal("0"),
        deadline=deadline,
    )
