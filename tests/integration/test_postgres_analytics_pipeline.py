"""End-to-end analytics reads and alert write-back on PostgreSQL."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import SecretStr
from sqlalchemy import select

from tally.application.commands.analytics import GenerateAlertsCommand
from tally.application.queries.analytics import YearOverYearQuery
from tally.domain.analytics.value_objects import DateRange
from tally.infrastructure.persistence.sqlalchemy.factory import (
    SQLAlchemyAnalyticsFactory,
)
from tally.infrastructure.persistence.sqlalchemy.models.analytics import (
    ComputedAlertModel,
)
from tally_config import Settings
from tests.shared.fixtures.database import budget_row, seed_category, transaction_row
from tests.shared.fixtures.records import FIXED_TODAY, TEST_USER_ID, user_context

pytestmark = pytest.mark.integration


@pytest.fixture
def settings():
    return Settings(postgres_password=SecretStr("unused"))


@pytest.mark.asyncio
async def test_numeric_amounts_survive_the_round_trip(pg_session, settings):
    food = await seed_category(pg_session, "Food")
    pg_session.add(
        transaction_row(TEST_USER_ID, date(2024, 3, 31), "0.10", category=food)
    )
    pg_session.add(
        transaction_row(TEST_USER_ID, date(2024, 3, 31), "0.20", category=food)
    )
    await pg_session.flush()

    factory = SQLAlchemyAnalyticsFactory(pg_session, user_context(), settings)
    batch = await factory.analytics_data_port().fetch_transactions(
        TEST_USER_ID,
        DateRange(start=date(2024, 3, 1), end=date(2024, 3, 31)),
    )

    assert sum(t.amount for t in batch) == Decimal("0.30")


@pytest.mark.asyncio
async def test_year_over_year_from_postgres(pg_session, settings):
    food = await seed_category(pg_session, "Food")
    pg_session.add_all(
        [
            transaction_row(TEST_USER_ID, date(2023, 5, 1), "100", category=food),
            transaction_row(TEST_USER_ID, date(2024, 5, 1), "150", category=food),
        ]
    )
    await pg_session.flush()

    factory = SQLAlchemyAnalyticsFactory(pg_session, user_context(), settings)
    report = await YearOverYearQuery.from_factory(factory).execute([2024, 2023])

    assert report.comparison.spending_growth == Decimal("50")
    assert report.comparison.category_growth["Food"] == Decimal("50")


@pytest.mark.asyncio
async def test_alerts_are_upserted(pg_session, settings):
    food = await seed_category(pg_session, "Food")
    pg_session.add(budget_row(TEST_USER_ID, "500", category=food))
    pg_session.add(transaction_row(TEST_USER_ID, FIXED_TODAY, "600", category=food))
    await pg_session.flush()

    factory = SQLAlchemyAnalyticsFactory(pg_session, user_context(), settings)
    first = await GenerateAlertsCommand.from_factory(factory).execute()
    second = await GenerateAlertsCommand.from_factory(factory).execute()

    assert first.persisted is True
    assert second.persisted is True
    result = await pg_session.execute(
        select(ComputedAlertModel).where(ComputedAlertModel.user_id == TEST_USER_ID)
    )
    keys = sorted(row.alert_key for row in result.scalars())
    assert keys == sorted(a.key for a in second.alerts)
    assert any(k.startswith("budget_exceeded_") for k in keys)
