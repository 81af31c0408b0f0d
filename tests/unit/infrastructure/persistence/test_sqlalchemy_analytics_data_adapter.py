"""Tests for SqlAlchemyAnalyticsDataAdapter against a real (SQLite) schema."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from tally.domain.analytics.value_objects import (
    UNCATEGORIZED,
    BudgetPeriod,
    DateRange,
    TransactionType,
)
from tally.domain.shared.exceptions import DataFetchError
from tally.infrastructure.persistence.sqlalchemy.adapters.analytics import (
    SqlAlchemyAnalyticsDataAdapter,
)
from tests.shared.fixtures.database import (
    budget_row,
    goal_row,
    seed_category,
    transaction_row,
)
from tests.shared.fixtures.records import TEST_USER_ID, TEST_USER_ID_2

MARCH = DateRange(start=date(2024, 3, 1), end=date(2024, 3, 31))


class TestFetchTransactions:
    @pytest.mark.asyncio
    async def test_window_bounds_are_inclusive(self, async_session):
        food = await seed_category(async_session, "Food")
        async_session.add_all(
            [
                transaction_row(TEST_USER_ID, date(2024, 2, 29), "1", category=food),
                transaction_row(TEST_USER_ID, date(2024, 3, 1), "2", category=food),
                transaction_row(TEST_USER_ID, date(2024, 3, 31), "3", category=food),
                transaction_row(TEST_USER_ID, date(2024, 4, 1), "4", category=food),
            ]
        )
        await async_session.flush()

        batch = await SqlAlchemyAnalyticsDataAdapter(async_session).fetch_transactions(
            TEST_USER_ID, MARCH
        )

        assert [t.amount for t in batch] == [Decimal("2"), Decimal("3")]
        assert batch.skipped == 0

    @pytest.mark.asyncio
    async def test_rows_are_normalized_with_category_names(self, async_session):
        rent = await seed_category(async_session, "Rent")
        async_session.add_all(
            [
                transaction_row(TEST_USER_ID, date(2024, 3, 2), "900", category=rent),
                transaction_row(TEST_USER_ID, date(2024, 3, 1), "2500", kind="income"),
            ]
        )
        await async_session.flush()

        batch = await SqlAlchemyAnalyticsDataAdapter(async_session).fetch_transactions(
            TEST_USER_ID, MARCH
        )

        salary, rent_payment = batch.records
        assert salary.type is TransactionType.INCOME
        assert salary.category_name == UNCATEGORIZED
        assert salary.user_id == str(TEST_USER_ID)
        assert rent_payment.category_name == "Rent"
        assert rent_payment.date == date(2024, 3, 2)

    @pytest.mark.asyncio
    async def test_other_users_rows_are_invisible(self, async_session):
        async_session.add_all(
            [
                transaction_row(TEST_USER_ID, date(2024, 3, 5), "10"),
                transaction_row(TEST_USER_ID_2, date(2024, 3, 5), "99"),
            ]
        )
        await async_session.flush()

        batch = await SqlAlchemyAnalyticsDataAdapter(async_session).fetch_transactions(
            TEST_USER_ID, MARCH
        )

        assert [t.amount for t in batch] == [Decimal("10")]

    @pytest.mark.asyncio
    async def test_unknown_type_is_skipped(self, async_session):
        async_session.add_all(
            [
                transaction_row(TEST_USER_ID, date(2024, 3, 5), "10"),
                transaction_row(TEST_USER_ID, date(2024, 3, 6), "10", kind="transfer"),
            ]
        )
        await async_session.flush()

        batch = await SqlAlchemyAnalyticsDataAdapter(async_session).fetch_transactions(
            TEST_USER_ID, MARCH
        )

        assert len(batch) == 1
        assert batch.skipped == 1


class TestFetchBudgetsAndGoals:
    @pytest.mark.asyncio
    async def test_budgets(self, async_session):
        travel = await seed_category(async_session, "Travel")
        async_session.add_all(
            [
                budget_row(TEST_USER_ID, "1200", "yearly", category=travel),
                budget_row(TEST_USER_ID_2, "50"),
            ]
        )
        await async_session.flush()

        [budget] = await SqlAlchemyAnalyticsDataAdapter(async_session).fetch_budgets(
            TEST_USER_ID
        )

        assert budget.category_name == "Travel"
        assert budget.period is BudgetPeriod.YEARLY
        assert budget.monthly_amount == Decimal("100")

    @pytest.mark.asyncio
    async def test_goals_ordered_by_deadline(self, async_session):
        async_session.add_all(
            [
                goal_row(TEST_USER_ID, "House", "50000", date(2030, 1, 1)),
                goal_row(TEST_USER_ID, "Bike", "800", date(2024, 9, 1)),
            ]
        )
        await async_session.flush()

        goals = await SqlAlchemyAnalyticsDataAdapter(async_session).fetch_goals(
            TEST_USER_ID
        )

        assert [g.title for g in goals] == ["Bike", "House"]


class TestDatabaseErrors:
    @pytest.mark.asyncio
    async def test_driver_error_becomes_data_fetch_error(self):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DataFetchError, match="transactions"):
            await SqlAlchemyAnalyticsDataAdapter(session).fetch_transactions(
                TEST_USER_ID, MARCH
            )
