"""
Builders for deterministic analytics test data.

Usage:
    from tests.shared.fixtures.records import expense, income, budget

    def test_something():
        txns = [expense("2024-03-05", 100, "Food"), income("2024-03-01", 1000)]
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from itertools import count
from uuid import UUID

from tally.application.context import UserContext
from tally.domain.analytics.value_objects import (
    BudgetPeriod,
    BudgetRecord,
    GoalRecord,
    RecordBatch,
    TransactionRecord,
    TransactionType,
)

TEST_USER_ID = UUID("12345678-1234-5678-1234-567812345678")
TEST_USER_ID_2 = UUID("00000000-0000-0000-0000-000000000002")

# Saturday, day 20 of a 30-day month
FIXED_TODAY = date(2024, 4, 20)

_ids = count(1)


def _day(value: date | str) -> date:
    return date.fromisoformat(value) if isinstance(value, str) else value


def expense(
    day: date | str,
    amount: int | str | Decimal,
    category: str = "Food",
) -> TransactionRecord:
    return TransactionRecord(
        id=f"t{next(_ids)}",
        user_id=str(TEST_USER_ID),
        type=TransactionType.EXPENSE,
        category_name=category,
        amount=Decimal(str(amount)),
        date=_day(day),
    )


def income(
    day: date | str,
    amount: int | str | Decimal,
    category: str = "Salary",
) -> TransactionRecord:
    return TransactionRecord(
        id=f"t{next(_ids)}",
        user_id=str(TEST_USER_ID),
        type=TransactionType.INCOME,
        category_name=category,
        amount=Decimal(str(amount)),
        date=_day(day),
    )


def budget(
    amount: int | str | Decimal,
    category: str = "Food",
    period: BudgetPeriod = BudgetPeriod.MONTHLY,
    budget_id: str = "b1",
) -> BudgetRecord:
    return BudgetRecord(
        id=budget_id,
        user_id=str(TEST_USER_ID),
        category_name=category,
        amount=Decimal(str(amount)),
        period=period,
    )


def goal(
    target: int | str | Decimal,
    deadline: date | str,
    current: int | str | Decimal = 0,
    title: str = "Vacation",
    goal_id: str = "g1",
) -> GoalRecord:
    return GoalRecord(
        id=goal_id,
        user_id=str(TEST_USER_ID),
        title=title,
        target_amount=Decimal(str(target)),
        current_amount=Decimal(str(current)),
        deadline=_day(deadline),
    )


def batch(*records, skipped: int = 0) -> RecordBatch:
    return RecordBatch.of(list(records), skipped=skipped)


@dataclass(frozen=True)
class FixedDateUserContext(UserContext):
    """UserContext whose calendar never moves."""

    fixed_today: date = FIXED_TODAY

    def today(self) -> date:
        return self.fixed_today


def user_context(today: date = FIXED_TODAY, currency: str = "EUR") -> UserContext:
    return FixedDateUserContext(
        user_id=TEST_USER_ID,
        currency=currency,
        fixed_today=today,
    )
