"""Time bucket value objects produced by temporal bucketing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

ZERO = Decimal("0")


class BucketGranularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class CategoryStat:
    """Aggregated amounts for one category inside a bucket."""

    amount: Decimal = ZERO
    transaction_count: int = 0
    percentage_of_bucket_total: Decimal = ZERO  # 0-100 scale
    average_transaction_amount: Decimal = ZERO


def _frozen_mapping(value: Mapping[str, CategoryStat]) -> Mapping[str, CategoryStat]:
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class TimeBucket:
    """One day/week/month/quarter/year window with running totals.

    ``category_breakdown`` covers expenses only, so its amounts always sum to
    ``total_expense``; ``income_breakdown`` does the same for income sources.
    """

    label: str
    granularity: BucketGranularity
    start_date: date
    end_date: date
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    transaction_count: int = 0
    category_breakdown: Mapping[str, CategoryStat] = field(default_factory=dict)
    income_breakdown: Mapping[str, CategoryStat] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "category_breakdown", _frozen_mapping(self.category_breakdown)
        )
        object.__setattr__(
            self, "income_breakdown", _frozen_mapping(self.income_breakdown)
        )

    @property
    def net_income(self) -> Decimal:
        return self.total_income - self.total_expense

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def average_daily_spending(self) -> Decimal:
        return self.total_expense / Decimal(self.days)

    @property
    def month_number(self) -> int:
        return self.start_date.month

    @property
    def year(self) -> int:
        return self.start_date.year

    @property
    def savings_rate(self) -> Decimal:
        if self.total_income <= 0:
            return ZERO
        return self.net_income / self.total_income * 100

    @property
    def top_expense_category(self) -> str | None:
        if not self.category_breakdown:
            return None
        return min(
            self.category_breakdown.items(),
            key=lambda item: (-item[1].amount, item[0]),
        )[0]

    @property
    def is_empty(self) -> bool:
        return self.transaction_count == 0
