"""Year-level aggregates built from twelve monthly buckets."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from tally.domain.analytics.value_objects.time_bucket import (
    ZERO,
    CategoryStat,
    TimeBucket,
)
from tally.domain.analytics.value_objects.trend import TrendDirection

MONTHS_IN_YEAR = 12
QUARTERS_IN_YEAR = 4


class Volatility(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SeasonalPattern:
    """Typical spending for one calendar month across the available years."""

    month: str
    month_number: int
    typical_spending: Decimal
    variance: Decimal
    description: str


@dataclass(frozen=True)
class SpendingTrendSummary:
    monthly_growth: Decimal = ZERO
    quarterly_growth: Decimal = ZERO
    yearly_growth: Decimal = ZERO
    direction: TrendDirection = TrendDirection.STABLE
    volatility: Volatility = Volatility.LOW
    seasonality: tuple[SeasonalPattern, ...] = ()


@dataclass(frozen=True)
class CategorySummary:
    """Entry of a ranked top-categories list."""

    name: str
    amount: Decimal
    percentage: Decimal
    transaction_count: int
    average_amount: Decimal


@dataclass(frozen=True)
class QuarterlyAggregate:
    quarter: int
    year: int
    total_income: Decimal
    total_spending: Decimal
    transaction_count: int
    category_breakdown: Mapping[str, CategoryStat] = field(default_factory=dict)
    months_included: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "category_breakdown", MappingProxyType(dict(self.category_breakdown))
        )

    @property
    def period(self) -> str:
        return f"Q{self.quarter} {self.year}"

    @property
    def net_income(self) -> Decimal:
        return self.total_income - self.total_spending


@dataclass(frozen=True)
class YearlyAggregate:
    """Twelve monthly buckets, four quarters and yearly totals for one year."""

    year: int
    months: tuple[TimeBucket, ...]
    quarters: tuple[QuarterlyAggregate, ...]
    total_income: Decimal
    total_spending: Decimal
    transaction_count: int
    category_breakdown: Mapping[str, CategoryStat] = field(default_factory=dict)
    income_breakdown: Mapping[str, CategoryStat] = field(default_factory=dict)
    top_categories: tuple[CategorySummary, ...] = ()
    spending_trends: SpendingTrendSummary = field(default_factory=SpendingTrendSummary)

    def __post_init__(self) -> None:
        if len(self.months) != MONTHS_IN_YEAR:
            msg = f"A yearly aggregate needs 12 months, got {len(self.months)}"
            raise ValueError(msg)
        if len(self.quarters) != QUARTERS_IN_YEAR:
            msg = f"A yearly aggregate needs 4 quarters, got {len(self.quarters)}"
            raise ValueError(msg)
        object.__setattr__(
            self, "category_breakdown", MappingProxyType(dict(self.category_breakdown))
        )
        object.__setattr__(
            self, "income_breakdown", MappingProxyType(dict(self.income_breakdown))
        )

    @property
    def net_income(self) -> Decimal:
        return self.total_income - self.total_spending

    @property
    def average_monthly_spending(self) -> Decimal:
        return self.total_spending / MONTHS_IN_YEAR

    @property
    def average_monthly_income(self) -> Decimal:
        return self.total_income / MONTHS_IN_YEAR

    @property
    def average_transaction_size(self) -> Decimal:
        if self.transaction_count == 0:
            return ZERO
        return self.total_spending / self.transaction_count

    @property
    def savings_rate(self) -> Decimal:
        """(income - expense) / income * 100, zero without income."""
        if self.total_income <= 0:
            return ZERO
        return self.net_income / self.total_income * 100

    @property
    def has_activity(self) -> bool:
        return self.transaction_count > 0

    def month(self, month_number: int) -> TimeBucket:
        return self.months[month_number - 1]
