"""Trend and growth value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

ZERO = Decimal("0")


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class TrendResult:
    """Direction and signed percentage change between two halves of a series."""

    direction: TrendDirection
    percentage_change: Decimal
    description: str
    insufficient_data: bool = False

    @classmethod
    def insufficient(cls, reason: str = "Insufficient data") -> TrendResult:
        return cls(
            direction=TrendDirection.STABLE,
            percentage_change=ZERO,
            description=reason,
            insufficient_data=True,
        )

    @property
    def magnitude(self) -> Decimal:
        return abs(self.percentage_change)


@dataclass(frozen=True)
class PeriodMetrics:
    spending: Decimal = ZERO
    income: Decimal = ZERO
    net_income: Decimal = ZERO
    transactions: int = 0
    top_category: str | None = None


@dataclass(frozen=True)
class GrowthMetrics:
    spending_growth: Decimal = ZERO
    income_growth: Decimal = ZERO
    net_income_growth: Decimal = ZERO
    transaction_growth: Decimal = ZERO


@dataclass(frozen=True)
class PeriodComparison:
    """Same month (or quarter) in the current and the previous year."""

    label: str
    number: int
    current_year: PeriodMetrics
    previous_year: PeriodMetrics
    growth: GrowthMetrics


@dataclass(frozen=True)
class YearOverYearMetrics:
    current_year: int
    previous_year: int
    spending_growth: Decimal
    income_growth: Decimal
    net_income_growth: Decimal
    transaction_growth: Decimal
    average_transaction_size_growth: Decimal
    savings_rate_change: Decimal  # percentage points
    category_growth: Mapping[str, Decimal] = field(default_factory=dict)
    monthly_comparison: tuple[PeriodComparison, ...] = ()
    quarterly_comparison: tuple[PeriodComparison, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "category_growth", MappingProxyType(dict(self.category_growth))
        )
