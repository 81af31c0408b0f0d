"""Dashboard summaries over an arbitrary date window."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tally.domain.analytics.value_objects.time_bucket import ZERO
from tally.domain.analytics.value_objects.trend import TrendDirection

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class DashboardMetrics:
    """Headline numbers for a window, compared against the window before it."""

    total_transactions: int = 0
    average_transaction_amount: Decimal = ZERO
    largest_expense: Decimal = ZERO
    largest_income: Decimal = ZERO
    most_active_day: str = NOT_AVAILABLE
    most_active_category: str = NOT_AVAILABLE
    savings_rate: Decimal = ZERO
    expense_growth_rate: Decimal = ZERO
    income_growth_rate: Decimal = ZERO


@dataclass(frozen=True)
class CategoryTrend:
    category: str
    total_spent: Decimal
    transaction_count: int
    average_amount: Decimal
    percentage_of_total: Decimal
    trend: TrendDirection
    trend_percentage: Decimal


@dataclass(frozen=True)
class PeriodActivity:
    """Totals of one day, week or month inside the window."""

    period: str
    total_spending: Decimal
    total_income: Decimal
    net_amount: Decimal
    transaction_count: int
    top_category: str = NOT_AVAILABLE


@dataclass(frozen=True)
class MonthlySummary:
    name: str  # e.g. "Mar 2024"
    year: int
    month_number: int
    income: Decimal
    expense: Decimal
    transaction_count: int
    net_amount: Decimal
    savings_rate: Decimal
