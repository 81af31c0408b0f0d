"""Budget-versus-spending history, one point per calendar month."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from tally.domain.analytics.value_objects.time_bucket import ZERO


@dataclass(frozen=True)
class CategoryBudgetUsage:
    category: str
    budgeted: Decimal
    spent: Decimal
    percentage: Decimal  # spent / budgeted * 100, unbounded above


@dataclass(frozen=True)
class HistoricalDataPoint:
    period: str  # YYYY-MM
    date: date
    total_budget: Decimal = ZERO
    total_spent: Decimal = ZERO
    utilization: Decimal = ZERO  # may exceed 100 when over budget
    category_breakdown: tuple[CategoryBudgetUsage, ...] = ()
