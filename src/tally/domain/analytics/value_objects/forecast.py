"""Forecast value objects. Never persisted; recomputed per request."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ForecastRange:
    min: Decimal
    max: Decimal


@dataclass(frozen=True)
class ForecastPoint:
    period: str  # YYYY-MM
    predicted_value: Decimal
    confidence: int  # 0-100
    range: ForecastRange


@dataclass(frozen=True)
class ForecastResult:
    """Forecast for a series, or an explicit not-enough-data result."""

    points: tuple[ForecastPoint, ...]
    methodology: str
    insufficient_data: bool = False
    reason: str | None = None

    @classmethod
    def insufficient(cls, data_points: int, required: int) -> ForecastResult:
        return cls(
            points=(),
            methodology="Insufficient historical data for forecasting",
            insufficient_data=True,
            reason=(
                f"Need at least {required} months of data to forecast, "
                f"got {data_points}"
            ),
        )


@dataclass(frozen=True)
class SpendingForecast:
    """Seasonal forecast for one upcoming calendar month."""

    month: str
    year: int
    month_number: int
    predicted_spending: Decimal
    predicted_income: Decimal
    confidence: int
    factors: tuple[str, ...] = ()


@dataclass(frozen=True)
class BudgetPrediction:
    category: str
    current_spending: Decimal  # average monthly spending this year
    predicted_spending: Decimal
    budget_limit: Decimal  # monthly equivalent
    over_budget_risk: Decimal  # 0-100
    recommended_budget: Decimal
