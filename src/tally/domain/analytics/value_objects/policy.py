"""Tunable thresholds for trend, forecast and insight rules.

The defaults reproduce the values the budgeting app has always used. They are
tuning choices awaiting product confirmation rather than derived constants,
so every rule takes them from an ``AnalyticsPolicy`` instead of hard-coding.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

# January .. December. December (holidays) highest, February lowest.
DEFAULT_SEASONAL_FACTORS: tuple[Decimal, ...] = (
    Decimal("1.1"),
    Decimal("0.9"),
    Decimal("1.0"),
    Decimal("1.0"),
    Decimal("1.1"),
    Decimal("1.0"),
    Decimal("1.1"),
    Decimal("1.1"),
    Decimal("1.0"),
    Decimal("1.0"),
    Decimal("1.2"),
    Decimal("1.3"),
)


def _d(value: float | int | str | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class AnalyticsPolicy:
    # Trend
    stable_threshold_pct: Decimal = Decimal("5")
    min_trend_points: int = 2

    # Budget risk
    budget_warning_pct: Decimal = Decimal("80")
    budget_exceeded_pct: Decimal = Decimal("100")

    # Category surge
    surge_stddev_multiplier: Decimal = Decimal("2")
    min_surge_points: int = 3

    # Savings rate
    low_savings_rate_pct: Decimal = Decimal("10")
    high_savings_rate_pct: Decimal = Decimal("30")

    # Forecasting
    min_forecast_points: int = 3
    forecast_window: int = 6
    forecast_horizon: int = 6
    trend_factor_min: Decimal = Decimal("0.5")
    trend_factor_max: Decimal = Decimal("2.0")
    range_multiplier: Decimal = Decimal("1.5")
    base_confidence: int = 90
    confidence_decay: int = 10
    min_confidence: int = 50
    data_bonus_per_year: int = 10
    max_data_bonus: int = 20
    max_confidence: int = 95
    seasonal_factors: tuple[Decimal, ...] = field(
        default=DEFAULT_SEASONAL_FACTORS,
    )

    # Rankings
    top_categories: int = 10

    def __post_init__(self) -> None:
        factors = tuple(_d(f) for f in self.seasonal_factors)
        if len(factors) != 12:
            msg = f"seasonal_factors needs 12 values, got {len(factors)}"
            raise ValueError(msg)
        object.__setattr__(self, "seasonal_factors", factors)
        if self.trend_factor_min > self.trend_factor_max:
            msg = "trend_factor_min must not exceed trend_factor_max"
            raise ValueError(msg)
        if self.min_forecast_points < 2:
            msg = "min_forecast_points must be at least 2"
            raise ValueError(msg)

    def seasonal_factor(self, month_number: int) -> Decimal:
        return self.seasonal_factors[month_number - 1]

    @classmethod
    def from_overrides(
        cls,
        *,
        stable_threshold_pct: float | None = None,
        budget_warning_pct: float | None = None,
        budget_exceeded_pct: float | None = None,
        forecast_window: int | None = None,
        forecast_horizon: int | None = None,
        range_multiplier: float | None = None,
        seasonal_factors: Sequence[float] | None = None,
        top_categories: int | None = None,
    ) -> AnalyticsPolicy:
        """Build a policy, replacing only the values that are given."""
        overrides: dict = {}
        if stable_threshold_pct is not None:
            overrides["stable_threshold_pct"] = _d(stable_threshold_pct)
        if budget_warning_pct is not None:
            overrides["budget_warning_pct"] = _d(budget_warning_pct)
        if budget_exceeded_pct is not None:
            overrides["budget_exceeded_pct"] = _d(budget_exceeded_pct)
        if forecast_window is not None:
            overrides["forecast_window"] = forecast_window
        if forecast_horizon is not None:
            overrides["forecast_horizon"] = forecast_horizon
        if range_multiplier is not None:
            overrides["range_multiplier"] = _d(range_multiplier)
        if seasonal_factors is not None:
            overrides["seasonal_factors"] = tuple(_d(f) for f in seasonal_factors)
        if top_categories is not None:
            overrides["top_categories"] = top_categories
        return cls(**overrides)
