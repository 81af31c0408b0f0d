"""Linear-trend and seasonal forecasts of monthly spending."""

from __future__ import annotations

import logging
from calendar import month_abbr
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from tally.domain.analytics.services.temporal_bucketing_service import add_months
from tally.domain.analytics.services.trend_analysis_service import (
    TrendAnalysisService,
)
from tally.domain.analytics.value_objects.forecast import (
    BudgetPrediction,
    ForecastPoint,
    ForecastRange,
    ForecastResult,
    SpendingForecast,
)
from tally.domain.analytics.value_objects.policy import AnalyticsPolicy
from tally.domain.analytics.value_objects.records import BudgetRecord
from tally.domain.analytics.value_objects.time_bucket import ZERO
from tally.domain.analytics.value_objects.yearly_aggregate import YearlyAggregate

logger = logging.getLogger(__name__)

ONE = Decimal("1")
# Headroom added on top of the predicted spend when recommending a budget
BUDGET_HEADROOM = Decimal("1.1")
# Trend or seasonal factors further than this from 1 are reported as factors
FACTOR_NOTE_THRESHOLD = Decimal("0.1")

MONTH_SPECIFIC_FACTORS: dict[int, tuple[str, ...]] = {
    1: ("New Year expenses", "Post-holiday recovery"),
    5: ("Spring activities", "Mother's Day"),
    7: ("Summer vacation", "Outdoor activities"),
    8: ("Back-to-school shopping",),
    11: ("Holiday shopping begins", "Thanksgiving"),
    12: ("Holiday season", "Year-end expenses"),
}

_DEFAULT_POLICY = AnalyticsPolicy()


def _clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(high, value))


def _horizon(horizon: int | None, policy: AnalyticsPolicy) -> int:
    return policy.forecast_horizon if horizon is None else horizon


class ForecastingService:
    """Project upcoming monthly totals from historical series."""

    @staticmethod
    def linear_trend(values: Sequence[Decimal]) -> Decimal:
        """Least-squares slope normalized by the series average.

        A value of 0.05 means the series grows by roughly 5% of its average
        per period. Zero for fewer than two points or a non-positive average.
        """
        n = len(values)
        if n < 2:
            return ZERO
        sum_x = Decimal(n * (n - 1) // 2)
        sum_xx = Decimal((n - 1) * n * (2 * n - 1) // 6)
        sum_y = sum(values, ZERO)
        sum_xy = sum((Decimal(i) * v for i, v in enumerate(values)), ZERO)

        denominator = n * sum_xx - sum_x * sum_x
        if denominator == 0:
            return ZERO
        slope = (n * sum_xy - sum_x * sum_y) / denominator
        average = sum_y / n
        if average <= 0:
            return ZERO
        return slope / average

    @staticmethod
    def trend_factor(
        values: Sequence[Decimal],
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> Decimal:
        return _clamp(
            ONE + ForecastingService.linear_trend(values),
            policy.trend_factor_min,
            policy.trend_factor_max,
        )

    @staticmethod
    def forecast_confidence(
        months_ahead: int,
        years_of_data: int,
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> int:
        base = max(
            policy.min_confidence,
            policy.base_confidence - (months_ahead - 1) * policy.confidence_decay,
        )
        bonus = min(policy.max_data_bonus, years_of_data * policy.data_bonus_per_year)
        return min(policy.max_confidence, base + bonus)

    @staticmethod
    def forecast_series(
        history: Sequence[Decimal],
        start_year: int,
        start_month: int,
        *,
        horizon: int | None = None,
        years_of_data: int = 1,
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> ForecastResult:
        """Forecast ``horizon`` months starting at ``start_year-start_month``.

        ``history`` holds monthly totals, oldest first. Predictions are the
        recent average times the trend factor times the month's seasonal
        factor, with the combined multiplier clamped to the trend bounds.
        """
        if len(history) < policy.min_forecast_points:
            return ForecastResult.insufficient(
                len(history), policy.min_forecast_points
            )

        window = list(history[-policy.forecast_window :])
        average = sum(window, ZERO) / len(window)
        trend = ForecastingService.trend_factor(window, policy)
        spread = (
            TrendAnalysisService.standard_deviation(window) * policy.range_multiplier
        )

        points = []
        for ahead in range(1, _horizon(horizon, policy) + 1):
            year, month = add_months(start_year, start_month, ahead - 1)
            multiplier = _clamp(
                trend * policy.seasonal_factor(month),
                policy.trend_factor_min,
                policy.trend_factor_max,
            )
            predicted = max(ZERO, average * multiplier)
            points.append(
                ForecastPoint(
                    period=f"{year:04d}-{month:02d}",
                    predicted_value=predicted,
                    confidence=ForecastingService.forecast_confidence(
                        ahead, years_of_data, policy
                    ),
                    range=ForecastRange(
                        min=max(ZERO, predicted - spread),
                        max=predicted + spread,
                    ),
                ),
            )

        return ForecastResult(
            points=tuple(points),
            methodology=(
                f"Average of the last {len(window)} months adjusted by a "
                "linear trend and seasonal factors"
            ),
        )

    @staticmethod
    def forecast_by_category(
        histories: Mapping[str, Sequence[Decimal]],
        start_year: int,
        start_month: int,
        *,
        horizon: int | None = None,
        years_of_data: int = 1,
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> dict[str, ForecastResult]:
        """Independent forecast per category.

        A category whose forecast fails is logged and left out; the others
        are still returned.
        """
        results: dict[str, ForecastResult] = {}
        for category in sorted(histories):
            try:
                results[category] = ForecastingService.forecast_series(
                    histories[category],
                    start_year,
                    start_month,
                    horizon=horizon,
                    years_of_data=years_of_data,
                    policy=policy,
                )
            except (ArithmeticError, ValueError, TypeError) as e:
                logger.warning("Forecast for category '%s' failed: %s", category, e)
        return results

    @staticmethod
    def forecast_factors(
        month_number: int,
        trend_factor: Decimal,
        seasonal_factor: Decimal,
    ) -> tuple[str, ...]:
        factors: list[str] = []
        if abs(trend_factor - ONE) > FACTOR_NOTE_THRESHOLD:
            factors.append(
                "Increasing trend" if trend_factor > ONE else "Decreasing trend"
            )
        if abs(seasonal_factor - ONE) > FACTOR_NOTE_THRESHOLD:
            factors.append(
                "Seasonal increase" if seasonal_factor > ONE else "Seasonal decrease"
            )
        factors.extend(MONTH_SPECIFIC_FACTORS.get(month_number, ()))
        return tuple(factors) or ("Historical patterns",)

    @staticmethod
    def seasonal_spending_forecast(
        yearly: Sequence[YearlyAggregate],
        today: date,
        *,
        horizon: int | None = None,
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> list[SpendingForecast]:
        """Per-month spending and income forecasts for the months after ``today``.

        The base for each calendar month is its average across all loaded
        years, falling back to the current year's monthly average. Seasonal
        and trend factors form one multiplier, clamped to the trend bounds.
        """
        if not yearly:
            return []

        current = max(yearly, key=lambda agg: agg.year)
        spending_base: dict[int, Decimal] = {}
        income_base: dict[int, Decimal] = {}
        for month in range(1, 13):
            spending_base[month] = sum(
                (agg.month(month).total_expense for agg in yearly), ZERO
            ) / len(yearly)
            income_base[month] = sum(
                (agg.month(month).total_income for agg in yearly), ZERO
            ) / len(yearly)

        elapsed = today.month if current.year == today.year else 12
        recent = current.months[:elapsed][-policy.forecast_window :]
        if len(recent) >= policy.min_forecast_points:
            spending_trend = ForecastingService.trend_factor(
                [m.total_expense for m in recent], policy
            )
            income_trend = ForecastingService.trend_factor(
                [m.total_income for m in recent], policy
            )
        else:
            spending_trend = income_trend = ONE

        forecasts = []
        for ahead in range(1, _horizon(horizon, policy) + 1):
            year, month = add_months(today.year, today.month, ahead)
            seasonal = policy.seasonal_factor(month)
            spending_multiplier = _clamp(
                seasonal * spending_trend,
                policy.trend_factor_min,
                policy.trend_factor_max,
            )
            income_multiplier = _clamp(
                seasonal * income_trend,
                policy.trend_factor_min,
                policy.trend_factor_max,
            )
            base_spending = spending_base[month] or current.average_monthly_spending
            base_income = income_base[month] or current.average_monthly_income
            forecasts.append(
                SpendingForecast(
                    month=month_abbr[month],
                    year=year,
                    month_number=month,
                    predicted_spending=max(ZERO, base_spending * spending_multiplier),
                    predicted_income=max(ZERO, base_income * income_multiplier),
                    confidence=ForecastingService.forecast_confidence(
                        ahead, len(yearly), policy
                    ),
                    factors=ForecastingService.forecast_factors(
                        month, spending_trend, seasonal
                    ),
                ),
            )
        return forecasts

    @staticmethod
    def budget_predictions(
        budgets: Iterable[BudgetRecord],
        current: YearlyAggregate,
        previous: YearlyAggregate | None = None,
    ) -> list[BudgetPrediction]:
        """Next-month spend per budgeted category against its monthly limit.

        Sorted by over-budget risk, highest first.
        """
        predictions = []
        for budget in budgets:
            limit = budget.monthly_amount
            stat = current.category_breakdown.get(budget.category_name)
            spent = stat.amount if stat else ZERO
            monthly = spent / 12

            before = (
                previous.category_breakdown.get(budget.category_name)
                if previous is not None
                else None
            )
            trend = spent / before.amount if before and before.amount > 0 else ONE
            predicted = monthly * trend

            risk = _clamp((predicted / limit - ONE) * 100, ZERO, Decimal("100"))
            predictions.append(
                BudgetPrediction(
                    category=budget.category_name,
                    current_spending=monthly,
                    predicted_spending=predicted,
                    budget_limit=limit,
                    over_budget_risk=risk,
                    recommended_budget=max(limit, predicted * BUDGET_HEADROOM),
                ),
            )
        return sorted(predictions, key=lambda p: (-p.over_budget_risk, p.category))
