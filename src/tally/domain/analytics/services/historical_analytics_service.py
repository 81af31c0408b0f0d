"""Monthly budget utilization history and the trend projection built on it."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from tally.domain.analytics.services.temporal_bucketing_service import (
    TemporalBucketingService,
    add_months,
)
from tally.domain.analytics.services.trend_analysis_service import (
    TrendAnalysisService,
)
from tally.domain.analytics.value_objects.forecast import (
    ForecastPoint,
    ForecastRange,
    ForecastResult,
)
from tally.domain.analytics.value_objects.historical import (
    CategoryBudgetUsage,
    HistoricalDataPoint,
)
from tally.domain.analytics.value_objects.policy import AnalyticsPolicy
from tally.domain.analytics.value_objects.records import (
    BudgetRecord,
    DateRange,
    TransactionRecord,
)
from tally.domain.analytics.value_objects.time_bucket import ZERO
from tally.domain.shared.time import days_in_month

HUNDRED = Decimal("100")
MIN_PROJECTION_CONFIDENCE = 20

_DEFAULT_POLICY = AnalyticsPolicy()


def _ratio(part: Decimal, whole: Decimal) -> Decimal:
    return part / whole * HUNDRED if whole > 0 else ZERO


class HistoricalAnalyticsService:
    @staticmethod
    def window(today: date, months: int) -> DateRange:
        """The ``months`` calendar months ending with the current one."""
        year, month = add_months(today.year, today.month, -(months - 1))
        return DateRange(
            start=date(year, month, 1),
            end=date(today.year, today.month, days_in_month(today.year, today.month)),
        )

    @staticmethod
    def historical_data(
        budgets: Iterable[BudgetRecord],
        transactions: Iterable[TransactionRecord],
        today: date,
        months: int = 12,
    ) -> list[HistoricalDataPoint]:
        """One point per month, oldest first, every budget applied to every month.

        Budgets are converted to their monthly equivalent. The per-category
        breakdown only lists budgeted categories, while ``total_spent``
        covers every expense. Months before the first recorded expense are
        left out, so a new user gets a short history rather than leading zeros.
        """
        budgeted: dict[str, Decimal] = defaultdict(Decimal)
        for budget in budgets:
            budgeted[budget.category_name] += budget.monthly_amount
        total_budget = sum(budgeted.values(), ZERO)

        buckets = TemporalBucketingService.trailing_months(
            (t for t in transactions if t.is_expense), months, today
        )

        first_active = next(
            (i for i, b in enumerate(buckets) if not b.is_empty), len(buckets)
        )

        points = []
        for bucket in buckets[first_active:]:
            usage = []
            for category in sorted(budgeted):
                stat = bucket.category_breakdown.get(category)
                spent = stat.amount if stat else ZERO
                usage.append(
                    CategoryBudgetUsage(
                        category=category,
                        budgeted=budgeted[category],
                        spent=spent,
                        percentage=_ratio(spent, budgeted[category]),
                    ),
                )
            points.append(
                HistoricalDataPoint(
                    period=bucket.label,
                    date=bucket.start_date,
                    total_budget=total_budget,
                    total_spent=bucket.total_expense,
                    utilization=_ratio(bucket.total_expense, total_budget),
                    category_breakdown=tuple(usage),
                ),
            )
        return points

    @staticmethod
    def projection_forecast(
        points: Sequence[HistoricalDataPoint],
        today: date,
        months_ahead: int = 3,
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> ForecastResult:
        """Straight-line projection of the recent half-over-half trend.

        Confidence shrinks as the recent months get more dispersed.
        """
        if len(points) < policy.min_forecast_points:
            return ForecastResult.insufficient(len(points), policy.min_forecast_points)

        recent = [p.total_spent for p in points[-policy.forecast_window :]]
        average = sum(recent, ZERO) / len(recent)
        trend = TrendAnalysisService.calculate_trend(recent, policy)
        variance = TrendAnalysisService.population_variance(recent)
        margin = variance.sqrt() * policy.range_multiplier

        if average > 0:
            confidence = max(
                MIN_PROJECTION_CONFIDENCE, int(100 - variance / average * HUNDRED)
            )
        else:
            confidence = MIN_PROJECTION_CONFIDENCE
        confidence = min(100, confidence)

        forecast = []
        for ahead in range(1, months_ahead + 1):
            year, month = add_months(today.year, today.month, ahead)
            predicted = max(
                ZERO, average + trend.percentage_change / HUNDRED * average * ahead
            )
            forecast.append(
                ForecastPoint(
                    period=f"{year:04d}-{month:02d}",
                    predicted_value=predicted,
                    confidence=confidence,
                    range=ForecastRange(
                        min=max(ZERO, predicted - margin),
                        max=predicted + margin,
                    ),
                ),
            )
        return ForecastResult(
            points=tuple(forecast),
            methodology=(
                f"Linear trend analysis based on {len(recent)} months of "
                "historical data"
            ),
        )
