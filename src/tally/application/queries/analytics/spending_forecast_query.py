"""Spending forecast query."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from tally.application.dtos.analytics import SpendingForecastReport
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import (
    ForecastingService,
    HistoricalAnalyticsService,
    TemporalBucketingService,
)
from tally.domain.analytics.services.temporal_bucketing_service import add_months
from tally.domain.analytics.value_objects.time_bucket import ZERO
from tally.domain.shared.time import days_in_month

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory

HISTORY_MONTHS = 12


class SpendingForecastQuery:
    """Forecast total and per-category spending for the coming months.

    History is the completed months before the current one, so a half-spent
    current month never drags the trend down.
    """

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> SpendingForecastQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(
        self,
        horizon: int | None = None,
        history_months: int = HISTORY_MONTHS,
    ) -> SpendingForecastReport:
        policy = self._loader.policy
        today = self._loader.user.today()
        last_year, last_month = add_months(today.year, today.month, -1)
        end = date(last_year, last_month, days_in_month(last_year, last_month))
        window = HistoricalAnalyticsService.window(end, history_months)

        batch = await self._loader.transactions(window)
        expenses = [t for t in batch.records if t.is_expense]
        buckets = TemporalBucketingService.trailing_months(
            expenses, history_months, end
        )

        # Months before the first recorded expense are not history
        first_active = next(
            (i for i, b in enumerate(buckets) if not b.is_empty), len(buckets)
        )
        buckets = buckets[first_active:]
        years_of_data = len({b.year for b in buckets})

        overall = ForecastingService.forecast_series(
            [b.total_expense for b in buckets],
            today.year,
            today.month,
            horizon=horizon,
            years_of_data=years_of_data,
            policy=policy,
        )

        categories = sorted({name for b in buckets for name in b.category_breakdown})
        histories = {
            name: [
                b.category_breakdown[name].amount
                if name in b.category_breakdown
                else ZERO
                for b in buckets
            ]
            for name in categories
        }
        by_category = ForecastingService.forecast_by_category(
            histories,
            today.year,
            today.month,
            horizon=horizon,
            years_of_data=years_of_data,
            policy=policy,
        )

        return SpendingForecastReport(
            overall=overall,
            by_category=by_category,
            history_months=len(buckets),
            currency=self._loader.user.currency,
            skipped_records=batch.skipped,
        )
