"""Time-based activity query."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import DashboardMetricsService
from tally.domain.analytics.value_objects import (
    BucketGranularity,
    DateRange,
    PeriodActivity,
)

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class TimeBasedInsightsQuery:
    """Totals per day, week or month of a window, oldest first."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> TimeBasedInsightsQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(
        self,
        start: date,
        end: date,
        group_by: BucketGranularity = BucketGranularity.DAY,
    ) -> list[PeriodActivity]:
        window = DateRange(start=start, end=end)
        batch = await self._loader.transactions(window)
        return DashboardMetricsService.activity(batch.records, window, group_by)
