"""Monthly summary query."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import DashboardMetricsService
from tally.domain.analytics.value_objects import DateRange, MonthlySummary

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class MonthlySummaryQuery:
    """Income, expense and savings rate for each active month of a window."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> MonthlySummaryQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self, start: date, end: date) -> list[MonthlySummary]:
        window = DateRange(start=start, end=end)
        batch = await self._loader.transactions(window)
        return DashboardMetricsService.monthly_summaries(batch.records, window)
