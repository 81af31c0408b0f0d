"""Historical budget utilization query."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tally.application.dtos.analytics import HistoricalReport
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import HistoricalAnalyticsService

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class HistoricalDataQuery:
    """Budget versus spending for each of the last ``months`` months."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> HistoricalDataQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self, months: int = 12) -> HistoricalReport:
        today = self._loader.user.today()
        budgets = await self._loader.budgets()
        transactions = await self._loader.transactions(
            HistoricalAnalyticsService.window(today, months)
        )
        points = HistoricalAnalyticsService.historical_data(
            budgets.records,
            transactions.records,
            today,
            months,
        )
        return HistoricalReport(
            points=points,
            currency=self._loader.user.currency,
            skipped_records=budgets.skipped + transactions.skipped,
        )
