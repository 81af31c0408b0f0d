"""Spending projection query."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tally.application.queries.analytics.historical_data_query import (
    HistoricalDataQuery,
)
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import HistoricalAnalyticsService
from tally.domain.analytics.value_objects import ForecastResult

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class SpendingProjectionQuery:
    """Straight-line projection of the last year's monthly spending."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader
        self._history = HistoricalDataQuery(loader)

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> SpendingProjectionQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self, months_ahead: int = 3) -> ForecastResult:
        report = await self._history.execute(12)
        return HistoricalAnalyticsService.projection_forecast(
            report.points,
            self._loader.user.today(),
            months_ahead=months_ahead,
            policy=self._loader.policy,
        )
