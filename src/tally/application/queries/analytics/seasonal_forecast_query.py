"""Seasonal month-by-month forecast query."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import ForecastingService
from tally.domain.analytics.value_objects import SpendingForecast

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class SeasonalForecastQuery:
    """Predicted spending and income for each of the next months."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> SeasonalForecastQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self, horizon: int | None = None) -> list[SpendingForecast]:
        today = self._loader.user.today()
        yearly, _ = await self._loader.yearly_aggregates(today=today)
        active = [agg for agg in yearly if agg.has_activity]
        return ForecastingService.seasonal_spending_forecast(
            active,
            today,
            horizon=horizon,
            policy=self._loader.policy,
        )
