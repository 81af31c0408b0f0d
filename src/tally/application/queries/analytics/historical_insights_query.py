"""Historical insights query."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tally.application.queries.analytics.historical_data_query import (
    HistoricalDataQuery,
)
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import insight_rules
from tally.domain.analytics.value_objects import Insight

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class HistoricalInsightsQuery:
    """Spending, utilization, category and seasonal trends of recent months."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader
        self._history = HistoricalDataQuery(loader)

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> HistoricalInsightsQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self, months: int = 6) -> list[Insight]:
        report = await self._history.execute(months)
        return insight_rules.historical_insights(report.points, self._loader.policy)
