"""Category insights query."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from tally.application.queries.analytics.dashboard_metrics_query import (
    load_with_previous_period,
)
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import DashboardMetricsService
from tally.domain.analytics.value_objects import CategoryTrend

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class CategoryInsightsQuery:
    """Expense categories of a window with their trend against the prior window."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> CategoryInsightsQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[CategoryTrend]:
        _, _, current, before = await load_with_previous_period(
            self._loader, start, end
        )
        return DashboardMetricsService.category_trends(
            current, before, self._loader.policy
        )
