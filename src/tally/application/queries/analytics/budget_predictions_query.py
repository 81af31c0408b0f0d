"""Budget predictions query."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import ForecastingService
from tally.domain.analytics.value_objects import BudgetPrediction

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class BudgetPredictionsQuery:
    """Next-month spend per budget with over-budget risk, riskiest first."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> BudgetPredictionsQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self) -> list[BudgetPrediction]:
        budgets = await self._loader.budgets()
        if not budgets:
            return []

        today = self._loader.user.today()
        yearly, _ = await self._loader.yearly_aggregates(
            [today.year, today.year - 1], today=today
        )
        return ForecastingService.budget_predictions(
            budgets.records,
            current=yearly[0],
            previous=yearly[1],
        )
