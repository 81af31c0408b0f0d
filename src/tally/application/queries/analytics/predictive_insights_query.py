"""Predictive insights query."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import insight_rules
from tally.domain.analytics.value_objects import Insight

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class PredictiveInsightsQuery:
    """Forward-looking insights ordered by confidence, highest first."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> PredictiveInsightsQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self) -> list[Insight]:
        today = self._loader.user.today()
        yearly, _ = await self._loader.yearly_aggregates(today=today)
        if not yearly or not yearly[0].has_activity:
            return []
        return insight_rules.predictive_insights(
            yearly,
            today,
            policy=self._loader.policy,
            currency=self._loader.user.currency,
        )
