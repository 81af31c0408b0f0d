"""Year-over-year report query."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from tally.application.dtos.analytics import YearOverYearReport
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import (
    TemporalBucketingService,
    TrendAnalysisService,
    insight_rules,
)

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory


class YearOverYearQuery:
    """Yearly aggregates with the comparison of the two most recent years."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> YearOverYearQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(self, years: Sequence[int] | None = None) -> YearOverYearReport:
        yearly, skipped = await self._loader.yearly_aggregates(years)
        current = yearly[0] if yearly else None
        previous = yearly[1] if len(yearly) > 1 else None

        comparison = None
        if current is not None and previous is not None:
            comparison = TrendAnalysisService.year_over_year_metrics(current, previous)

        return YearOverYearReport(
            years=yearly,
            quarters=TemporalBucketingService.quarterly_series(yearly),
            top_categories=TemporalBucketingService.top_categories_across(
                yearly, self._loader.policy.top_categories
            ),
            comparison=comparison,
            insights=insight_rules.spending_insights(current, previous),
            currency=self._loader.user.currency,
            skipped_records=skipped,
        )
