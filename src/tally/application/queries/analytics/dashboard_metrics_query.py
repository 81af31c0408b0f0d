"""Dashboard metrics query."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from tally.application.dtos.analytics import DashboardMetricsResult
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import DashboardMetricsService
from tally.domain.analytics.value_objects import DateRange, TransactionRecord

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory

DEFAULT_WINDOW_DAYS = 30


async def load_with_previous_period(
    loader: AnalyticsDataLoader,
    start: date | None,
    end: date | None,
) -> tuple[DateRange, DateRange, list[TransactionRecord], list[TransactionRecord]]:
    """Fetch a window and the equally long window before it in one call.

    Without explicit bounds the window is the last 30 days up to today.
    """
    end = end or loader.user.today()
    if start is None:
        window = DashboardMetricsService.window_ending(end, DEFAULT_WINDOW_DAYS)
    else:
        window = DateRange(start=start, end=end)
    previous = DashboardMetricsService.previous_period(window)

    batch = await loader.transactions(DateRange(start=previous.start, end=window.end))
    current = [t for t in batch if window.contains(t.date)]
    before = [t for t in batch if previous.contains(t.date)]
    return window, previous, current, before


class DashboardMetricsQuery:
    """Headline metrics of a window compared with the window before it."""

    def __init__(self, loader: AnalyticsDataLoader):
        self._loader = loader

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> DashboardMetricsQuery:
        return cls(loader=AnalyticsDataLoader.from_factory(factory))

    async def execute(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> DashboardMetricsResult:
        window, previous, current, before = await load_with_previous_period(
            self._loader, start, end
        )
        return DashboardMetricsResult(
            metrics=DashboardMetricsService.metrics(current, before),
            period=window,
            previous_period=previous,
            currency=self._loader.user.currency,
        )
