"""Loads records through the data port and feeds them to bucketing."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Sequence

from tally.application.context import UserContext
from tally.application.ports.analytics import AnalyticsDataPort
from tally.domain.analytics.services import (
    TemporalBucketingService,
    TrendAnalysisService,
)
from tally.domain.analytics.value_objects import (
    AnalyticsPolicy,
    BudgetRecord,
    DateRange,
    GoalRecord,
    RecordBatch,
    TransactionRecord,
    YearlyAggregate,
)

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory

logger = logging.getLogger(__name__)


class AnalyticsDataLoader:
    """
    Application service wrapping the data port for one user.

    All fetching for a request goes through here so that the computation
    that follows works on in-memory records only. Skipped rows are logged
    once per fetch.
    """

    def __init__(
        self,
        data_port: AnalyticsDataPort,
        user_context: UserContext,
        policy: AnalyticsPolicy,
    ):
        self._data = data_port
        self._user = user_context
        self._policy = policy

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> AnalyticsDataLoader:
        return cls(
            data_port=factory.analytics_data_port(),
            user_context=factory.user_context,
            policy=factory.analytics_policy(),
        )

    @property
    def user(self) -> UserContext:
        return self._user

    @property
    def policy(self) -> AnalyticsPolicy:
        return self._policy

    def _report_skipped(self, kind: str, batch: RecordBatch) -> None:
        if batch.skipped:
            logger.warning(
                "Skipped %d malformed %s row(s) for user %s",
                batch.skipped,
                kind,
                self._user.user_id,
            )

    async def transactions(self, window: DateRange) -> RecordBatch[TransactionRecord]:
        batch = await self._data.fetch_transactions(self._user.user_id, window)
        self._report_skipped("transaction", batch)
        return batch

    async def budgets(self) -> RecordBatch[BudgetRecord]:
        batch = await self._data.fetch_budgets(self._user.user_id)
        self._report_skipped("budget", batch)
        return batch

    async def goals(self) -> RecordBatch[GoalRecord]:
        batch = await self._data.fetch_goals(self._user.user_id)
        self._report_skipped("goal", batch)
        return batch

    async def yearly_aggregates(
        self,
        years: Sequence[int] | None = None,
        today: date | None = None,
    ) -> tuple[list[YearlyAggregate], int]:
        """Aggregates for ``years`` (newest first) and the skipped row count.

        Years default to the current year and the two before it.
        """
        today = today or self._user.today()
        wanted = sorted(set(years or TemporalBucketingService.default_years(today)))
        window = DateRange(
            start=date(wanted[0], 1, 1),
            end=date(wanted[-1], 12, 31),
        )
        batch = await self.transactions(window)
        yearly = TemporalBucketingService.build_yearly_aggregates(
            batch.records,
            wanted,
            top_n=self._policy.top_categories,
        )
        yearly = TrendAnalysisService.with_spending_trends(yearly, self._policy)
        return yearly, batch.skipped
