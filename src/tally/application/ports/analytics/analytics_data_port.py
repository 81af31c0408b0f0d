"""Analytics data port (row fetch interface)."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from tally.domain.analytics.value_objects import (
    BudgetRecord,
    DateRange,
    GoalRecord,
    RecordBatch,
    TransactionRecord,
)


class AnalyticsDataPort(Protocol):
    """Read access to one user's already-authorized rows.

    Implementations raise ``DataFetchError`` when the store cannot be reached
    and skip (and count) rows that fail normalization.
    """

    async def fetch_transactions(
        self,
        user_id: UUID,
        date_range: DateRange,
    ) -> RecordBatch[TransactionRecord]:
        """Transactions dated inside ``date_range`` (inclusive), oldest first."""
        ...

    async def fetch_budgets(self, user_id: UUID) -> RecordBatch[BudgetRecord]:
        ...

    async def fetch_goals(self, user_id: UUID) -> RecordBatch[GoalRecord]:
        ...
