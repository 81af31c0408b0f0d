"""SQLAlchemy implementation of AnalyticsDataPort.

Rows are selected with their category name joined in and handed to the
ingestion normalizer as plain mappings. No grouping happens in SQL: the
bucketing stage works on the records in memory, which keeps this adapter
portable across SQLite and Postgres.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from tally.domain.shared.exceptions import DataFetchError
from tally.infrastructure.ingestion import (
    normalize_budgets,
    normalize_goals,
    normalize_transactions,
)
from tally.infrastructure.persistence.sqlalchemy.models.analytics import (
    BudgetModel,
    CategoryModel,
    GoalModel,
    TransactionModel,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Select

    from tally.domain.analytics.value_objects import (
        BudgetRecord,
        DateRange,
        GoalRecord,
        RecordBatch,
        TransactionRecord,
    )

logger = logging.getLogger(__name__)


class SqlAlchemyAnalyticsDataAdapter:
    """Reads transactions, budgets and goals straight from the database."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _rows(self, stmt: Select, what: str) -> Sequence[Mapping[str, Any]]:
        try:
            result = await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Failed to load %s: %s", what, e)
            msg = f"Could not load {what} from the database"
            raise DataFetchError(msg, details={"error": str(e)}) from e
        return [row._mapping for row in result.all()]

    async def fetch_transactions(
        self,
        user_id: UUID,
        date_range: DateRange,
    ) -> RecordBatch[TransactionRecord]:
        stmt = (
            select(
                TransactionModel.id,
                TransactionModel.user_id,
                TransactionModel.type,
                TransactionModel.amount,
                TransactionModel.date,
                CategoryModel.name.label("category_name"),
            )
            .outerjoin(CategoryModel, TransactionModel.category_id == CategoryModel.id)
            .where(TransactionModel.user_id == user_id)
            .where(TransactionModel.date >= date_range.start)
            .where(TransactionModel.date <= date_range.end)
            .order_by(TransactionModel.date, TransactionModel.id)
        )
        rows = await self._rows(stmt, "transactions")
        return normalize_transactions(rows)

    async def fetch_budgets(self, user_id: UUID) -> RecordBatch[BudgetRecord]:
        stmt = (
            select(
                BudgetModel.id,
                BudgetModel.user_id,
                BudgetModel.amount,
                BudgetModel.period,
                CategoryModel.name.label("category_name"),
            )
            .outerjoin(CategoryModel, BudgetModel.category_id == CategoryModel.id)
            .where(BudgetModel.user_id == user_id)
            .order_by(BudgetModel.id)
        )
        rows = await self._rows(stmt, "budgets")
        return normalize_budgets(rows)

    async def fetch_goals(self, user_id: UUID) -> RecordBatch[GoalRecord]:
        stmt = (
            select(
                GoalModel.id,
                GoalModel.user_id,
                GoalModel.title,
                GoalModel.target_amount,
                GoalModel.current_amount,
                GoalModel.deadline,
            )
            .where(GoalModel.user_id == user_id)
            .order_by(GoalModel.deadline, GoalModel.id)
        )
        rows = await self._rows(stmt, "goals")
        return normalize_goals(rows)
