"""SQLAlchemy model for category budgets."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tally.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class BudgetModel(Base, TimestampMixin):
    """Database model for budgets (weekly, monthly or yearly limits)."""

    __tablename__ = "budgets"

    __table_args__ = (Index("ix_budgets_user_id", "user_id"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    category_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    period: Mapped[str] = mapped_column(String(10), nullable=False, default="monthly")
