"""SQLAlchemy model for income and expense transactions."""

import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tally.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class TransactionModel(Base, TimestampMixin):
    """Database model for transactions.

    Amounts are stored unsigned; ``type`` carries the direction.
    """

    __tablename__ = "transactions"

    __table_args__ = (
        # Every analytics read is a user-scoped date range scan
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_category_id", "category_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    category_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TransactionModel(id={self.id}, type='{self.type}', "
            f"amount={self.amount}, date={self.date})>"
        )
