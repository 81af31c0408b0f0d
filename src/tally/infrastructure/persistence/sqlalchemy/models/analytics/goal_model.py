"""SQLAlchemy model for savings goals."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tally.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class GoalModel(Base, TimestampMixin):
    __tablename__ = "goals"

    __table_args__ = (Index("ix_goals_user_id", "user_id"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0"),
    )
    deadline: Mapped[date] = mapped_column(Date, nullable=False)
