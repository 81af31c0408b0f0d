"""SQLAlchemy model for spending and income categories."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tally.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class CategoryModel(Base, TimestampMixin):
    """Database model for categories.

    Categories without a ``user_id`` are shared defaults visible to everyone.
    """

    __tablename__ = "categories"

    __table_args__ = (Index("ix_categories_user_id", "user_id"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False, default="expense")
    color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)

    def __repr__(self) -> str:
        return f"<CategoryModel(id={self.id}, name='{self.name}')>"
