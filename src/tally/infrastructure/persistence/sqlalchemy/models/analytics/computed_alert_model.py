"""SQLAlchemy model for alerts written back by the alert generator."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tally.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class ComputedAlertModel(Base, TimestampMixin):
    """Database model for computed alerts.

    Keyed by ``(user_id, alert_key)``: regenerating an alert overwrites the
    stored one, the last writer wins.
    """

    __tablename__ = "computed_alerts"

    user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    alert_key: Mapped[str] = mapped_column(String(255), primary_key=True)

    type: Mapped[str] = mapped_column(String(20), nullable=False)
    severity: Mapped[str] = mapped_column(String(10), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    action_required: Mapped[bool] = mapped_column(Boolean, default=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return (
            f"<ComputedAlertModel(user_id={self.user_id}, "
            f"alert_key='{self.alert_key}', severity='{self.severity}')>"
        )
