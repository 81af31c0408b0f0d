"""SQLAlchemy implementation of ComputedAlertSink."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from tally.domain.analytics.value_objects import AlertSeverity
from tally.infrastructure.persistence.sqlalchemy.models.analytics import (
    ComputedAlertModel,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from tally.domain.analytics.value_objects import Insight


def _payload(alert: Insight) -> dict[str, Any]:
    return {
        "value": str(alert.value) if alert.value is not None else None,
        "change": str(alert.change) if alert.change is not None else None,
        "impact": alert.impact.value,
        "confidence": alert.confidence,
        "recommendation": alert.recommendation,
        "suggested_actions": list(alert.suggested_actions),
    }


class SqlAlchemyComputedAlertSink:
    """Upserts alerts by ``(user_id, alert_key)``.

    The session is flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def persist_computed_alerts(
        self,
        user_id: UUID,
        alerts: Sequence[Insight],
    ) -> None:
        for alert in alerts:
            await self._session.merge(
                ComputedAlertModel(
                    user_id=user_id,
                    alert_key=alert.key,
                    type=alert.type.value,
                    severity=(alert.severity or AlertSeverity.LOW).value,
                    title=alert.title,
                    message=alert.description,
                    category=alert.category,
                    action_required=alert.action_required,
                    payload=_payload(alert),
                ),
            )
        await self._session.flush()
