"""Write-back port for computed alerts."""

from __future__ import annotations

from typing import Protocol, Sequence
from uuid import UUID

from tally.domain.analytics.value_objects import Insight


class ComputedAlertSink(Protocol):
    async def persist_computed_alerts(
        self,
        user_id: UUID,
        alerts: Sequence[Insight],
    ) -> None:
        """Store ``alerts`` keyed by ``(user_id, alert.key)``.

        An existing alert with the same key is overwritten.
        """
        ...
