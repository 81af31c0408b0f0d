"""Analytics factory protocol for application layer."""

from __future__ import annotations

from typing import Protocol

from tally.application.context import UserContext
from tally.application.ports.analytics import AnalyticsDataPort, ComputedAlertSink
from tally.domain.analytics.value_objects import AnalyticsPolicy


class AnalyticsFactory(Protocol):
    """Protocol for creating user-scoped analytics collaborators."""

    @property
    def user_context(self) -> UserContext:
        """The user every port created by this factory is scoped to."""
        ...

    def analytics_data_port(self) -> AnalyticsDataPort:
        """Get the data port for the configured source."""
        ...

    def computed_alert_sink(self) -> ComputedAlertSink | None:
        """Get the alert sink, or None when alerts are not persisted."""
        ...

    def analytics_policy(self) -> AnalyticsPolicy:
        """Get the thresholds used by trend, forecast and insight rules."""
        ...
