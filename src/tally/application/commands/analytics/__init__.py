"""Analytics commands."""

from tally.application.commands.analytics.generate_alerts_command import (
    GenerateAlertsCommand,
)

__all__ = ["GenerateAlertsCommand"]
