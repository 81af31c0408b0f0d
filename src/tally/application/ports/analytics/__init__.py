"""Analytics ports.

The data port is the only way the pipeline reads from the external store.
It returns normalized records, never raw rows.
"""

from tally.application.ports.analytics.analytics_data_port import AnalyticsDataPort
from tally.application.ports.analytics.computed_alert_sink import ComputedAlertSink

__all__ = ["AnalyticsDataPort", "ComputedAlertSink"]
