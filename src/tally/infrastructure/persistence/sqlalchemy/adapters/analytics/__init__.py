"""SQLAlchemy analytics adapters.

These are infrastructure implementations of application-layer analytics ports.
"""

from tally.infrastructure.persistence.sqlalchemy.adapters.analytics.sqlalchemy_analytics_data_adapter import (  # NOQA: E501
    SqlAlchemyAnalyticsDataAdapter,
)
from tally.infrastructure.persistence.sqlalchemy.adapters.analytics.sqlalchemy_computed_alert_sink import (  # NOQA: E501
    SqlAlchemyComputedAlertSink,
)

__all__ = ["SqlAlchemyAnalyticsDataAdapter", "SqlAlchemyComputedAlertSink"]
