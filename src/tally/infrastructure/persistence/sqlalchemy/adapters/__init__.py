"""SQLAlchemy adapters - implementations of application ports."""

from tally.infrastructure.persistence.sqlalchemy.adapters.analytics import (
    SqlAlchemyAnalyticsDataAdapter,
    SqlAlchemyComputedAlertSink,
)

__all__ = ["SqlAlchemyAnalyticsDataAdapter", "SqlAlchemyComputedAlertSink"]
