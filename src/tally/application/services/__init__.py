"""Application services shared by analytics queries and commands."""

from tally.application.services.analytics_data_loader import AnalyticsDataLoader

__all__ = ["AnalyticsDataLoader"]
