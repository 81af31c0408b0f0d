"""Factories for application layer components."""

from tally.application.factories.analytics_factory import AnalyticsFactory

__all__ = ["AnalyticsFactory"]
