"""Analytics DTOs - report wrappers around domain value objects."""

from tally.application.dtos.analytics.analytics_dto import (
    AlertsResult,
    DashboardMetricsResult,
    HistoricalReport,
    SpendingForecastReport,
    YearOverYearReport,
)

__all__ = [
    "AlertsResult",
    "DashboardMetricsResult",
    "HistoricalReport",
    "SpendingForecastReport",
    "YearOverYearReport",
]
