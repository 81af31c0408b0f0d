"""Domain services for the analytics pipeline."""

from tally.domain.analytics.services import insight_rules
from tally.domain.analytics.services.dashboard_metrics_service import (
    DashboardMetricsService,
)
from tally.domain.analytics.services.forecasting_service import ForecastingService
from tally.domain.analytics.services.historical_analytics_service import (
    HistoricalAnalyticsService,
)
from tally.domain.analytics.services.temporal_bucketing_service import (
    TemporalBucketingService,
)
from tally.domain.analytics.services.trend_analysis_service import (
    TrendAnalysisService,
)

__all__ = [
    "DashboardMetricsService",
    "ForecastingService",
    "HistoricalAnalyticsService",
    "TemporalBucketingService",
    "TrendAnalysisService",
    "insight_rules",
]
