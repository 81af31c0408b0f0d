"""Value objects for the analytics domain."""

from tally.domain.analytics.value_objects.dashboard import (
    CategoryTrend,
    DashboardMetrics,
    MonthlySummary,
    PeriodActivity,
)
from tally.domain.analytics.value_objects.forecast import (
    BudgetPrediction,
    ForecastPoint,
    ForecastRange,
    ForecastResult,
    SpendingForecast,
)
from tally.domain.analytics.value_objects.historical import (
    CategoryBudgetUsage,
    HistoricalDataPoint,
)
from tally.domain.analytics.value_objects.insight import (
    AlertSeverity,
    Impact,
    Insight,
    InsightType,
    SpendingInsights,
)
from tally.domain.analytics.value_objects.policy import (
    DEFAULT_SEASONAL_FACTORS,
    AnalyticsPolicy,
)
from tally.domain.analytics.value_objects.records import (
    UNCATEGORIZED,
    BudgetPeriod,
    BudgetRecord,
    DateRange,
    GoalRecord,
    RecordBatch,
    TransactionRecord,
    TransactionType,
)
from tally.domain.analytics.value_objects.time_bucket import (
    BucketGranularity,
    CategoryStat,
    TimeBucket,
)
from tally.domain.analytics.value_objects.trend import (
    GrowthMetrics,
    PeriodComparison,
    PeriodMetrics,
    TrendDirection,
    TrendResult,
    YearOverYearMetrics,
)
from tally.domain.analytics.value_objects.yearly_aggregate import (
    CategorySummary,
    QuarterlyAggregate,
    SeasonalPattern,
    SpendingTrendSummary,
    Volatility,
    YearlyAggregate,
)

__all__ = [
    "DEFAULT_SEASONAL_FACTORS",
    "UNCATEGORIZED",
    "AlertSeverity",
    "AnalyticsPolicy",
    "BucketGranularity",
    "BudgetPeriod",
    "BudgetPrediction",
    "BudgetRecord",
    "CategoryBudgetUsage",
    "CategoryStat",
    "CategorySummary",
    "CategoryTrend",
    "DashboardMetrics",
    "DateRange",
    "ForecastPoint",
    "ForecastRange",
    "ForecastResult",
    "GoalRecord",
    "GrowthMetrics",
    "HistoricalDataPoint",
    "Impact",
    "Insight",
    "InsightType",
    "MonthlySummary",
    "PeriodActivity",
    "PeriodComparison",
    "PeriodMetrics",
    "QuarterlyAggregate",
    "RecordBatch",
    "SeasonalPattern",
    "SpendingForecast",
    "SpendingInsights",
    "SpendingTrendSummary",
    "TimeBucket",
    "TransactionRecord",
    "TransactionType",
    "TrendDirection",
    "TrendResult",
    "Volatility",
    "YearOverYearMetrics",
    "YearlyAggregate",
]
