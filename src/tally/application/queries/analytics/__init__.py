"""Analytics queries: year-over-year, forecasts, insights and dashboards."""

from tally.application.queries.analytics.budget_predictions_query import (
    BudgetPredictionsQuery,
)
from tally.application.queries.analytics.category_insights_query import (
    CategoryInsightsQuery,
)
from tally.application.queries.analytics.dashboard_metrics_query import (
    DashboardMetricsQuery,
)
from tally.application.queries.analytics.historical_data_query import (
    HistoricalDataQuery,
)
from tally.application.queries.analytics.historical_insights_query import (
    HistoricalInsightsQuery,
)
from tally.application.queries.analytics.monthly_summary_query import (
    MonthlySummaryQuery,
)
from tally.application.queries.analytics.predictive_insights_query import (
    PredictiveInsightsQuery,
)
from tally.application.queries.analytics.seasonal_forecast_query import (
    SeasonalForecastQuery,
)
from tally.application.queries.analytics.spending_forecast_query import (
    SpendingForecastQuery,
)
from tally.application.queries.analytics.spending_projection_query import (
    SpendingProjectionQuery,
)
from tally.application.queries.analytics.time_based_insights_query import (
    TimeBasedInsightsQuery,
)
from tally.application.queries.analytics.year_over_year_query import (
    YearOverYearQuery,
)

__all__ = [
    "BudgetPredictionsQuery",
    "CategoryInsightsQuery",
    "DashboardMetricsQuery",
    "HistoricalDataQuery",
    "HistoricalInsightsQuery",
    "MonthlySummaryQuery",
    "PredictiveInsightsQuery",
    "SeasonalForecastQuery",
    "SpendingForecastQuery",
    "SpendingProjectionQuery",
    "TimeBasedInsightsQuery",
    "YearOverYearQuery",
]
