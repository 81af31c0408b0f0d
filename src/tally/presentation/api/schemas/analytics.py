"""Pydantic schemas for analytics endpoints.

Response models read straight from the domain value objects and DTOs
(``from_attributes``), computed properties included. Money is serialized as
decimal strings.
"""

import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tally.domain.analytics.value_objects import (
    AlertSeverity,
    BucketGranularity,
    Impact,
    InsightType,
    TrendDirection,
    Volatility,
)


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# -----------------------------------------------------------------------------
# Buckets and yearly aggregates
# -----------------------------------------------------------------------------


class CategoryStatResponse(_FromAttributes):
    amount: Decimal
    transaction_count: int
    percentage_of_bucket_total: Decimal = Field(description="Share of the bucket total (0-100)")
    average_transaction_amount: Decimal


class TimeBucketResponse(_FromAttributes):
    """Totals of one day, week, month, quarter or year."""

    label: str = Field(description="Sortable label, e.g. '2024-03' or 'Q1 2024'")
    granularity: BucketGranularity
    start_date: datetime.date
    end_date: datetime.date
    total_income: Decimal
    total_expense: Decimal
    net_income: Decimal
    savings_rate: Decimal
    average_daily_spending: Decimal
    transaction_count: int
    top_expense_category: str | None = None
    category_breakdown: dict[str, CategoryStatResponse] = Field(
        description="Expense categories; amounts sum to total_expense"
    )
    income_breakdown: dict[str, CategoryStatResponse]


class QuarterlyAggregateResponse(_FromAttributes):
    period: str = Field(description="Quarter label, e.g. 'Q1 2024'")
    quarter: int
    year: int
    total_income: Decimal
    total_spending: Decimal
    net_income: Decimal
    transaction_count: int
    category_breakdown: dict[str, CategoryStatResponse]
    months_included: list[str]


class SeasonalPatternResponse(_FromAttributes):
    month: str
    month_number: int
    typical_spending: Decimal
    variance: Decimal
    description: str


class SpendingTrendSummaryResponse(_FromAttributes):
    monthly_growth: Decimal
    quarterly_growth: Decimal
    yearly_growth: Decimal
    direction: TrendDirection
    volatility: Volatility
    seasonality: list[SeasonalPatternResponse]


class CategorySummaryResponse(_FromAttributes):
    name: str
    amount: Decimal
    percentage: Decimal
    transaction_count: int
    average_amount: Decimal


class YearlyAggregateResponse(_FromAttributes):
    year: int
    total_income: Decimal
    total_spending: Decimal
    net_income: Decimal
    savings_rate: Decimal
    transaction_count: int
    average_monthly_spending: Decimal
    average_transaction_size: Decimal
    months: list[TimeBucketResponse] = Field(description="January to December")
    quarters: list[QuarterlyAggregateResponse]
    category_breakdown: dict[str, CategoryStatResponse]
    income_breakdown: dict[str, CategoryStatResponse]
    top_categories: list[CategorySummaryResponse]
    spending_trends: SpendingTrendSummaryResponse


# -----------------------------------------------------------------------------
# Year-over-year
# -----------------------------------------------------------------------------


class PeriodMetricsResponse(_FromAttributes):
    spending: Decimal
    income: Decimal
    net_income: Decimal
    transactions: int
    top_category: str | None = None


class GrowthMetricsResponse(_FromAttributes):
    spending_growth: Decimal
    income_growth: Decimal
    net_income_growth: Decimal
    transaction_growth: Decimal


class PeriodComparisonResponse(_FromAttributes):
    label: str
    number: int
    current_year: PeriodMetricsResponse
    previous_year: PeriodMetricsResponse
    growth: GrowthMetricsResponse


class YearOverYearMetricsResponse(_FromAttributes):
    current_year: int
    previous_year: int
    spending_growth: Decimal
    income_growth: Decimal
    net_income_growth: Decimal
    transaction_growth: Decimal
    average_transaction_size_growth: Decimal
    savings_rate_change: Decimal = Field(description="Difference in percentage points")
    category_growth: dict[str, Decimal]
    monthly_comparison: list[PeriodComparisonResponse]
    quarterly_comparison: list[PeriodComparisonResponse]


class SpendingInsightsResponse(_FromAttributes):
    trends: list[str]
    recommendations: list[str]
    alerts: list[str]


class YearOverYearResponse(_FromAttributes):
    """Yearly aggregates (newest first) and the comparison of the two newest."""

    years: list[YearlyAggregateResponse]
    quarters: list[QuarterlyAggregateResponse]
    top_categories: list[str]
    comparison: YearOverYearMetricsResponse | None = None
    insights: SpendingInsightsResponse
    currency: str
    skipped_records: int = Field(description="Raw rows rejected during ingestion")


# -----------------------------------------------------------------------------
# Forecasts
# -----------------------------------------------------------------------------


class ForecastRangeResponse(_FromAttributes):
    min: Decimal
    max: Decimal


class ForecastPointResponse(_FromAttributes):
    period: str = Field(description="Forecast month in YYYY-MM format")
    predicted_value: Decimal
    confidence: int = Field(ge=0, le=100)
    range: ForecastRangeResponse

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "period": "2025-01",
                "predicted_value": "1840.50",
                "confidence": 80,
                "range": {"min": "1620.00", "max": "2061.00"},
            }
        },
    )


class ForecastResultResponse(_FromAttributes):
    points: list[ForecastPointResponse]
    methodology: str
    insufficient_data: bool = False
    reason: str | None = None


class SpendingForecastResponse(_FromAttributes):
    overall: ForecastResultResponse
    by_category: dict[str, ForecastResultResponse]
    history_months: int
    currency: str
    skipped_records: int


class SeasonalForecastResponse(_FromAttributes):
    month: str
    year: int
    month_number: int
    predicted_spending: Decimal
    predicted_income: Decimal
    confidence: int
    factors: list[str]


class BudgetPredictionResponse(_FromAttributes):
    category: str
    current_spending: Decimal = Field(description="Average monthly spending this year")
    predicted_spending: Decimal
    budget_limit: Decimal = Field(description="Monthly equivalent of the budget")
    over_budget_risk: Decimal = Field(ge=0, le=100)
    recommended_budget: Decimal


# -----------------------------------------------------------------------------
# Insights and alerts
# -----------------------------------------------------------------------------


class TrendResultResponse(_FromAttributes):
    direction: TrendDirection
    percentage_change: Decimal
    description: str
    insufficient_data: bool = False


class InsightResponse(_FromAttributes):
    type: InsightType
    category: str
    title: str
    description: str
    confidence: int = Field(ge=0, le=100)
    impact: Impact
    timeframe: str
    key: str = ""
    severity: AlertSeverity | None = None
    value: Decimal | None = None
    change: Decimal | None = None
    recommendation: str | None = None
    action_required: bool = False
    suggested_actions: list[str] = []
    trend: TrendResultResponse | None = None
    metadata: dict[str, Any] = {}


class AlertsResponse(_FromAttributes):
    alerts: list[InsightResponse]
    persisted: bool = Field(description="Whether the alerts were written back")


# -----------------------------------------------------------------------------
# Budget history
# -----------------------------------------------------------------------------


class CategoryBudgetUsageResponse(_FromAttributes):
    category: str
    budgeted: Decimal
    spent: Decimal
    percentage: Decimal


class HistoricalDataPointResponse(_FromAttributes):
    period: str
    date: datetime.date
    total_budget: Decimal
    total_spent: Decimal
    utilization: Decimal = Field(description="Spent / budget * 100, may exceed 100")
    category_breakdown: list[CategoryBudgetUsageResponse]


class HistoricalDataResponse(_FromAttributes):
    points: list[HistoricalDataPointResponse] = Field(description="Oldest first")
    currency: str
    skipped_records: int


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------


class DashboardMetricsResponse(BaseModel):
    period_start: datetime.date
    period_end: datetime.date
    previous_period_start: datetime.date
    previous_period_end: datetime.date
    currency: str
    total_transactions: int
    average_transaction_amount: Decimal
    largest_expense: Decimal
    largest_income: Decimal
    most_active_day: str
    most_active_category: str
    savings_rate: Decimal
    expense_growth_rate: Decimal
    income_growth_rate: Decimal


class CategoryTrendResponse(_FromAttributes):
    category: str
    total_spent: Decimal
    transaction_count: int
    average_amount: Decimal
    percentage_of_total: Decimal
    trend: TrendDirection
    trend_percentage: Decimal


class PeriodActivityResponse(_FromAttributes):
    period: str
    total_spending: Decimal
    total_income: Decimal
    net_amount: Decimal
    transaction_count: int
    top_category: str


class MonthlySummaryResponse(_FromAttributes):
    name: str = Field(description="Display label, e.g. 'Mar 2024'")
    year: int
    month_number: int
    income: Decimal
    expense: Decimal
    transaction_count: int
    net_amount: Decimal
    savings_rate: Decimal
