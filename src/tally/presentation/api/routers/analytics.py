"""Analytics router: year-over-year, forecasts, insights, alerts and dashboards.

All endpoints read one user's data, identified by the ``X-User-Id`` header,
and recompute their results per request.
"""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from tally.application.commands.analytics import GenerateAlertsCommand
from tally.application.queries.analytics import (
    BudgetPredictionsQuery,
    CategoryInsightsQuery,
    DashboardMetricsQuery,
    HistoricalDataQuery,
    HistoricalInsightsQuery,
    MonthlySummaryQuery,
    PredictiveInsightsQuery,
    SeasonalForecastQuery,
    SpendingForecastQuery,
    SpendingProjectionQuery,
    TimeBasedInsightsQuery,
    YearOverYearQuery,
)
from tally.domain.analytics.value_objects import BucketGranularity
from tally.presentation.api.dependencies import AnalyticsFactoryDep
from tally.presentation.api.schemas.analytics import (
    AlertsResponse,
    BudgetPredictionResponse,
    CategoryTrendResponse,
    DashboardMetricsResponse,
    ForecastResultResponse,
    HistoricalDataResponse,
    InsightResponse,
    MonthlySummaryResponse,
    PeriodActivityResponse,
    SeasonalForecastResponse,
    SpendingForecastResponse,
    YearOverYearResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

YearsParam = Annotated[
    list[int] | None,
    Query(description="Years to aggregate (default: current and two previous)"),
]
HorizonParam = Annotated[
    int | None,
    Query(ge=1, le=24, description="Months to forecast (default from settings)"),
]
HistoryMonthsParam = Annotated[
    int,
    Query(ge=3, le=60, description="Months of history the forecast is fitted on"),
]
MonthsParam = Annotated[
    int,
    Query(ge=1, le=60, description="Number of months to look back"),
]
MonthsAheadParam = Annotated[
    int,
    Query(ge=1, le=12, description="Number of months to project"),
]
StartParam = Annotated[
    date | None,
    Query(description="First day of the window (inclusive)"),
]
EndParam = Annotated[
    date | None,
    Query(description="Last day of the window (inclusive, default today)"),
]
RequiredStartParam = Annotated[date, Query(description="First day (inclusive)")]
RequiredEndParam = Annotated[date, Query(description="Last day (inclusive)")]
GroupByParam = Annotated[
    BucketGranularity,
    Query(description="Bucket size: day, week (Sunday start) or month"),
]


def _check_window(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end must not be before start",
        )


# -----------------------------------------------------------------------------
# Year-over-year
# -----------------------------------------------------------------------------


@router.get(
    "/year-over-year",
    summary="Get yearly aggregates and year-over-year comparison",
    responses={
        200: {"description": "Aggregates newest first, comparison of the two newest"},
    },
)
async def get_year_over_year(
    factory: AnalyticsFactoryDep,
    years: YearsParam = None,
) -> YearOverYearResponse:
    """
    Aggregate each requested year into months, quarters and categories.

    The comparison and the plain-text insights use the two newest years.
    """
    query = YearOverYearQuery.from_factory(factory)
    result = await query.execute(years=years)
    return YearOverYearResponse.model_validate(result)


# -----------------------------------------------------------------------------
# Forecasts
# -----------------------------------------------------------------------------


@router.get(
    "/forecast/spending",
    summary="Forecast total and per-category spending",
)
async def get_spending_forecast(
    factory: AnalyticsFactoryDep,
    horizon: HorizonParam = None,
    history_months: HistoryMonthsParam = 12,
) -> SpendingForecastResponse:
    """
    Trend and seasonality forecast for the coming months.

    With fewer than three months of history the result is flagged
    ``insufficient_data`` and carries no points.
    """
    query = SpendingForecastQuery.from_factory(factory)
    result = await query.execute(horizon=horizon, history_months=history_months)
    return SpendingForecastResponse.model_validate(result)


@router.get(
    "/forecast/seasonal",
    summary="Seasonal spending forecast",
)
async def get_seasonal_forecast(
    factory: AnalyticsFactoryDep,
    horizon: HorizonParam = None,
) -> list[SeasonalForecastResponse]:
    query = SeasonalForecastQuery.from_factory(factory)
    result = await query.execute(horizon=horizon)
    return [SeasonalForecastResponse.model_validate(f) for f in result]


@router.get(
    "/forecast/budgets",
    summary="Predict budget overruns per category",
)
async def get_budget_predictions(
    factory: AnalyticsFactoryDep,
) -> list[BudgetPredictionResponse]:
    """Budgets ordered by the risk of being exceeded, highest first."""
    query = BudgetPredictionsQuery.from_factory(factory)
    result = await query.execute()
    return [BudgetPredictionResponse.model_validate(p) for p in result]


@router.get(
    "/forecast/projection",
    summary="Project spending from the budget history trend",
)
async def get_spending_projection(
    factory: AnalyticsFactoryDep,
    months_ahead: MonthsAheadParam = 3,
) -> ForecastResultResponse:
    query = SpendingProjectionQuery.from_factory(factory)
    result = await query.execute(months_ahead=months_ahead)
    return ForecastResultResponse.model_validate(result)


# -----------------------------------------------------------------------------
# Insights
# -----------------------------------------------------------------------------


@router.get(
    "/insights/predictive",
    summary="Get predictive insights",
)
async def get_predictive_insights(
    factory: AnalyticsFactoryDep,
) -> list[InsightResponse]:
    """Trend, savings, seasonal and optimization insights for the current year."""
    query = PredictiveInsightsQuery.from_factory(factory)
    result = await query.execute()
    return [InsightResponse.model_validate(i) for i in result]


@router.get(
    "/insights/historical",
    summary="Get insights from the budget history",
)
async def get_historical_insights(
    factory: AnalyticsFactoryDep,
    months: MonthsParam = 6,
) -> list[InsightResponse]:
    query = HistoricalInsightsQuery.from_factory(factory)
    result = await query.execute(months=months)
    return [InsightResponse.model_validate(i) for i in result]


@router.get(
    "/insights/categories",
    summary="Get category trends for a window",
)
async def get_category_insights(
    factory: AnalyticsFactoryDep,
    start: StartParam = None,
    end: EndParam = None,
) -> list[CategoryTrendResponse]:
    """Expense categories compared with the equally long window before."""
    _check_window(start, end)
    query = CategoryInsightsQuery.from_factory(factory)
    result = await query.execute(start=start, end=end)
    return [CategoryTrendResponse.model_validate(t) for t in result]


@router.get(
    "/insights/time-based",
    summary="Get activity per day, week or month",
)
async def get_time_based_insights(
    factory: AnalyticsFactoryDep,
    start: RequiredStartParam,
    end: RequiredEndParam,
    group_by: GroupByParam = BucketGranularity.DAY,
) -> list[PeriodActivityResponse]:
    _check_window(start, end)
    if group_by not in (
        BucketGranularity.DAY,
        BucketGranularity.WEEK,
        BucketGranularity.MONTH,
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="group_by must be day, week or month",
        )
    query = TimeBasedInsightsQuery.from_factory(factory)
    result = await query.execute(start=start, end=end, group_by=group_by)
    return [PeriodActivityResponse.model_validate(a) for a in result]


# -----------------------------------------------------------------------------
# Budget history
# -----------------------------------------------------------------------------


@router.get(
    "/history",
    summary="Get monthly budget utilization history",
)
async def get_historical_data(
    factory: AnalyticsFactoryDep,
    months: MonthsParam = 12,
) -> HistoricalDataResponse:
    """One point per month, oldest first, starting at the first month with spending."""
    query = HistoricalDataQuery.from_factory(factory)
    result = await query.execute(months=months)
    return HistoricalDataResponse.model_validate(result)


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------


@router.get(
    "/dashboard/metrics",
    summary="Get dashboard metrics for a window",
)
async def get_dashboard_metrics(
    factory: AnalyticsFactoryDep,
    start: StartParam = None,
    end: EndParam = None,
) -> DashboardMetricsResponse:
    """
    Headline numbers for the window (default: last 30 days).

    Growth rates compare against the window of the same length right before.
    """
    _check_window(start, end)
    query = DashboardMetricsQuery.from_factory(factory)
    result = await query.execute(start=start, end=end)
    metrics = result.metrics
    return DashboardMetricsResponse(
        period_start=result.period.start,
        period_end=result.period.end,
        previous_period_start=result.previous_period.start,
        previous_period_end=result.previous_period.end,
        currency=result.currency,
        total_transactions=metrics.total_transactions,
        average_transaction_amount=metrics.average_transaction_amount,
        largest_expense=metrics.largest_expense,
        largest_income=metrics.largest_income,
        most_active_day=metrics.most_active_day,
        most_active_category=metrics.most_active_category,
        savings_rate=metrics.savings_rate,
        expense_growth_rate=metrics.expense_growth_rate,
        income_growth_rate=metrics.income_growth_rate,
    )


@router.get(
    "/dashboard/monthly-summary",
    summary="Get monthly income and expense summaries",
)
async def get_monthly_summary(
    factory: AnalyticsFactoryDep,
    start: RequiredStartParam,
    end: RequiredEndParam,
) -> list[MonthlySummaryResponse]:
    _check_window(start, end)
    query = MonthlySummaryQuery.from_factory(factory)
    result = await query.execute(start=start, end=end)
    return [MonthlySummaryResponse.model_validate(m) for m in result]


# -----------------------------------------------------------------------------
# Alerts
# -----------------------------------------------------------------------------


@router.post(
    "/alerts",
    summary="Generate alerts and store them",
    responses={
        200: {"description": "Computed alerts, most severe first"},
        503: {"description": "The data source could not be reached"},
    },
)
async def generate_alerts(
    factory: AnalyticsFactoryDep,
    persist: Annotated[bool, Query(description="Write alerts back")] = True,
) -> AlertsResponse:
    """
    Evaluate budget, spending surge, savings and goal rules.

    Storing the alerts is best-effort; ``persisted`` reports whether it worked.
    """
    command = GenerateAlertsCommand.from_factory(factory)
    result = await command.execute(persist=persist)
    if result.persisted:
        try:
            await factory.session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Could not commit computed alerts: %s", e)
            await factory.session.rollback()
            result.persisted = False
    else:
        await factory.session.rollback()
    return AlertsResponse.model_validate(result)
