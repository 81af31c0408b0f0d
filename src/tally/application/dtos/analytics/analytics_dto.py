"""Analytics DTOs returned by the queries and commands.

They wrap domain value objects with what the caller needs to render them:
the user's currency, the window that was analysed and how many raw rows the
ingestion step had to skip.
"""

from dataclasses import dataclass, field

from tally.domain.analytics.value_objects import (
    DashboardMetrics,
    DateRange,
    ForecastResult,
    HistoricalDataPoint,
    Insight,
    QuarterlyAggregate,
    SpendingInsights,
    YearlyAggregate,
    YearOverYearMetrics,
)


@dataclass
class YearOverYearReport:
    """Yearly aggregates (newest first) plus the comparison of the two newest."""

    years: list[YearlyAggregate]
    quarters: list[QuarterlyAggregate]
    top_categories: list[str]
    comparison: YearOverYearMetrics | None
    insights: SpendingInsights
    currency: str
    skipped_records: int = 0


@dataclass
class SpendingForecastReport:
    overall: ForecastResult
    by_category: dict[str, ForecastResult]
    history_months: int
    currency: str
    skipped_records: int = 0


@dataclass
class HistoricalReport:
    """Monthly budget utilization history, oldest first."""

    points: list[HistoricalDataPoint]
    currency: str
    skipped_records: int = 0


@dataclass
class DashboardMetricsResult:
    metrics: DashboardMetrics
    period: DateRange
    previous_period: DateRange
    currency: str


@dataclass
class AlertsResult:
    """Alerts computed for a user and whether they were written back."""

    alerts: list[Insight] = field(default_factory=list)
    persisted: bool = False
