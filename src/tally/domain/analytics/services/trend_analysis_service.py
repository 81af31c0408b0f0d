"""Growth percentages, trend direction and year-over-year comparisons."""

from __future__ import annotations

from calendar import month_abbr, month_name
from dataclasses import replace
from decimal import Decimal
from typing import Sequence

from tally.domain.analytics.value_objects.policy import AnalyticsPolicy
from tally.domain.analytics.value_objects.time_bucket import ZERO, TimeBucket
from tally.domain.analytics.value_objects.trend import (
    GrowthMetrics,
    PeriodComparison,
    PeriodMetrics,
    TrendDirection,
    TrendResult,
    YearOverYearMetrics,
)
from tally.domain.analytics.value_objects.yearly_aggregate import (
    QuarterlyAggregate,
    SeasonalPattern,
    SpendingTrendSummary,
    Volatility,
    YearlyAggregate,
)

HUNDRED = Decimal("100")

# Coefficient of variation boundaries for the volatility classes
LOW_VOLATILITY_CV = Decimal("0.2")
HIGH_VOLATILITY_CV = Decimal("0.5")

_DEFAULT_POLICY = AnalyticsPolicy()


def _mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return sum(values, ZERO) / len(values)


class TrendAnalysisService:
    """Pure functions quantifying how a metric changed over time."""

    @staticmethod
    def calculate_growth_percentage(current: Decimal, previous: Decimal) -> Decimal:
        """Signed growth from ``previous`` to ``current`` in percent.

        A zero baseline yields 100 when something appeared and 0 otherwise.
        The divisor is ``abs(previous)`` so shrinking always reads negative,
        which makes ``(0, y > 0)`` exactly -100.
        """
        if previous == 0:
            return HUNDRED if current > 0 else ZERO
        return (current - previous) / abs(previous) * HUNDRED

    @staticmethod
    def direction_for(
        percentage_change: Decimal,
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> TrendDirection:
        if abs(percentage_change) < policy.stable_threshold_pct:
            return TrendDirection.STABLE
        if percentage_change > 0:
            return TrendDirection.INCREASING
        return TrendDirection.DECREASING

    @staticmethod
    def calculate_trend(
        series: Sequence[Decimal],
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> TrendResult:
        """Compare the average of the first half of ``series`` to the second.

        For odd lengths the extra element belongs to the second half.
        """
        if len(series) < policy.min_trend_points:
            return TrendResult.insufficient(
                f"Need at least {policy.min_trend_points} periods to "
                f"determine a trend, got {len(series)}",
            )

        middle = len(series) // 2
        first_avg = _mean(series[:middle])
        second_avg = _mean(series[middle:])
        change = TrendAnalysisService.calculate_growth_percentage(
            second_avg, first_avg
        )
        direction = TrendAnalysisService.direction_for(change, policy)

        if direction is TrendDirection.STABLE:
            description = "Relatively stable"
        elif direction is TrendDirection.INCREASING:
            description = f"Increasing by {abs(change):.1f}%"
        else:
            description = f"Decreasing by {abs(change):.1f}%"
        return TrendResult(
            direction=direction,
            percentage_change=change,
            description=description,
        )

    @staticmethod
    def population_variance(values: Sequence[Decimal]) -> Decimal:
        if not values:
            return ZERO
        mean = _mean(values)
        return sum(((v - mean) ** 2 for v in values), ZERO) / len(values)

    @staticmethod
    def standard_deviation(values: Sequence[Decimal]) -> Decimal:
        return TrendAnalysisService.population_variance(values).sqrt()

    @staticmethod
    def classify_volatility(values: Sequence[Decimal]) -> Volatility:
        """Volatility class from the coefficient of variation."""
        mean = _mean(values)
        if mean <= 0:
            return Volatility.LOW
        cv = TrendAnalysisService.standard_deviation(values) / mean
        if cv < LOW_VOLATILITY_CV:
            return Volatility.LOW
        if cv < HIGH_VOLATILITY_CV:
            return Volatility.MEDIUM
        return Volatility.HIGH

    @staticmethod
    def seasonal_patterns(
        yearly: Sequence[YearlyAggregate],
    ) -> tuple[SeasonalPattern, ...]:
        """Typical spending per calendar month across years with activity."""
        active = [agg for agg in yearly if agg.has_activity]
        if not active:
            return ()

        overall = _mean([agg.average_monthly_spending for agg in active])
        patterns = []
        for month in range(1, 13):
            samples = [agg.month(month).total_expense for agg in active]
            typical = _mean(samples)
            variance = TrendAnalysisService.population_variance(samples)
            if overall > 0 and typical > overall * Decimal("1.2"):
                description = "Above average spending"
            elif overall > 0 and typical < overall * Decimal("0.8"):
                description = "Below average spending"
            else:
                description = "Typical spending"
            patterns.append(
                SeasonalPattern(
                    month=month_name[month],
                    month_number=month,
                    typical_spending=typical,
                    variance=variance,
                    description=description,
                ),
            )
        return tuple(patterns)

    @staticmethod
    def summarize_spending_trends(
        aggregate: YearlyAggregate,
        history: Sequence[YearlyAggregate] = (),
        previous: YearlyAggregate | None = None,
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> SpendingTrendSummary:
        """Month, quarter and year growth plus volatility for one year."""
        growth = TrendAnalysisService.calculate_growth_percentage

        active_months = [m for m in aggregate.months if not m.is_empty]
        monthly_growth = ZERO
        if len(active_months) >= 2:
            monthly_growth = growth(
                active_months[-1].total_expense, active_months[-2].total_expense
            )

        active_quarters = [q for q in aggregate.quarters if q.transaction_count > 0]
        quarterly_growth = ZERO
        if len(active_quarters) >= 2:
            quarterly_growth = growth(
                active_quarters[-1].total_spending,
                active_quarters[-2].total_spending,
            )

        yearly_growth = ZERO
        if previous is not None:
            yearly_growth = growth(aggregate.total_spending, previous.total_spending)

        spending = [m.total_expense for m in active_months]
        trend = TrendAnalysisService.calculate_trend(spending, policy)
        return SpendingTrendSummary(
            monthly_growth=monthly_growth,
            quarterly_growth=quarterly_growth,
            yearly_growth=yearly_growth,
            direction=trend.direction,
            volatility=TrendAnalysisService.classify_volatility(spending),
            seasonality=TrendAnalysisService.seasonal_patterns(
                history or [aggregate],
            ),
        )

    @staticmethod
    def with_spending_trends(
        yearly: Sequence[YearlyAggregate],
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> list[YearlyAggregate]:
        """Copies of ``yearly`` with ``spending_trends`` filled in."""
        by_year = {agg.year: agg for agg in yearly}
        return [
            replace(
                agg,
                spending_trends=TrendAnalysisService.summarize_spending_trends(
                    agg,
                    history=yearly,
                    previous=by_year.get(agg.year - 1),
                    policy=policy,
                ),
            )
            for agg in yearly
        ]

    @staticmethod
    def _period_metrics(
        spending: Decimal,
        income: Decimal,
        transactions: int,
        top_category: str | None,
    ) -> PeriodMetrics:
        return PeriodMetrics(
            spending=spending,
            income=income,
            net_income=income - spending,
            transactions=transactions,
            top_category=top_category,
        )

    @staticmethod
    def _growth(current: PeriodMetrics, previous: PeriodMetrics) -> GrowthMetrics:
        growth = TrendAnalysisService.calculate_growth_percentage
        return GrowthMetrics(
            spending_growth=growth(current.spending, previous.spending),
            income_growth=growth(current.income, previous.income),
            net_income_growth=growth(current.net_income, previous.net_income),
            transaction_growth=growth(
                Decimal(current.transactions), Decimal(previous.transactions)
            ),
        )

    @staticmethod
    def _month_metrics(bucket: TimeBucket) -> PeriodMetrics:
        return TrendAnalysisService._period_metrics(
            bucket.total_expense,
            bucket.total_income,
            bucket.transaction_count,
            bucket.top_expense_category,
        )

    @staticmethod
    def _quarter_metrics(quarter: QuarterlyAggregate) -> PeriodMetrics:
        top = None
        if quarter.category_breakdown:
            top = min(
                quarter.category_breakdown.items(),
                key=lambda item: (-item[1].amount, item[0]),
            )[0]
        return TrendAnalysisService._period_metrics(
            quarter.total_spending,
            quarter.total_income,
            quarter.transaction_count,
            top,
        )

    @staticmethod
    def year_over_year_metrics(
        current: YearlyAggregate,
        previous: YearlyAggregate,
    ) -> YearOverYearMetrics:
        """Growth bundle comparing two adjacent years.

        Category growth covers the union of both years' expense categories; a
        category missing from one year counts as zero there.
        """
        growth = TrendAnalysisService.calculate_growth_percentage

        categories = sorted(
            set(current.category_breakdown) | set(previous.category_breakdown)
        )
        category_growth = {}
        for name in categories:
            now = current.category_breakdown.get(name)
            before = previous.category_breakdown.get(name)
            category_growth[name] = growth(
                now.amount if now else ZERO,
                before.amount if before else ZERO,
            )

        monthly = []
        for number in range(1, 13):
            now = TrendAnalysisService._month_metrics(current.month(number))
            before = TrendAnalysisService._month_metrics(previous.month(number))
            monthly.append(
                PeriodComparison(
                    label=month_abbr[number],
                    number=number,
                    current_year=now,
                    previous_year=before,
                    growth=TrendAnalysisService._growth(now, before),
                ),
            )

        quarterly = []
        for now_q, before_q in zip(current.quarters, previous.quarters):
            now = TrendAnalysisService._quarter_metrics(now_q)
            before = TrendAnalysisService._quarter_metrics(before_q)
            quarterly.append(
                PeriodComparison(
                    label=f"Q{now_q.quarter}",
                    number=now_q.quarter,
                    current_year=now,
                    previous_year=before,
                    growth=TrendAnalysisService._growth(now, before),
                ),
            )

        return YearOverYearMetrics(
            current_year=current.year,
            previous_year=previous.year,
            spending_growth=growth(current.total_spending, previous.total_spending),
            income_growth=growth(current.total_income, previous.total_income),
            net_income_growth=growth(current.net_income, previous.net_income),
            transaction_growth=growth(
                Decimal(current.transaction_count),
                Decimal(previous.transaction_count),
            ),
            average_transaction_size_growth=growth(
                current.average_transaction_size,
                previous.average_transaction_size,
            ),
            savings_rate_change=current.savings_rate - previous.savings_rate,
            category_growth=category_growth,
            monthly_comparison=tuple(monthly),
            quarterly_comparison=tuple(quarterly),
        )
