"""Rule-based insights and alerts.

Every rule is a pure function of already aggregated numbers. Thresholds come
from ``AnalyticsPolicy``; the remaining literals are wording and display
confidence values.
"""

from __future__ import annotations

from calendar import month_name
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from tally.domain.analytics.services.temporal_bucketing_service import add_months
from tally.domain.analytics.services.trend_analysis_service import (
    TrendAnalysisService,
)
from tally.domain.analytics.value_objects.historical import HistoricalDataPoint
from tally.domain.analytics.value_objects.insight import (
    AlertSeverity,
    Impact,
    Insight,
    InsightType,
    SpendingInsights,
)
from tally.domain.analytics.value_objects.policy import AnalyticsPolicy
from tally.domain.analytics.value_objects.records import BudgetRecord, GoalRecord
from tally.domain.analytics.value_objects.time_bucket import ZERO
from tally.domain.analytics.value_objects.trend import TrendDirection, TrendResult
from tally.domain.analytics.value_objects.yearly_aggregate import YearlyAggregate
from tally.domain.shared.time import days_in_month, month_progress

HUNDRED = Decimal("100")
DAYS_PER_MONTH = Decimal("30")

_DEFAULT_POLICY = AnalyticsPolicy()

_SEASONS = {
    12: "Winter",
    1: "Winter",
    2: "Winter",
    3: "Spring",
    4: "Spring",
    5: "Spring",
    6: "Summer",
    7: "Summer",
    8: "Summer",
    9: "Fall",
    10: "Fall",
    11: "Fall",
}


def _pct(value: Decimal) -> str:
    return f"{value:.1f}"


def _money(currency: str, value: Decimal) -> str:
    return f"{currency}{value:,.2f}"


def _by_confidence(insights: Iterable[Insight]) -> list[Insight]:
    # sorted() is stable, so equal confidences keep rule order
    return sorted(insights, key=lambda i: -i.confidence)


# ---------------------------------------------------------------------------
# Alert rules
# ---------------------------------------------------------------------------


def budget_usage_percentage(budget: BudgetRecord, spent: Decimal) -> Decimal:
    """Share of the monthly budget already spent; exceeds 100 when over."""
    return spent / budget.monthly_amount * HUNDRED


def evaluate_budget_risk(
    budget: BudgetRecord,
    spent: Decimal,
    today: date,
    policy: AnalyticsPolicy = _DEFAULT_POLICY,
    currency: str = "",
) -> Insight | None:
    """Alert for a budget that is exceeded or close to its limit.

    At or above the exceeded threshold the alert is critical. Between the
    warning and the exceeded threshold it is a risk alert, raised to high
    severity when the pace-projected spend (``spent / month_progress``)
    would overshoot the budget.
    """
    limit = budget.monthly_amount
    used = budget_usage_percentage(budget, spent)
    name = budget.category_name

    if used >= policy.budget_exceeded_pct:
        return Insight(
            type=InsightType.BUDGET_WARNING,
            category=name,
            title=f"{name} Budget Exceeded",
            description=(
                f"You've spent {_money(currency, spent)} of your "
                f"{_money(currency, limit)} {name} budget "
                f"({_pct(used)}% used)."
            ),
            confidence=100,
            impact=Impact.HIGH,
            timeframe="This month",
            key=f"budget_exceeded_{budget.id}",
            severity=AlertSeverity.CRITICAL,
            value=spent - limit,
            change=used,
            action_required=True,
            suggested_actions=(
                f"Reduce {name} spending immediately",
                "Review recent transactions for unnecessary expenses",
                "Consider adjusting budget allocation",
            ),
            metadata={"budget_id": budget.id, "overspent": str(spent - limit)},
        )

    if used < policy.budget_warning_pct:
        return None

    projected = spent / month_progress(today)
    overage = projected - limit
    at_risk = projected > limit
    if at_risk:
        description = (
            f"You've used {_pct(used)}% of your {name} budget. At the current "
            f"pace you'll overspend by {_money(currency, overage)}."
        )
        remaining_days = days_in_month(today.year, today.month) - today.day
        daily = (limit - spent) / remaining_days if remaining_days > 0 else ZERO
        actions: tuple[str, ...] = (
            f"Reduce daily {name} spending to {_money(currency, daily)}",
            "Track expenses more closely",
        )
    else:
        description = (
            f"You've used {_pct(used)}% of your {name} budget. You're on "
            "track but close to the limit."
        )
        actions = ("Monitor spending closely for the rest of the month",)

    return Insight(
        type=InsightType.BUDGET_WARNING,
        category=name,
        title=f"{name} Budget Risk",
        description=description,
        confidence=90,
        impact=Impact.HIGH if at_risk else Impact.MEDIUM,
        timeframe="This month",
        key=f"budget_risk_{budget.id}",
        severity=AlertSeverity.HIGH if at_risk else AlertSeverity.MEDIUM,
        value=spent,
        change=used,
        action_required=at_risk,
        suggested_actions=actions,
        metadata={"budget_id": budget.id, "projected_spend": str(projected)},
    )


def detect_category_surge(
    category: str,
    amounts: Sequence[Decimal],
    policy: AnalyticsPolicy = _DEFAULT_POLICY,
    currency: str = "",
) -> Insight | None:
    """Flag the latest period of ``amounts`` when it reaches mean + k*stddev.

    ``amounts`` are per-period totals, oldest first, and include the current
    period as the last element.
    """
    if len(amounts) < policy.min_surge_points:
        return None

    mean = sum(amounts, ZERO) / len(amounts)
    stddev = TrendAnalysisService.standard_deviation(amounts)
    if stddev == 0:
        return None

    current = amounts[-1]
    expected_max = mean + policy.surge_stddev_multiplier * stddev
    if current < expected_max:
        return None

    expected_min = max(ZERO, mean - policy.surge_stddev_multiplier * stddev)
    deviation = (current - expected_max) / expected_max * HUNDRED
    if deviation > 100:
        severity = AlertSeverity.HIGH
    elif deviation > 50:
        severity = AlertSeverity.MEDIUM
    else:
        severity = AlertSeverity.LOW

    return Insight(
        type=InsightType.SPENDING_ANOMALY,
        category=category,
        title=f"Unusual {category} Spending",
        description=(
            f"Your {category} spending of {_money(currency, current)} is at or "
            f"above your typical range of {_money(currency, expected_min)}-"
            f"{_money(currency, expected_max)}."
        ),
        confidence=min(95, 60 + int(deviation / 2)),
        impact=Impact(severity.value),
        timeframe="This month",
        key=f"spending_anomaly_{category}",
        severity=severity,
        value=current,
        change=deviation,
        action_required=severity is AlertSeverity.HIGH,
        suggested_actions=(
            f"Review recent {category} transactions",
            "Check for unexpected or one-off purchases",
        ),
        metadata={"mean": str(mean), "stddev": str(stddev)},
    )


def savings_rate(total_income: Decimal, total_expense: Decimal) -> Decimal:
    if total_income <= 0:
        return ZERO
    return (total_income - total_expense) / total_income * HUNDRED


def evaluate_savings_rate(
    total_income: Decimal,
    total_expense: Decimal,
    months: int = 3,
    policy: AnalyticsPolicy = _DEFAULT_POLICY,
    currency: str = "",
) -> Insight | None:
    """Warn about a low savings rate or point out an investable surplus.

    The totals cover the last ``months`` months. Without income there is no
    rate to judge and no insight is produced.
    """
    if total_income <= 0:
        return None

    rate = savings_rate(total_income, total_expense)
    if rate < policy.low_savings_rate_pct:
        return Insight(
            type=InsightType.ALERT,
            category="savings",
            title="Low Savings Rate",
            description=(
                f"Your savings rate is {_pct(rate)}%. Saving at least "
                f"{policy.low_savings_rate_pct}% of income builds a safety net."
            ),
            confidence=90,
            impact=Impact.HIGH,
            timeframe="Current",
            key="savings_rate_low",
            severity=AlertSeverity.MEDIUM,
            value=rate,
            action_required=True,
            suggested_actions=(
                "Review recurring expenses",
                "Set up an automatic transfer to savings",
            ),
        )

    if rate > policy.high_savings_rate_pct:
        surplus = (total_income - total_expense) / months
        return Insight(
            type=InsightType.OPPORTUNITY,
            category="savings",
            title="Investment Opportunity",
            description=(
                f"With your {_pct(rate)}% savings rate you have a monthly "
                f"surplus of {_money(currency, surplus)} that could be invested "
                "for long-term growth."
            ),
            confidence=80,
            impact=Impact.MEDIUM,
            timeframe="Monthly",
            key="opportunity_investment",
            severity=AlertSeverity.LOW,
            value=surplus,
            suggested_actions=(
                "Consider opening an investment account",
                "Automate monthly investments",
            ),
            metadata={"savings_rate": str(rate)},
        )
    return None


def evaluate_goal_timeline(
    goal: GoalRecord,
    monthly_savings: Decimal,
    today: date,
    currency: str = "",
) -> Insight | None:
    """Flag a goal whose required monthly contribution exceeds actual savings."""
    remaining = goal.remaining_amount
    if remaining <= 0:
        return None

    days_left = (goal.deadline - today).days
    if days_left > 0:
        months_left = Decimal(days_left) / DAYS_PER_MONTH
        required = remaining / months_left
    else:
        months_left = ZERO
        required = remaining

    if required <= monthly_savings:
        return None

    additional = required - max(ZERO, monthly_savings)
    severity = (
        AlertSeverity.HIGH
        if days_left <= 0 or additional > monthly_savings * Decimal("0.5")
        else AlertSeverity.MEDIUM
    )
    return Insight(
        type=InsightType.GOAL_RISK,
        category="goals",
        title=f"{goal.title} Goal at Risk",
        description=(
            f"To reach your {goal.title} goal by {goal.deadline.isoformat()}, "
            f"you need to save {_money(currency, required)} per month, "
            f"{_money(currency, additional)} more than you currently do."
        ),
        confidence=85,
        impact=Impact.HIGH if severity is AlertSeverity.HIGH else Impact.MEDIUM,
        timeframe=goal.deadline.isoformat(),
        key=f"goal_risk_{goal.id}",
        severity=severity,
        value=remaining,
        change=additional,
        action_required=True,
        suggested_actions=(
            f"Increase monthly savings by {_money(currency, additional)}",
            "Reduce expenses in other categories",
            "Consider extending the deadline",
        ),
        metadata={"goal_id": goal.id, "months_left": str(months_left)},
    )


# ---------------------------------------------------------------------------
# Year-over-year findings
# ---------------------------------------------------------------------------


def spending_insights(
    current: YearlyAggregate | None,
    previous: YearlyAggregate | None,
) -> SpendingInsights:
    """Plain-text trends, recommendations and alerts for two adjacent years."""
    if current is None or previous is None:
        return SpendingInsights()

    metrics = TrendAnalysisService.year_over_year_metrics(current, previous)
    trends: list[str] = []
    recommendations: list[str] = []
    alerts: list[str] = []

    spending = metrics.spending_growth
    if spending > 20:
        alerts.append(
            f"Spending increased by {_pct(spending)}% compared to last year"
        )
        recommendations.append(
            "Consider reviewing your budget and identifying areas to reduce expenses"
        )
    elif spending > 5:
        trends.append(
            f"Moderate spending increase of {_pct(spending)}% year-over-year"
        )
    elif spending < -5:
        trends.append(
            f"Spending decreased by {_pct(abs(spending))}% compared to last year"
        )

    income = metrics.income_growth
    if income > 10:
        trends.append(f"Income increased by {_pct(income)}%")
    elif income < -10:
        alerts.append(
            f"Income decreased by {_pct(abs(income))}% compared to last year"
        )
        recommendations.append(
            "Consider exploring additional income sources or optimizing existing ones"
        )

    for category, growth in metrics.category_growth.items():
        if growth > 50:
            alerts.append(
                f"{category} spending increased significantly by {_pct(growth)}%"
            )

    return SpendingInsights(
        trends=tuple(trends),
        recommendations=tuple(recommendations),
        alerts=tuple(alerts),
    )


# ---------------------------------------------------------------------------
# Predictive insights
# ---------------------------------------------------------------------------


def _impact_for(magnitude: Decimal, high: Decimal, medium: Decimal) -> Impact:
    if magnitude > high:
        return Impact.HIGH
    if magnitude > medium:
        return Impact.MEDIUM
    return Impact.LOW


def _spending_trend_insights(
    current: YearlyAggregate,
    previous: YearlyAggregate | None,
    policy: AnalyticsPolicy,
) -> list[Insight]:
    insights = []
    if previous is not None and previous.total_spending > 0:
        growth = TrendAnalysisService.calculate_growth_percentage(
            current.total_spending, previous.total_spending
        )
        if abs(growth) > policy.stable_threshold_pct:
            up = growth > 0
            insights.append(
                Insight(
                    type=InsightType.ALERT if up else InsightType.TREND,
                    category="spending",
                    title=f"Spending {'Increase' if up else 'Decrease'} Detected",
                    description=(
                        f"Your spending has {'increased' if up else 'decreased'} "
                        f"by {_pct(abs(growth))}% compared to last year."
                    ),
                    confidence=85,
                    impact=_impact_for(abs(growth), Decimal(20), Decimal(10)),
                    timeframe="Year-over-year",
                    value=current.total_spending,
                    change=growth,
                ),
            )

    if current.total_income > 0:
        rate = current.savings_rate
        if rate < policy.low_savings_rate_pct:
            insights.append(
                Insight(
                    type=InsightType.ALERT,
                    category="savings",
                    title="Low Savings Rate Detected",
                    description=(
                        f"Your current savings rate is {_pct(rate)}%. Aim to save "
                        f"at least {policy.low_savings_rate_pct}% of income."
                    ),
                    confidence=90,
                    impact=Impact.HIGH,
                    timeframe="Current",
                    value=rate,
                ),
            )
    return insights


def _seasonal_insights(
    yearly: Sequence[YearlyAggregate],
    current: YearlyAggregate,
    today: date,
) -> list[Insight]:
    year_average = current.average_monthly_spending
    if year_average <= 0:
        return []

    insights = []
    for ahead in (1, 2, 3):
        _, month = add_months(today.year, today.month, ahead)
        samples = [agg.month(month).total_expense for agg in yearly]
        if len(samples) < 2:
            continue
        average = sum(samples, ZERO) / len(samples)
        if average > year_average * Decimal("1.2"):
            name = month_name[month]
            above = (average / year_average - 1) * HUNDRED
            insights.append(
                Insight(
                    type=InsightType.FORECAST,
                    category="seasonal",
                    title="High Spending Period Approaching",
                    description=(
                        f"{name} typically shows {above:.0f}% higher spending "
                        "than average. Plan accordingly."
                    ),
                    confidence=75,
                    impact=Impact.MEDIUM,
                    timeframe=name,
                    value=average,
                ),
            )
    return insights


def _category_trend_insights(
    current: YearlyAggregate,
    previous: YearlyAggregate | None,
) -> list[Insight]:
    if previous is None:
        return []

    insights = []
    for category, stat in current.category_breakdown.items():
        before = previous.category_breakdown.get(category)
        if before is None or before.amount <= 0:
            continue
        growth = TrendAnalysisService.calculate_growth_percentage(
            stat.amount, before.amount
        )
        if abs(growth) <= 25:
            continue
        up = growth > 0
        insights.append(
            Insight(
                type=InsightType.ALERT if up else InsightType.TREND,
                category=category,
                title=f"{category} Spending {'Surge' if up else 'Drop'}",
                description=(
                    f"Your {category.lower()} spending has "
                    f"{'increased' if up else 'decreased'} by "
                    f"{abs(growth):.0f}% this year."
                ),
                confidence=80,
                impact=Impact.HIGH if abs(growth) > 50 else Impact.MEDIUM,
                timeframe="Year-over-year",
                value=stat.amount,
                change=growth,
            ),
        )
    return insights


def _optimization_insights(current: YearlyAggregate, currency: str) -> list[Insight]:
    insights = []
    for summary in current.top_categories[:5]:
        savings = summary.amount / 12 * Decimal("0.1")
        if savings <= 50:
            continue
        insights.append(
            Insight(
                type=InsightType.RECOMMENDATION,
                category=summary.name,
                title=f"Optimize {summary.name} Spending",
                description=(
                    f"Reducing {summary.name.lower()} spending by 10% could save "
                    f"you {_money(currency, savings)} per month."
                ),
                confidence=70,
                impact=_impact_for(savings, Decimal(200), Decimal(100)),
                timeframe="Monthly",
                value=savings,
            ),
        )
    return insights


def _financial_health_insights(
    current: YearlyAggregate,
    today: date,
) -> list[Insight]:
    insights = []
    if current.total_income > 0:
        ratio = current.total_spending / current.total_income
        if ratio > Decimal("0.9"):
            insights.append(
                Insight(
                    type=InsightType.ALERT,
                    category="financial_health",
                    title="High Spending-to-Income Ratio",
                    description=(
                        f"You're spending {ratio * HUNDRED:.0f}% of your income. "
                        "Consider reducing expenses or increasing income."
                    ),
                    confidence=95,
                    impact=Impact.HIGH,
                    timeframe="Current",
                    value=ratio * HUNDRED,
                ),
            )

    elapsed = today.month if current.year == today.year else 12
    year_average = current.average_monthly_spending
    if elapsed >= 3 and year_average > 0:
        recent = current.months[:elapsed][-3:]
        recent_average = sum((m.total_expense for m in recent), ZERO) / 3
        if recent_average > year_average * Decimal("1.3"):
            above = (recent_average / year_average - 1) * HUNDRED
            insights.append(
                Insight(
                    type=InsightType.ALERT,
                    category="spending_pattern",
                    title="Unusual Spending Spike",
                    description=(
                        f"Your spending in recent months is {above:.0f}% above "
                        "your yearly average."
                    ),
                    confidence=85,
                    impact=Impact.MEDIUM,
                    timeframe="Recent months",
                    value=recent_average,
                ),
            )
    return insights


def predictive_insights(
    yearly: Sequence[YearlyAggregate],
    today: date,
    policy: AnalyticsPolicy = _DEFAULT_POLICY,
    currency: str = "",
) -> list[Insight]:
    """Forward-looking insights from up to three years of aggregates.

    ``yearly`` must be sorted newest first. Sorted by confidence, highest
    first.
    """
    if not yearly:
        return []
    current = yearly[0]
    previous = yearly[1] if len(yearly) > 1 else None

    insights: list[Insight] = []
    insights.extend(_spending_trend_insights(current, previous, policy))
    insights.extend(_seasonal_insights(yearly, current, today))
    insights.extend(_category_trend_insights(current, previous))
    insights.extend(_optimization_insights(current, currency))
    insights.extend(_financial_health_insights(current, today))
    return _by_confidence(insights)


# ---------------------------------------------------------------------------
# Historical budget insights
# ---------------------------------------------------------------------------


def historical_confidence(data_points: int, trend_strength: Decimal) -> int:
    data_confidence = min(HUNDRED, Decimal(data_points) / 12 * HUNDRED)
    trend_confidence = min(HUNDRED, abs(trend_strength) * 2)
    return int((data_confidence + trend_confidence) / 2)


def _trend_insight(
    insight_type: InsightType,
    category: str,
    title: str,
    description: str,
    trend: TrendResult,
    recommendation: str,
    data_points: int,
) -> Insight:
    return Insight(
        type=insight_type,
        category=category,
        title=title,
        description=description,
        confidence=historical_confidence(data_points, trend.magnitude),
        impact=Impact.MEDIUM,
        timeframe=f"Last {data_points} months",
        change=trend.percentage_change,
        recommendation=recommendation,
        trend=trend,
    )


def historical_insights(
    points: Sequence[HistoricalDataPoint],
    policy: AnalyticsPolicy = _DEFAULT_POLICY,
) -> list[Insight]:
    """Spending, utilization, category and seasonal trends over history.

    With fewer than three months a single zero-confidence placeholder is
    returned instead of an empty list.
    """
    n = len(points)
    if n < 3:
        return [
            Insight(
                type=InsightType.SPENDING_PATTERN,
                category="spending",
                title="Insufficient Data",
                description=(
                    "Need at least 3 months of data to generate meaningful insights"
                ),
                confidence=0,
                impact=Impact.LOW,
                timeframe=f"Last {n} months",
                recommendation="Continue tracking your expenses for better insights",
                trend=TrendResult.insufficient("No trend available"),
            ),
        ]

    analyze = TrendAnalysisService.calculate_trend
    insights = []

    spending = analyze([p.total_spent for p in points], policy)
    insights.append(
        _trend_insight(
            InsightType.SPENDING_PATTERN,
            "spending",
            "Overall Spending Trend",
            (
                f"Your spending has been {spending.direction.value} by "
                f"{_pct(spending.magnitude)}% over the past {n} months"
            ),
            spending,
            (
                "Consider reviewing your budget allocations and identifying "
                "areas to reduce spending"
                if spending.direction is TrendDirection.INCREASING
                else "Great job maintaining or reducing your spending levels"
            ),
            n,
        ),
    )

    utilization = analyze([p.utilization for p in points], policy)
    high_and_rising = (
        utilization.direction is TrendDirection.INCREASING
        and points[-1].utilization > 90
    )
    insights.append(
        _trend_insight(
            InsightType.BUDGET_EFFICIENCY,
            "budget",
            "Budget Utilization Trend",
            (
                f"Your budget utilization has been {utilization.direction.value} "
                f"by {_pct(utilization.magnitude)}%"
            ),
            utilization,
            (
                "Your budget utilization is high and increasing. Consider "
                "adjusting your budgets or reducing spending"
                if high_and_rising
                else "Your budget utilization trend looks healthy"
            ),
            n,
        ),
    )

    categories = sorted(
        {usage.category for p in points for usage in p.category_breakdown}
    )
    category_insights = []
    for category in categories:
        series = []
        for p in points:
            match = next(
                (u for u in p.category_breakdown if u.category == category), None
            )
            series.append(match.spent if match else ZERO)
        trend = analyze(series, policy)
        if trend.magnitude <= 20:
            continue
        category_insights.append(
            _trend_insight(
                InsightType.CATEGORY_TREND,
                category,
                f"{category} Spending Trend",
                (
                    f"Spending in {category} has been {trend.direction.value} "
                    f"by {_pct(trend.magnitude)}%"
                ),
                trend,
                (
                    f"Consider reviewing your {category} expenses and look for "
                    "optimization opportunities"
                    if trend.direction is TrendDirection.INCREASING
                    else f"Great job managing your {category} spending"
                ),
                n,
            ),
        )
    insights.extend(category_insights[:3])

    if n >= 6:
        by_season: dict[str, list[Decimal]] = {}
        for p in points:
            by_season.setdefault(_SEASONS[p.date.month], []).append(p.total_spent)
        highest, highest_avg = "", ZERO
        for season, values in by_season.items():
            average = sum(values, ZERO) / len(values)
            if average > highest_avg:
                highest, highest_avg = season, average
        if highest:
            insights.append(
                Insight(
                    type=InsightType.SEASONAL_PATTERN,
                    category="seasonal",
                    title="Seasonal Spending Pattern",
                    description=(
                        f"Your highest spending typically occurs in {highest}"
                    ),
                    confidence=historical_confidence(n, Decimal(50)),
                    impact=Impact.LOW,
                    timeframe=highest,
                    value=highest_avg,
                    recommendation=(
                        f"Plan ahead for {highest} by setting aside extra budget "
                        "or reducing discretionary spending in other seasons"
                    ),
                    trend=TrendResult(
                        direction=TrendDirection.STABLE,
                        percentage_change=ZERO,
                        description="Seasonal pattern identified",
                    ),
                ),
            )

    return _by_confidence(insights)
