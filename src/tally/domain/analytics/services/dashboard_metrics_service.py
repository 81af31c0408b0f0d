"""Dashboard metrics over an arbitrary date window."""

from __future__ import annotations

from calendar import day_name, month_abbr
from collections import Counter, defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Sequence

from tally.domain.analytics.services.temporal_bucketing_service import (
    TemporalBucketingService,
    percentage_of,
)
from tally.domain.analytics.services.trend_analysis_service import (
    TrendAnalysisService,
)
from tally.domain.analytics.value_objects.dashboard import (
    NOT_AVAILABLE,
    CategoryTrend,
    DashboardMetrics,
    MonthlySummary,
    PeriodActivity,
)
from tally.domain.analytics.value_objects.policy import AnalyticsPolicy
from tally.domain.analytics.value_objects.records import DateRange, TransactionRecord
from tally.domain.analytics.value_objects.time_bucket import ZERO, BucketGranularity
from tally.domain.analytics.value_objects.trend import TrendDirection

_DEFAULT_POLICY = AnalyticsPolicy()
_GROUPINGS = (BucketGranularity.DAY, BucketGranularity.WEEK, BucketGranularity.MONTH)


def _most_common(counter: Counter) -> str:
    if not counter:
        return NOT_AVAILABLE
    return min(counter.items(), key=lambda item: (-item[1], item[0]))[0]


def _growth_or_zero(current: Decimal, previous: Decimal) -> Decimal:
    # A window with nothing before it reports no growth rather than +100%
    if previous <= 0:
        return ZERO
    return TrendAnalysisService.calculate_growth_percentage(current, previous)


class DashboardMetricsService:
    """Window totals compared against the preceding window of equal length."""

    @staticmethod
    def previous_period(window: DateRange) -> DateRange:
        """The window of the same length ending the day before ``window``."""
        length = timedelta(days=window.days)
        return DateRange(start=window.start - length, end=window.end - length)

    @staticmethod
    def metrics(
        current: Sequence[TransactionRecord],
        previous: Sequence[TransactionRecord],
    ) -> DashboardMetrics:
        if not current:
            return DashboardMetrics()

        expenses = [t.amount for t in current if t.is_expense]
        incomes = [t.amount for t in current if t.is_income]
        total_expense = sum(expenses, ZERO)
        total_income = sum(incomes, ZERO)

        days = Counter(day_name[t.date.weekday()] for t in current)
        categories = Counter(t.category_name for t in current)

        prev_expense = sum((t.amount for t in previous if t.is_expense), ZERO)
        prev_income = sum((t.amount for t in previous if t.is_income), ZERO)

        rate = ZERO
        if total_income > 0:
            rate = (total_income - total_expense) / total_income * 100

        return DashboardMetrics(
            total_transactions=len(current),
            average_transaction_amount=(total_expense + total_income) / len(current),
            largest_expense=max(expenses, default=ZERO),
            largest_income=max(incomes, default=ZERO),
            most_active_day=_most_common(days),
            most_active_category=_most_common(categories),
            savings_rate=rate,
            expense_growth_rate=_growth_or_zero(total_expense, prev_expense),
            income_growth_rate=_growth_or_zero(total_income, prev_income),
        )

    @staticmethod
    def category_trends(
        current: Sequence[TransactionRecord],
        previous: Sequence[TransactionRecord],
        policy: AnalyticsPolicy = _DEFAULT_POLICY,
    ) -> list[CategoryTrend]:
        """Expense categories of the window, largest first."""
        totals: dict[str, Decimal] = defaultdict(Decimal)
        counts: Counter = Counter()
        for txn in current:
            if txn.is_expense:
                totals[txn.category_name] += txn.amount
                counts[txn.category_name] += 1

        before: dict[str, Decimal] = defaultdict(Decimal)
        for txn in previous:
            if txn.is_expense:
                before[txn.category_name] += txn.amount

        grand_total = sum(totals.values(), ZERO)
        trends = []
        for category, amount in totals.items():
            change = TrendAnalysisService.calculate_growth_percentage(
                amount, before.get(category, ZERO)
            )
            direction = TrendAnalysisService.direction_for(change, policy)
            trends.append(
                CategoryTrend(
                    category=category,
                    total_spent=amount,
                    transaction_count=counts[category],
                    average_amount=amount / counts[category],
                    percentage_of_total=percentage_of(amount, grand_total),
                    trend=direction,
                    trend_percentage=(
                        ZERO if direction is TrendDirection.STABLE else change
                    ),
                ),
            )
        return sorted(trends, key=lambda t: (-t.total_spent, t.category))

    @staticmethod
    def activity(
        transactions: Sequence[TransactionRecord],
        window: DateRange,
        group_by: BucketGranularity,
    ) -> list[PeriodActivity]:
        """Per-day, per-week (Sunday start) or per-month totals with activity."""
        if group_by not in _GROUPINGS:
            msg = f"Unsupported grouping '{group_by.value}'"
            raise ValueError(msg)

        buckets = TemporalBucketingService.bucket_transactions(
            transactions,
            group_by,
            window.start,
            window.end,
            fill_empty=False,
        )
        return [
            PeriodActivity(
                period=bucket.label,
                total_spending=bucket.total_expense,
                total_income=bucket.total_income,
                net_amount=bucket.net_income,
                transaction_count=bucket.transaction_count,
                top_category=bucket.top_expense_category or NOT_AVAILABLE,
            )
            for bucket in buckets
        ]

    @staticmethod
    def monthly_summaries(
        transactions: Sequence[TransactionRecord],
        window: DateRange,
    ) -> list[MonthlySummary]:
        """Months of the window that had at least one transaction."""
        buckets = TemporalBucketingService.bucket_transactions(
            transactions,
            BucketGranularity.MONTH,
            window.start,
            window.end,
            fill_empty=False,
        )
        return [
            MonthlySummary(
                name=f"{month_abbr[b.month_number]} {b.year}",
                year=b.year,
                month_number=b.month_number,
                income=b.total_income,
                expense=b.total_expense,
                transaction_count=b.transaction_count,
                net_amount=b.net_income,
                savings_rate=b.savings_rate,
            )
            for b in buckets
        ]

    @staticmethod
    def window_ending(today: date, days: int) -> DateRange:
        return DateRange(start=today - timedelta(days=days - 1), end=today)
