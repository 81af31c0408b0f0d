"""Temporal bucketing of transactions into day/week/month/quarter/year windows.

Amounts are summed in a first pass and every percentage is derived in a
second pass once a bucket's totals are final, so results never depend on the
order transactions arrive in.
"""

from __future__ import annotations

import logging
from calendar import month_abbr
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from tally.domain.analytics.value_objects.records import TransactionRecord
from tally.domain.analytics.value_objects.time_bucket import (
    ZERO,
    BucketGranularity,
    CategoryStat,
    TimeBucket,
)
from tally.domain.analytics.value_objects.yearly_aggregate import (
    CategorySummary,
    QuarterlyAggregate,
    YearlyAggregate,
)
from tally.domain.shared.time import days_in_month, quarter_of_month, today_utc

logger = logging.getLogger(__name__)

DEFAULT_YEARS_BACK = 3
PERCENT_QUANTUM = Decimal("0.01")


@dataclass
class _CategoryAccumulator:
    amount: Decimal = ZERO
    count: int = 0


@dataclass
class _BucketAccumulator:
    income: Decimal = ZERO
    expense: Decimal = ZERO
    count: int = 0
    expenses: dict[str, _CategoryAccumulator] = field(
        default_factory=lambda: defaultdict(_CategoryAccumulator),
    )
    incomes: dict[str, _CategoryAccumulator] = field(
        default_factory=lambda: defaultdict(_CategoryAccumulator),
    )

    def add(self, txn: TransactionRecord) -> None:
        self.count += 1
        if txn.is_expense:
            self.expense += txn.amount
            stat = self.expenses[txn.category_name]
        else:
            self.income += txn.amount
            stat = self.incomes[txn.category_name]
        stat.amount += txn.amount
        stat.count += 1

    def merge(self, other: _BucketAccumulator) -> None:
        self.income += other.income
        self.expense += other.expense
        self.count += other.count
        for target, source in (
            (self.expenses, other.expenses),
            (self.incomes, other.incomes),
        ):
            for name, stat in source.items():
                target[name].amount += stat.amount
                target[name].count += stat.count


def percentage_of(amount: Decimal, total: Decimal) -> Decimal:
    """Share of ``total`` on a 0-100 scale, rounded to two decimals."""
    if total <= 0:
        return ZERO
    return (amount / total * 100).quantize(PERCENT_QUANTUM)


def finalize_breakdown(
    accumulators: dict[str, _CategoryAccumulator],
    total: Decimal,
) -> dict[str, CategoryStat]:
    """Second pass: turn summed amounts into category stats."""
    breakdown: dict[str, CategoryStat] = {}
    for name in sorted(accumulators):
        acc = accumulators[name]
        breakdown[name] = CategoryStat(
            amount=acc.amount,
            transaction_count=acc.count,
            percentage_of_bucket_total=percentage_of(acc.amount, total),
            average_transaction_amount=(
                acc.amount / acc.count if acc.count > 0 else ZERO
            ),
        )
    return breakdown


def rank_categories(
    breakdown: dict[str, CategoryStat] | Iterable[tuple[str, CategoryStat]],
    limit: int,
) -> tuple[CategorySummary, ...]:
    """Top ``limit`` categories by amount, ties broken alphabetically."""
    items = breakdown.items() if isinstance(breakdown, dict) else breakdown
    ranked = sorted(items, key=lambda item: (-item[1].amount, item[0]))
    return tuple(
        CategorySummary(
            name=name,
            amount=stat.amount,
            percentage=stat.percentage_of_bucket_total,
            transaction_count=stat.transaction_count,
            average_amount=stat.average_transaction_amount,
        )
        for name, stat in ranked[:limit]
    )


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def bucket_bounds(day: date, granularity: BucketGranularity) -> tuple[date, date]:
    """First and last calendar day of the bucket containing ``day``."""
    if granularity is BucketGranularity.DAY:
        return day, day
    if granularity is BucketGranularity.WEEK:
        start = week_start(day)
        return start, start + timedelta(days=6)
    if granularity is BucketGranularity.MONTH:
        return (
            date(day.year, day.month, 1),
            date(day.year, day.month, days_in_month(day.year, day.month)),
        )
    if granularity is BucketGranularity.QUARTER:
        first_month = (quarter_of_month(day.month) - 1) * 3 + 1
        last_month = first_month + 2
        return (
            date(day.year, first_month, 1),
            date(day.year, last_month, days_in_month(day.year, last_month)),
        )
    return date(day.year, 1, 1), date(day.year, 12, 31)


def bucket_label(start: date, granularity: BucketGranularity) -> str:
    if granularity is BucketGranularity.MONTH:
        return f"{start.year:04d}-{start.month:02d}"
    if granularity is BucketGranularity.QUARTER:
        return f"Q{quarter_of_month(start.month)} {start.year}"
    if granularity is BucketGranularity.YEAR:
        return str(start.year)
    return start.isoformat()


def _build_bucket(
    label: str,
    granularity: BucketGranularity,
    start: date,
    end: date,
    acc: _BucketAccumulator,
) -> TimeBucket:
    return TimeBucket(
        label=label,
        granularity=granularity,
        start_date=start,
        end_date=end,
        total_income=acc.income,
        total_expense=acc.expense,
        transaction_count=acc.count,
        category_breakdown=finalize_breakdown(acc.expenses, acc.expense),
        income_breakdown=finalize_breakdown(acc.incomes, acc.income),
    )


class TemporalBucketingService:
    """Groups transactions into a year -> quarter -> month hierarchy."""

    @staticmethod
    def default_years(today: date | None = None) -> list[int]:
        current = (today or today_utc()).year
        return [current - offset for offset in range(DEFAULT_YEARS_BACK)]

    @staticmethod
    def build_yearly_aggregates(
        transactions: Iterable[TransactionRecord],
        years: Sequence[int] | None = None,
        *,
        today: date | None = None,
        top_n: int = 10,
    ) -> list[YearlyAggregate]:
        """One aggregate per requested year, newest first.

        Years default to the current year and the two before it. Every
        aggregate holds all twelve months, zero-filled where nothing happened.
        """
        wanted = sorted(
            set(years or TemporalBucketingService.default_years(today)),
            reverse=True,
        )
        monthly: dict[tuple[int, int], _BucketAccumulator] = defaultdict(
            _BucketAccumulator,
        )
        wanted_set = set(wanted)
        for txn in transactions:
            if txn.date.year in wanted_set:
                monthly[(txn.date.year, txn.date.month)].add(txn)

        return [
            TemporalBucketingService._build_year(year, monthly, top_n)
            for year in wanted
        ]

    @staticmethod
    def _build_year(
        year: int,
        monthly: dict[tuple[int, int], _BucketAccumulator],
        top_n: int,
    ) -> YearlyAggregate:
        empty = _BucketAccumulator()
        months: list[TimeBucket] = []
        year_acc = _BucketAccumulator()
        quarter_accs = [_BucketAccumulator() for _ in range(4)]

        for month in range(1, 13):
            acc = monthly.get((year, month), empty)
            start = date(year, month, 1)
            end = date(year, month, days_in_month(year, month))
            months.append(
                _build_bucket(
                    bucket_label(start, BucketGranularity.MONTH),
                    BucketGranularity.MONTH,
                    start,
                    end,
                    acc,
                ),
            )
            year_acc.merge(acc)
            quarter_accs[quarter_of_month(month) - 1].merge(acc)

        quarters = tuple(
            QuarterlyAggregate(
                quarter=q + 1,
                year=year,
                total_income=acc.income,
                total_spending=acc.expense,
                transaction_count=acc.count,
                category_breakdown=finalize_breakdown(acc.expenses, acc.expense),
                months_included=tuple(
                    month_abbr[m] for m in range(q * 3 + 1, q * 3 + 4)
                ),
            )
            for q, acc in enumerate(quarter_accs)
        )

        category_breakdown = finalize_breakdown(year_acc.expenses, year_acc.expense)
        return YearlyAggregate(
            year=year,
            months=tuple(months),
            quarters=quarters,
            total_income=year_acc.income,
            total_spending=year_acc.expense,
            transaction_count=year_acc.count,
            category_breakdown=category_breakdown,
            income_breakdown=finalize_breakdown(year_acc.incomes, year_acc.income),
            top_categories=rank_categories(category_breakdown, top_n),
        )

    @staticmethod
    def bucket_transactions(
        transactions: Iterable[TransactionRecord],
        granularity: BucketGranularity,
        start: date,
        end: date,
        *,
        fill_empty: bool = True,
    ) -> list[TimeBucket]:
        """Buckets covering ``start``..``end`` in chronological order.

        Transactions outside the window are ignored. With ``fill_empty`` every
        bucket in the window is returned, otherwise only buckets with activity.
        """
        accs: dict[date, _BucketAccumulator] = defaultdict(_BucketAccumulator)
        for txn in transactions:
            if start <= txn.date <= end:
                accs[bucket_bounds(txn.date, granularity)[0]].add(txn)

        if fill_empty:
            starts = []
            cursor = bucket_bounds(start, granularity)[0]
            while cursor <= end:
                starts.append(cursor)
                cursor = bucket_bounds(cursor, granularity)[1] + timedelta(days=1)
        else:
            starts = sorted(accs)

        empty = _BucketAccumulator()
        buckets = []
        for bucket_start in starts:
            _, bucket_end = bucket_bounds(bucket_start, granularity)
            buckets.append(
                _build_bucket(
                    bucket_label(bucket_start, granularity),
                    granularity,
                    bucket_start,
                    bucket_end,
                    accs.get(bucket_start, empty),
                ),
            )
        return buckets

    @staticmethod
    def trailing_months(
        transactions: Iterable[TransactionRecord],
        months: int,
        end: date,
    ) -> list[TimeBucket]:
        """The ``months`` calendar months ending with the month of ``end``."""
        first_year, first_month = _add_months(end.year, end.month, -(months - 1))
        last_day = date(end.year, end.month, days_in_month(end.year, end.month))
        return TemporalBucketingService.bucket_transactions(
            transactions,
            BucketGranularity.MONTH,
            date(first_year, first_month, 1),
            last_day,
        )

    @staticmethod
    def quarterly_series(yearly: Iterable[YearlyAggregate]) -> list[QuarterlyAggregate]:
        """All quarters of all years, oldest first."""
        quarters = [q for agg in yearly for q in agg.quarters]
        return sorted(quarters, key=lambda q: (q.year, q.quarter))

    @staticmethod
    def annual_series(yearly: Iterable[YearlyAggregate]) -> list[YearlyAggregate]:
        return sorted(yearly, key=lambda agg: agg.year)

    @staticmethod
    def top_categories_across(
        yearly: Iterable[YearlyAggregate],
        limit: int = 10,
    ) -> list[str]:
        """Expense categories ranked by their total across all years."""
        totals: dict[str, Decimal] = defaultdict(Decimal)
        for agg in yearly:
            for name, stat in agg.category_breakdown.items():
                totals[name] += stat.amount
        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return [name for name, _ in ranked[:limit]]


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """(year, month) shifted by ``delta`` calendar months."""
    return _add_months(year, month, delta)
