"""Tests for analytics records, windows and policy."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from tally.domain.analytics.value_objects import (
    UNCATEGORIZED,
    AnalyticsPolicy,
    BucketGranularity,
    BudgetPeriod,
    DateRange,
    RecordBatch,
    TimeBucket,
    TransactionRecord,
)
from tests.shared.fixtures.records import budget, expense, goal


class TestTransactionRecord:
    def test_negative_amount_is_rejected(self):
        with pytest.raises(ValidationError):
            TransactionRecord(
                id="t1",
                user_id="u1",
                type="expense",
                amount="-5",
                date=date(2024, 1, 1),
            )

    def test_blank_category_is_uncategorized(self):
        txn = TransactionRecord(
            id="t1",
            user_id="u1",
            type="income",
            category_name="  ",
            amount=10,
            date=date(2024, 1, 1),
        )

        assert txn.category_name == UNCATEGORIZED
        assert txn.is_income is True
        assert txn.amount == Decimal("10")

    def test_records_are_immutable(self):
        txn = expense("2024-01-01", 10)

        with pytest.raises(ValidationError):
            txn.amount = Decimal("20")


class TestBudgetRecord:
    @pytest.mark.parametrize(
        ("period", "amount", "monthly"),
        [
            (BudgetPeriod.MONTHLY, 300, Decimal("300")),
            (BudgetPeriod.WEEKLY, 100, Decimal("433.00")),
            (BudgetPeriod.YEARLY, 1200, Decimal("100")),
        ],
    )
    def test_monthly_equivalent(self, period, amount, monthly):
        assert budget(amount, period=period).monthly_amount == monthly

    def test_budget_must_be_positive(self):
        with pytest.raises(ValidationError):
            budget(0)


class TestGoalRecord:
    def test_progress_and_remaining(self):
        record = goal(1000, "2025-01-01", current=250)

        assert record.progress_percentage == Decimal("25")
        assert record.remaining_amount == Decimal("750")

    def test_overfunded_goal_has_nothing_remaining(self):
        assert goal(1000, "2025-01-01", current=1500).remaining_amount == Decimal("0")


class TestDateRange:
    def test_inverted_range_is_rejected(self):
        with pytest.raises(ValueError, match="before start"):
            DateRange(start=date(2024, 2, 1), end=date(2024, 1, 1))

    def test_bounds_are_inclusive(self):
        window = DateRange(start=date(2024, 2, 1), end=date(2024, 2, 29))

        assert window.days == 29
        assert window.contains(date(2024, 2, 1))
        assert window.contains(date(2024, 2, 29))
        assert not window.contains(date(2024, 3, 1))


class TestRecordBatch:
    def test_behaves_like_its_records(self):
        records = [expense("2024-01-01", 1), expense("2024-01-02", 2)]

        batch = RecordBatch.of(records, skipped=3)

        assert len(batch) == 2
        assert list(batch) == records
        assert batch.skipped == 3
        assert bool(RecordBatch()) is False


class TestTimeBucket:
    def test_derived_values(self):
        bucket = TimeBucket(
            label="2024-04",
            granularity=BucketGranularity.MONTH,
            start_date=date(2024, 4, 1),
            end_date=date(2024, 4, 30),
            total_expense=Decimal("300"),
        )

        assert bucket.days == 30
        assert bucket.average_daily_spending == Decimal("10")
        assert bucket.savings_rate == Decimal("0")
        assert bucket.top_expense_category is None
        assert bucket.is_empty is True


class TestAnalyticsPolicy:
    def test_defaults(self):
        policy = AnalyticsPolicy()

        assert policy.seasonal_factor(12) == Decimal("1.3")
        assert policy.seasonal_factor(2) == Decimal("0.9")
        assert policy.budget_warning_pct == Decimal("80")

    def test_needs_twelve_seasonal_factors(self):
        with pytest.raises(ValueError, match="12 values"):
            AnalyticsPolicy(seasonal_factors=(Decimal("1"),) * 11)

    def test_trend_bounds_must_be_ordered(self):
        with pytest.raises(ValueError):
            AnalyticsPolicy(
                trend_factor_min=Decimal("3"), trend_factor_max=Decimal("2")
            )

    def test_overrides_replace_only_given_values(self):
        policy = AnalyticsPolicy.from_overrides(
            stable_threshold_pct=7.5,
            seasonal_factors=[1.0] * 12,
        )

        assert policy.stable_threshold_pct == Decimal("7.5")
        assert policy.seasonal_factor(12) == Decimal("1")
        assert policy.forecast_horizon == AnalyticsPolicy().forecast_horizon
