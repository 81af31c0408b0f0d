"""Tests for HistoricalAnalyticsService."""

from datetime import date
from decimal import Decimal

import pytest

from tally.domain.analytics.services import HistoricalAnalyticsService
from tally.domain.analytics.value_objects import BudgetPeriod, HistoricalDataPoint
from tests.shared.fixtures.records import FIXED_TODAY, budget, expense, income


@pytest.fixture
def budgets():
    return [
        budget(500, "Food", budget_id="b1"),
        budget(12000, "Rent", period=BudgetPeriod.YEARLY, budget_id="b2"),
    ]


@pytest.fixture
def transactions():
    return [
        expense("2024-02-10", 250, "Food"),
        expense("2024-03-03", 100, "Food"),
        expense("2024-03-09", 80, "Travel"),
        expense("2024-04-01", 1000, "Rent"),
        income("2024-04-01", 2000),
    ]


def _points(*spent):
    return [
        HistoricalDataPoint(
            period=f"2024-{month:02d}",
            date=date(2024, month, 1),
            total_spent=Decimal(str(amount)),
        )
        for month, amount in enumerate(spent, start=1)
    ]


class TestWindow:
    def test_window_spans_whole_calendar_months(self):
        window = HistoricalAnalyticsService.window(FIXED_TODAY, 6)

        assert window.start == date(2023, 11, 1)
        assert window.end == date(2024, 4, 30)


class TestHistoricalData:
    def test_leading_empty_months_are_dropped(self, budgets, transactions):
        points = HistoricalAnalyticsService.historical_data(
            budgets, transactions, FIXED_TODAY, months=12
        )

        assert [p.period for p in points] == ["2024-02", "2024-03", "2024-04"]
        assert points[0].date == date(2024, 2, 1)

    def test_budgets_apply_to_every_month(self, budgets, transactions):
        points = HistoricalAnalyticsService.historical_data(
            budgets, transactions, FIXED_TODAY
        )

        assert all(p.total_budget == Decimal("1500") for p in points)
        assert points[2].total_spent == Decimal("1000")
        assert points[2].utilization == Decimal("1000") / Decimal("1500") * 100

    def test_breakdown_lists_budgeted_categories_only(self, budgets, transactions):
        march = HistoricalAnalyticsService.historical_data(
            budgets, transactions, FIXED_TODAY
        )[1]

        # Travel has no budget but still counts towards the total
        assert march.total_spent == Decimal("180")
        assert [u.category for u in march.category_breakdown] == ["Food", "Rent"]
        food = march.category_breakdown[0]
        assert food.budgeted == Decimal("500")
        assert food.spent == Decimal("100")
        assert food.percentage == Decimal("20")
        assert march.category_breakdown[1].spent == Decimal("0")

    def test_without_budgets_utilization_is_zero(self, transactions):
        points = HistoricalAnalyticsService.historical_data(
            [], transactions, FIXED_TODAY
        )

        assert all(p.utilization == Decimal("0") for p in points)
        assert all(p.category_breakdown == () for p in points)

    def test_no_expenses_no_history(self, budgets):
        assert (
            HistoricalAnalyticsService.historical_data(
                budgets, [income("2024-04-01", 10)], FIXED_TODAY
            )
            == []
        )


class TestProjectionForecast:
    def test_needs_three_months(self):
        result = HistoricalAnalyticsService.projection_forecast(
            _points(100, 200), FIXED_TODAY
        )

        assert result.insufficient_data is True
        assert result.points == ()

    def test_flat_history_projects_flat(self):
        result = HistoricalAnalyticsService.projection_forecast(
            _points(100, 100, 100), FIXED_TODAY
        )

        assert [p.period for p in result.points] == ["2024-05", "2024-06", "2024-07"]
        assert all(p.predicted_value == Decimal("100") for p in result.points)
        assert all(p.confidence == 100 for p in result.points)

    def test_rising_history_projects_upwards_with_low_confidence(self):
        result = HistoricalAnalyticsService.projection_forecast(
            _points(100, 100, 200, 200), FIXED_TODAY, months_ahead=2
        )

        assert [p.predicted_value for p in result.points] == [
            Decimal("300"),
            Decimal("450"),
        ]
        assert result.points[0].confidence == 20
        assert result.points[0].range.min < result.points[0].predicted_value
