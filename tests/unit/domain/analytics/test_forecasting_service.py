"""Tests for ForecastingService."""

from datetime import date
from decimal import Decimal

import pytest

from tally.domain.analytics.services import (
    ForecastingService,
    TemporalBucketingService,
)
from tally.domain.analytics.value_objects import AnalyticsPolicy
from tests.shared.fixtures.records import budget, expense, income

FLAT_SEASONS = AnalyticsPolicy(seasonal_factors=(Decimal("1"),) * 12)


def _d(*values):
    return [Decimal(str(v)) for v in values]


class TestTrendFactor:
    def test_flat_series_has_no_trend(self):
        assert ForecastingService.linear_trend(_d(100, 100, 100)) == Decimal("0")
        assert ForecastingService.trend_factor(_d(100, 100, 100)) == Decimal("1")

    def test_slope_is_normalized_by_average(self):
        assert ForecastingService.linear_trend(_d(100, 200, 300)) == Decimal("0.5")

    def test_short_or_empty_series(self):
        assert ForecastingService.linear_trend([]) == Decimal("0")
        assert ForecastingService.linear_trend(_d(42)) == Decimal("0")

    def test_factor_is_clamped(self):
        assert ForecastingService.trend_factor(_d(100, 1000)) == Decimal("2.0")
        assert ForecastingService.trend_factor(_d(1000, 100)) == Decimal("0.5")


class TestConfidence:
    @pytest.mark.parametrize(
        ("months_ahead", "years", "expected"),
        [
            (1, 0, 90),
            (1, 1, 95),
            (3, 0, 70),
            (10, 0, 50),
            (6, 5, 70),
        ],
    )
    def test_confidence_decays_and_rewards_data(self, months_ahead, years, expected):
        assert ForecastingService.forecast_confidence(months_ahead, years) == expected


class TestForecastSeries:
    def test_two_months_are_insufficient(self):
        result = ForecastingService.forecast_series(_d(100, 200), 2024, 5)

        assert result.insufficient_data is True
        assert result.points == ()
        assert "at least 3" in result.reason

    def test_flat_history_forecasts_the_average(self):
        result = ForecastingService.forecast_series(
            _d(100, 100, 100, 100, 100, 100),
            2024,
            11,
            horizon=3,
            policy=FLAT_SEASONS,
        )

        assert result.insufficient_data is False
        assert [p.period for p in result.points] == ["2024-11", "2024-12", "2025-01"]
        for point in result.points:
            assert point.predicted_value == Decimal("100")
            assert point.range.min == point.range.max == Decimal("100")

    def test_seasonal_factor_is_applied(self):
        result = ForecastingService.forecast_series(
            _d(100, 100, 100), 2024, 12, horizon=1
        )

        assert result.points[0].predicted_value == Decimal("130")

    def test_default_horizon_comes_from_policy(self):
        result = ForecastingService.forecast_series(_d(100, 120, 140), 2024, 1)

        assert len(result.points) == AnalyticsPolicy().forecast_horizon

    def test_zero_horizon_forecasts_nothing(self):
        result = ForecastingService.forecast_series(
            _d(100, 120, 140), 2024, 1, horizon=0
        )

        assert result.insufficient_data is False
        assert result.points == ()

    def test_predictions_are_never_negative(self):
        result = ForecastingService.forecast_series(
            _d(5000, 2000, 10, 0, 0, 0), 2024, 1, horizon=12
        )

        for point in result.points:
            assert point.predicted_value >= 0
            assert point.range.min >= 0
            assert point.range.max >= point.predicted_value
            assert 0 <= point.confidence <= 100

    def test_by_category_is_sorted_and_independent(self):
        results = ForecastingService.forecast_by_category(
            {
                "Rent": _d(500, 500, 500),
                "Food": _d(100, 200),
            },
            2024,
            5,
            horizon=2,
        )

        assert list(results) == ["Food", "Rent"]
        assert results["Food"].insufficient_data is True
        assert len(results["Rent"].points) == 2


class TestForecastFactors:
    def test_december_notes(self):
        assert ForecastingService.forecast_factors(
            12, Decimal("1"), Decimal("1.3")
        ) == ("Seasonal increase", "Holiday season", "Year-end expenses")

    def test_trend_note(self):
        assert ForecastingService.forecast_factors(
            3, Decimal("1.5"), Decimal("1")
        ) == ("Increasing trend",)

    def test_fallback_note(self):
        assert ForecastingService.forecast_factors(
            6, Decimal("1"), Decimal("1")
        ) == ("Historical patterns",)


class TestSeasonalSpendingForecast:
    def test_without_history_there_is_nothing_to_forecast(self):
        assert ForecastingService.seasonal_spending_forecast([], date(2024, 4, 20)) == []

    def test_forecasts_the_months_after_today(self):
        yearly = TemporalBucketingService.build_yearly_aggregates(
            [expense(f"2024-{m:02d}-10", 100) for m in range(1, 5)],
            [2024],
        )

        forecasts = ForecastingService.seasonal_spending_forecast(
            yearly, date(2024, 4, 20), horizon=3
        )

        assert [(f.month, f.year) for f in forecasts] == [
            ("May", 2024),
            ("Jun", 2024),
            ("Jul", 2024),
        ]
        assert [f.confidence for f in forecasts] == [95, 90, 80]
        for forecast in forecasts:
            assert forecast.predicted_spending > 0
            assert forecast.predicted_income == Decimal("0")
        assert "Summer vacation" in forecasts[2].factors

    def test_zero_horizon_forecasts_nothing(self):
        yearly = TemporalBucketingService.build_yearly_aggregates(
            [expense(f"2024-{m:02d}-10", 100) for m in range(1, 5)],
            [2024],
        )

        assert (
            ForecastingService.seasonal_spending_forecast(
                yearly, date(2024, 4, 20), horizon=0
            )
            == []
        )

    def test_seasonal_and_trend_multiplier_is_clamped(self):
        records = [expense(f"2024-{m:02d}-10", 10) for m in range(6, 11)]
        records += [income(f"2024-{m:02d}-01", 10) for m in range(6, 11)]
        records += [expense("2024-11-10", 1000), income("2024-11-01", 1000)]
        yearly = TemporalBucketingService.build_yearly_aggregates(records, [2024])

        (december,) = ForecastingService.seasonal_spending_forecast(
            yearly, date(2024, 11, 20), horizon=1
        )

        # Rising trend and the December factor together would exceed 2x
        assert december.month == "Dec"
        base_spending = yearly[0].average_monthly_spending
        base_income = yearly[0].average_monthly_income
        assert december.predicted_spending == base_spending * Decimal("2.0")
        assert december.predicted_income == base_income * Decimal("2.0")


class TestBudgetPredictions:
    def test_risk_and_recommendation(self):
        yearly = TemporalBucketingService.build_yearly_aggregates(
            [expense("2024-02-01", 7200), expense("2023-02-01", 6000)],
            [2024, 2023],
        )

        [prediction] = ForecastingService.budget_predictions(
            [budget(500)], current=yearly[0], previous=yearly[1]
        )

        assert prediction.current_spending == Decimal("600")
        assert prediction.predicted_spending == Decimal("720")
        assert prediction.over_budget_risk == Decimal("44")
        assert prediction.recommended_budget == Decimal("792")

    def test_unspent_budget_has_no_risk(self):
        [current] = TemporalBucketingService.build_yearly_aggregates([], [2024])

        [prediction] = ForecastingService.budget_predictions(
            [budget(500, "Hobbies")], current=current
        )

        assert prediction.over_budget_risk == Decimal("0")
        assert prediction.recommended_budget == Decimal("500")

    def test_sorted_by_risk(self):
        [current] = TemporalBucketingService.build_yearly_aggregates(
            [expense("2024-02-01", 12000, "Food")], [2024]
        )

        predictions = ForecastingService.budget_predictions(
            [
                budget(100, "Books", budget_id="b1"),
                budget(500, "Food", budget_id="b2"),
            ],
            current=current,
        )

        assert [p.category for p in predictions] == ["Food", "Books"]
        assert predictions[0].over_budget_risk == Decimal("100")
