"""Unit tests for AnalyticsDataLoader."""

import logging
from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest

from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.value_objects import AnalyticsPolicy, DateRange
from tests.shared.fixtures.records import TEST_USER_ID, batch, expense, income


class TestFetching:
    @pytest.mark.asyncio
    async def test_transactions_are_fetched_for_the_context_user(
        self, loader, data_port
    ):
        window = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))
        data_port.fetch_transactions.return_value = batch(expense("2024-01-02", 5))

        result = await loader.transactions(window)

        assert len(result) == 1
        data_port.fetch_transactions.assert_awaited_once_with(TEST_USER_ID, window)

    @pytest.mark.asyncio
    async def test_skipped_rows_are_logged(self, loader, data_port, caplog):
        data_port.fetch_budgets.return_value = batch(skipped=2)

        with caplog.at_level(logging.WARNING):
            result = await loader.budgets()

        assert result.skipped == 2
        assert "Skipped 2 malformed budget row(s)" in caplog.text

    @pytest.mark.asyncio
    async def test_clean_batches_log_nothing(self, loader, caplog):
        with caplog.at_level(logging.WARNING):
            await loader.goals()

        assert caplog.records == []


class TestYearlyAggregates:
    @pytest.mark.asyncio
    async def test_defaults_to_three_years_newest_first(self, loader, data_port):
        data_port.fetch_transactions.return_value = batch(
            expense("2022-06-01", 10),
            income("2024-01-31", 100),
            skipped=1,
        )

        yearly, skipped = await loader.yearly_aggregates()

        assert [agg.year for agg in yearly] == [2024, 2023, 2022]
        assert skipped == 1
        data_port.fetch_transactions.assert_awaited_once_with(
            TEST_USER_ID,
            DateRange(start=date(2022, 1, 1), end=date(2024, 12, 31)),
        )

    @pytest.mark.asyncio
    async def test_one_fetch_spans_the_requested_years(self, loader, data_port):
        yearly, _ = await loader.yearly_aggregates([2020, 2024, 2020])

        assert [agg.year for agg in yearly] == [2024, 2020]
        data_port.fetch_transactions.assert_awaited_once_with(
            TEST_USER_ID,
            DateRange(start=date(2020, 1, 1), end=date(2024, 12, 31)),
        )


class TestAnalyticsDataLoaderDependencyInjection:
    def test_from_factory_uses_port_context_and_policy(self):
        mock_factory = Mock()
        mock_factory.analytics_data_port.return_value = AsyncMock()
        mock_factory.analytics_policy.return_value = AnalyticsPolicy()

        loader = AnalyticsDataLoader.from_factory(mock_factory)

        assert loader.user is mock_factory.user_context
        assert loader.policy is mock_factory.analytics_policy.return_value
        mock_factory.analytics_data_port.assert_called_once()
