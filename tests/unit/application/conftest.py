"""Shared fixtures for analytics query and command tests."""

from unittest.mock import AsyncMock

import pytest

from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.value_objects import AnalyticsPolicy, RecordBatch
from tests.shared.fixtures.records import user_context


@pytest.fixture
def data_port():
    """Mock data port returning empty batches unless a test says otherwise."""
    port = AsyncMock()
    port.fetch_transactions.return_value = RecordBatch()
    port.fetch_budgets.return_value = RecordBatch()
    port.fetch_goals.return_value = RecordBatch()
    return port


@pytest.fixture
def loader(data_port):
    return AnalyticsDataLoader(data_port, user_context(), AnalyticsPolicy())
