"""Tests for the PostgREST data adapter using a mocked HTTP transport."""

import json
from datetime import date

import httpx
import pytest

from tally.domain.analytics.value_objects import BudgetPeriod, DateRange
from tally.domain.shared.exceptions import DataFetchError, ErrorCode
from tally.infrastructure.integration.rest import PostgrestAnalyticsDataAdapter
from tests.shared.fixtures.records import TEST_USER_ID

BASE_URL = "http://postgrest.test"
MARCH = DateRange(start=date(2024, 3, 1), end=date(2024, 3, 31))


def _adapter(handler, api_key="anon-key"):
    client = httpx.AsyncClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
    )
    return PostgrestAnalyticsDataAdapter(BASE_URL, api_key=api_key, client=client)


def _json(payload, status_code=200):
    return httpx.Response(status_code, content=json.dumps(payload))


class TestFetchTransactions:
    @pytest.mark.asyncio
    async def test_filters_by_user_and_window(self):
        seen = []

        def handler(request):
            seen.append(request)
            return _json([])

        await _adapter(handler).fetch_transactions(TEST_USER_ID, MARCH)

        [request] = seen
        assert request.url.path == "/rest/v1/transactions"
        params = request.url.params
        assert params["user_id"] == f"eq.{TEST_USER_ID}"
        assert params.get_list("date") == ["gte.2024-03-01", "lte.2024-03-31"]
        assert params["order"] == "date.asc"
        assert "categories(name)" in params["select"]

    @pytest.mark.asyncio
    async def test_api_key_is_sent_on_every_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            return _json([])

        adapter = _adapter(handler)
        await adapter.fetch_budgets(TEST_USER_ID)
        await adapter.fetch_goals(TEST_USER_ID)

        for request in seen:
            assert request.headers["apikey"] == "anon-key"
            assert request.headers["authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_without_api_key_no_auth_headers(self):
        seen = []

        def handler(request):
            seen.append(request)
            return _json([])

        await _adapter(handler, api_key=None).fetch_goals(TEST_USER_ID)

        assert "apikey" not in seen[0].headers
        assert "authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_all_embedded_category_shapes_are_normalized(self):
        rows = [
            {
                "id": "t1",
                "user_id": str(TEST_USER_ID),
                "type": "expense",
                "amount": 10,
                "date": "2024-03-02",
                "categories": {"name": "Food"},
            },
            {
                "id": "t2",
                "user_id": str(TEST_USER_ID),
                "type": "expense",
                "amount": "5.5",
                "date": "2024-03-03",
                "categories": [{"name": "Transport"}],
            },
            {
                "id": "t3",
                "user_id": str(TEST_USER_ID),
                "type": "income",
                "amount": 100,
                "date": "2024-03-04",
                "categories": None,
            },
            {"id": "t4", "type": "expense", "amount": "oops", "date": "2024-03-05"},
        ]

        batch = await _adapter(lambda request: _json(rows)).fetch_transactions(
            TEST_USER_ID, MARCH
        )

        assert [t.category_name for t in batch] == [
            "Food",
            "Transport",
            "Uncategorized",
        ]
        assert batch.skipped == 1

    @pytest.mark.asyncio
    async def test_budgets_are_normalized(self):
        rows = [
            {
                "id": "b1",
                "user_id": str(TEST_USER_ID),
                "amount": 1200,
                "period": "yearly",
                "categories": {"name": "Travel"},
            }
        ]

        [budget] = await _adapter(lambda request: _json(rows)).fetch_budgets(
            TEST_USER_ID
        )

        assert budget.period is BudgetPeriod.YEARLY
        assert budget.category_name == "Travel"


class TestErrors:
    @pytest.mark.asyncio
    async def test_error_status_raises_data_fetch_error(self):
        adapter = _adapter(lambda request: _json({"message": "denied"}, 401))

        with pytest.raises(DataFetchError) as exc_info:
            await adapter.fetch_budgets(TEST_USER_ID)

        assert exc_info.value.code is ErrorCode.DATA_FETCH_FAILED
        assert exc_info.value.details["status"] == 401

    @pytest.mark.asyncio
    async def test_connection_failure_raises_data_fetch_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(DataFetchError, match="Could not connect"):
            await _adapter(handler).fetch_goals(TEST_USER_ID)

    @pytest.mark.asyncio
    async def test_timeout_raises_data_fetch_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(DataFetchError, match="Timed out"):
            await _adapter(handler).fetch_goals(TEST_USER_ID)

    @pytest.mark.asyncio
    async def test_non_list_payload_is_rejected(self):
        adapter = _adapter(lambda request: _json({"rows": []}))

        with pytest.raises(DataFetchError, match="Unexpected"):
            await adapter.fetch_goals(TEST_USER_ID)

    @pytest.mark.asyncio
    async def test_invalid_json_is_rejected(self):
        adapter = _adapter(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(DataFetchError):
            await adapter.fetch_goals(TEST_USER_ID)


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        client = httpx.AsyncClient(
            base_url=BASE_URL,
            transport=httpx.MockTransport(lambda request: _json([])),
        )
        adapter = PostgrestAnalyticsDataAdapter(BASE_URL, client=client)

        await adapter.close()

        assert client.is_closed is False
        await client.aclose()
