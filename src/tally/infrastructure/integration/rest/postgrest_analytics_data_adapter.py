"""AnalyticsDataPort over a PostgREST (Supabase) HTTP endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from tally.domain.shared.exceptions import DataFetchError
from tally.infrastructure.ingestion import (
    normalize_budgets,
    normalize_goals,
    normalize_transactions,
)

if TYPE_CHECKING:
    from uuid import UUID

    from tally.domain.analytics.value_objects import (
        BudgetRecord,
        DateRange,
        GoalRecord,
        RecordBatch,
        TransactionRecord,
    )

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"


class PostgrestAnalyticsDataAdapter:
    """Reads rows through PostgREST and normalizes them like the SQL adapter.

    Embedded ``categories`` come back as an object, a one-element array or
    null depending on the relationship; the normalizer accepts all three.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get_rows(
        self,
        table: str,
        params: list[tuple[str, str]],
    ) -> list[dict[str, Any]]:
        client = await self._get_client()
        try:
            response = await client.get(
                f"{REST_PREFIX}/{table}",
                params=params,
                headers=self._headers(),
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.ConnectError as e:
            logger.error("PostgREST connection failed for %s: %s", table, e)
            msg = f"Could not connect to the data service to load {table}"
            raise DataFetchError(msg, details={"table": table}) from e
        except httpx.TimeoutException as e:
            logger.error("PostgREST timeout for %s: %s", table, e)
            msg = f"Timed out loading {table} from the data service"
            raise DataFetchError(msg, details={"table": table}) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "PostgREST returned error %d for %s: %s",
                e.response.status_code,
                table,
                e.response.text[:200] if e.response.text else "no body",
            )
            msg = f"The data service rejected the {table} request"
            raise DataFetchError(
                msg,
                details={"table": table, "status": e.response.status_code},
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("PostgREST request for %s failed: %s", table, e)
            msg = f"Could not load {table} from the data service"
            raise DataFetchError(msg, details={"table": table}) from e

        if not isinstance(payload, list):
            msg = f"Unexpected {table} payload from the data service"
            raise DataFetchError(msg, details={"table": table})
        return [row for row in payload if isinstance(row, dict)]

    async def fetch_transactions(
        self,
        user_id: UUID,
        date_range: DateRange,
    ) -> RecordBatch[TransactionRecord]:
        rows = await self._get_rows(
            "transactions",
            [
                ("select", "id,user_id,type,amount,date,categories(name)"),
                ("user_id", f"eq.{user_id}"),
                ("date", f"gte.{date_range.start.isoformat()}"),
                ("date", f"lte.{date_range.end.isoformat()}"),
                ("order", "date.asc"),
            ],
        )
        return normalize_transactions(rows)

    async def fetch_budgets(self, user_id: UUID) -> RecordBatch[BudgetRecord]:
        rows = await self._get_rows(
            "budgets",
            [
                ("select", "id,user_id,amount,period,categories(name)"),
                ("user_id", f"eq.{user_id}"),
            ],
        )
        return normalize_budgets(rows)

    async def fetch_goals(self, user_id: UUID) -> RecordBatch[GoalRecord]:
        rows = await self._get_rows(
            "goals",
            [
                ("select", "id,user_id,title,target_amount,current_amount,deadline"),
                ("user_id", f"eq.{user_id}"),
                ("order", "deadline.asc"),
            ],
        )
        return normalize_goals(rows)
