"""Turns raw rows from the external store into typed records.

Every data adapter hands its rows to these functions, whatever the source.
Rows come as plain mappings: SQLAlchemy ``Row._mapping`` objects or decoded
PostgREST JSON. The category of a row can show up as an embedded object, a
one-element array (PostgREST embeds to-one relations either way), null, or a
flat ``category_name`` column.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping, TypeVar

from pydantic import ValidationError as PydanticValidationError

from tally.domain.analytics.value_objects import (
    BudgetRecord,
    GoalRecord,
    RecordBatch,
    TransactionRecord,
)
from tally.domain.shared.exceptions import ErrorCode, MalformedRecordError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

_CATEGORY_KEYS = ("category", "categories")


def extract_category_name(row: Mapping[str, Any]) -> str | None:
    """Category name of a row, or None when the row has none."""
    if row.get("category_name"):
        return str(row["category_name"])

    for key in _CATEGORY_KEYS:
        embedded = row.get(key)
        if isinstance(embedded, list):
            embedded = embedded[0] if embedded else None
        if isinstance(embedded, Mapping):
            name = embedded.get("name")
            if name:
                return str(name)
        elif isinstance(embedded, str) and embedded.strip():
            return embedded
    return None


def parse_date(value: Any, field: str = "date") -> date:
    """Accept ``date``/``datetime`` objects and ISO strings (time part ignored)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            msg = f"Invalid {field} '{value}'"
            raise MalformedRecordError(
                msg,
                code=ErrorCode.INVALID_DATE,
                details={"field": field, "value": value},
            ) from e
    msg = f"Missing or unreadable {field}"
    raise MalformedRecordError(
        msg,
        code=ErrorCode.INVALID_DATE,
        details={"field": field, "value": repr(value)},
    )


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    if value is None or isinstance(value, bool):
        msg = f"Missing {field}"
        raise MalformedRecordError(msg, code=ErrorCode.INVALID_AMOUNT)
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        msg = f"Invalid {field} '{value}'"
        raise MalformedRecordError(
            msg,
            code=ErrorCode.INVALID_AMOUNT,
            details={"field": field, "value": str(value)},
        ) from e
    if not amount.is_finite():
        msg = f"Invalid {field} '{value}'"
        raise MalformedRecordError(msg, code=ErrorCode.INVALID_AMOUNT)
    return amount


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _build(model: type[RecordT], row: Mapping[str, Any], **fields: Any) -> RecordT:
    try:
        return model(**fields)  # type: ignore[call-arg]
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        msg = f"Invalid {model.__name__} row: {field}: {first.get('msg')}"
        raise MalformedRecordError(
            msg,
            details={"row_id": _text(row.get("id")), "field": field},
        ) from e


def normalize_transaction_row(row: Mapping[str, Any]) -> TransactionRecord:
    """Build a ``TransactionRecord`` or raise ``MalformedRecordError``."""
    kind = _text(row.get("type")).lower()
    if kind not in ("income", "expense"):
        msg = f"Unknown transaction type '{row.get('type')}'"
        raise MalformedRecordError(msg, details={"row_id": _text(row.get("id"))})

    return _build(
        TransactionRecord,
        row,
        id=_text(row.get("id")),
        user_id=_text(row.get("user_id")),
        type=kind,
        category_name=extract_category_name(row),
        amount=parse_amount(row.get("amount")),
        date=parse_date(row.get("date")),
    )


def normalize_budget_row(row: Mapping[str, Any]) -> BudgetRecord:
    period = _text(row.get("period")).lower() or "monthly"
    return _build(
        BudgetRecord,
        row,
        id=_text(row.get("id")),
        user_id=_text(row.get("user_id")),
        category_name=extract_category_name(row),
        amount=parse_amount(row.get("amount")),
        period=period,
    )


def normalize_goal_row(row: Mapping[str, Any]) -> GoalRecord:
    current = row.get("current_amount")
    return _build(
        GoalRecord,
        row,
        id=_text(row.get("id")),
        user_id=_text(row.get("user_id")),
        title=_text(row.get("title")) or "Untitled goal",
        target_amount=parse_amount(row.get("target_amount"), "target_amount"),
        current_amount=(
            parse_amount(current, "current_amount") if current is not None else 0
        ),
        deadline=parse_date(row.get("deadline"), "deadline"),
    )


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    normalizer: Callable[[Mapping[str, Any]], RecordT],
    kind: str,
) -> RecordBatch[RecordT]:
    """Normalize every row, skipping and counting the ones that fail."""
    records: list[RecordT] = []
    errors: list[str] = []
    for row in rows:
        try:
            records.append(normalizer(row))
        except MalformedRecordError as e:
            logger.warning(
                "Skipping malformed %s row %s: %s",
                kind,
                _text(row.get("id")) or "<no id>",
                e.message,
            )
            errors.append(e.message)
    return RecordBatch(
        records=tuple(records),
        skipped=len(errors),
        errors=tuple(errors),
    )


def normalize_transactions(
    rows: Iterable[Mapping[str, Any]],
) -> RecordBatch[TransactionRecord]:
    return normalize_rows(rows, normalize_transaction_row, "transaction")


def normalize_budgets(rows: Iterable[Mapping[str, Any]]) -> RecordBatch[BudgetRecord]:
    return normalize_rows(rows, normalize_budget_row, "budget")


def normalize_goals(rows: Iterable[Mapping[str, Any]]) -> RecordBatch[GoalRecord]:
    return normalize_rows(rows, normalize_goal_row, "goal")
