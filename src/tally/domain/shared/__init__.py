"""Shared domain building blocks."""

from tally.domain.shared.exceptions import (
    DataFetchError,
    DomainException,
    ErrorCode,
    MalformedRecordError,
    ValidationError,
)
from tally.domain.shared.time import (
    days_in_month,
    month_progress,
    quarter_of_month,
    today_utc,
    utc_now,
)

__all__ = [
    "DataFetchError",
    "DomainException",
    "ErrorCode",
    "MalformedRecordError",
    "ValidationError",
    "days_in_month",
    "month_progress",
    "quarter_of_month",
    "today_utc",
    "utc_now",
]
