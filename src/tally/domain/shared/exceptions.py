"""Domain exceptions and the error codes exposed to API clients.

Only two things are errors in the analytics core: input that cannot be
turned into records, and a data store that could not be reached. Sparse data
is reported through result objects instead.
"""

from enum import Enum
from typing import Any, ClassVar


class ErrorCode(str, Enum):
    """Error codes returned in the ``code`` field. Clients match on them."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DATE = "INVALID_DATE"
    INVALID_RECORD = "INVALID_RECORD"

    DATA_FETCH_FAILED = "DATA_FETCH_FAILED"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Base class carrying a client-safe message, a code and log-only details.

    Subclasses set ``default_code``; ``code`` narrows it per raise site
    (e.g. ``INVALID_DATE`` for a malformed record).
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"code={self.code.value}, details={self.details!r})"
        )


class ValidationError(DomainException):
    """Input the analytics core refuses to work with."""

    default_code = ErrorCode.VALIDATION_ERROR


class MalformedRecordError(ValidationError):
    """One raw row could not become a record.

    The ingestion layer catches it per row: the row is skipped and counted
    and the rest of the batch goes on.
    """

    default_code = ErrorCode.INVALID_RECORD


class DataFetchError(DomainException):
    """The external store failed, timed out or answered garbage.

    Never retried here.
    """

    default_code = ErrorCode.DATA_FETCH_FAILED

    def __init__(
        self,
        message: str = "Could not load data from the external store",
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
