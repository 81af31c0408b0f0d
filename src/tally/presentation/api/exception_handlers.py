"""Error responses for the analytics API.

Every failure leaves the service as ``{"detail": ..., "code": ...}``. A sparse
dataset is never an error here; only rejected input (4xx) and an unreachable
data store (503) are.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tally.domain.shared.exceptions import DomainException, ErrorCode

logger = logging.getLogger(__name__)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.DATA_FETCH_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(code: ErrorCode) -> int:
    """HTTP status for a domain error code; input problems default to 400."""
    return _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)


def error_response(status_code: int, detail: str, code: ErrorCode) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code.value},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on ``app``."""

    @app.exception_handler(DomainException)
    async def handle_domain_error(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        # details may carry upstream status codes or row data: log only
        logger.warning(
            "%s %s failed with %s: %s %s",
            request.method,
            request.url.path,
            exc.code.value,
            exc.message,
            exc.details,
        )
        return error_response(status_for(exc.code), exc.message, exc.code)

    @app.exception_handler(ValueError)
    async def handle_rejected_window(
        request: Request,
        exc: ValueError,
    ) -> JSONResponse:
        """Windows and groupings the domain services refuse to compute."""
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            str(exc),
            ErrorCode.VALIDATION_ERROR,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal error occurred",
            ErrorCode.INTERNAL_ERROR,
        )
