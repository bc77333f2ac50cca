"""
Error kinds raised by the booking service and their envelope rendering.

Services raise one of the BookingAPIError subclasses; the handlers
registered in main.py turn them into the uniform response envelope
{status, message, data?}. Server-side diagnostics are logged at the
raise site, the client only ever sees the generic message.
"""

from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from booking_api.core.logging import get_logger

logger = get_logger(__name__)

OMITTED: Any = object()

# Starlette renamed the 422 constant; the literal works across versions
HTTP_422_UNPROCESSABLE = 422


def envelope(
    status_code: int,
    message: str,
    data: Any = OMITTED,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build the {status, message, data?} response. `data` is omitted when not given."""
    body: dict[str, Any] = {"status": status_code, "message": message}
    if data is not OMITTED:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=body, headers=headers)


class BookingAPIError(Exception):
    """Base exception for all booking API errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    metric_result: str = "error"

    def __init__(self, message: str, data: Any = OMITTED):
        self.message = message
        self.data = data
        super().__init__(message)


class NotFoundError(BookingAPIError):
    """Booking absent or already deleted."""

    status_code = status.HTTP_404_NOT_FOUND
    metric_result = "not_found"


class StorageError(BookingAPIError):
    """The database rejected or failed a statement."""

    pass


class DeliveryError(BookingAPIError):
    """The confirmation email could not be delivered."""

    pass


class InvalidInputError(BookingAPIError):
    """Request body failed validation after parsing."""

    status_code = HTTP_422_UNPROCESSABLE
    metric_result = "invalid"


async def booking_error_handler(request: Request, exc: BookingAPIError) -> JSONResponse:
    return envelope(exc.status_code, exc.message, exc.data)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    logger.info("request_validation_failed", errors=errors)
    return envelope(HTTP_422_UNPROCESSABLE, "Invalid request data", errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unmatched routes and methods (404/405) get the envelope too."""
    return envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))
