"""Map domain exceptions to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ridehail.domain.exceptions import (
    AlreadyRatedError,
    AuthorizationError,
    NotFoundError,
    StateError,
    TripCoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; NotAvailableError is caught by NotFoundError.
STATUS_CODES: list[tuple[type[TripCoreError], int]] = [
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (AlreadyRatedError, 409),
    (StateError, 409),
]


def status_code_for(exc: TripCoreError) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return 400


async def trip_core_error_handler(request: Request, exc: TripCoreError) -> JSONResponse:
    code = status_code_for(exc)
    logger.info(
        "%s %s -> %d %s: %s",
        request.method,
        request.url.path,
        code,
        type(exc).__name__,
        exc.message,
    )
    body: dict = {"detail": exc.message}
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TripCoreError, trip_core_error_handler)
