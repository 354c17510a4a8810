"""
parking_access.api.errors

Translate the service error taxonomy into HTTP responses.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from parking_access.errors import DependencyUnavailable, ParkingAccessError
from parking_access.observability.logging import get_logger

log = get_logger(__name__)


async def _handle_parking_error(_: Request, exc: ParkingAccessError) -> JSONResponse:
    if isinstance(exc, DependencyUnavailable):
        log.error("dependency.unavailable", dependency=exc.dependency, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ParkingAccessError, _handle_parking_error)  # type: ignore[arg-type]
