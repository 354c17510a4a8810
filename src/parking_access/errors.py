"""
parking_access.errors

Error taxonomy shared by services, repositories and the API layer.

Responsibilities:
- Name every failure the access layer can surface to a caller.
- Carry the HTTP status each failure maps to, so the API stays a thin translator.
"""

from __future__ import annotations

from starlette.status import (
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_CONTENT,
    HTTP_503_SERVICE_UNAVAILABLE,
)


class ParkingAccessError(Exception):
    code: str = "error"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AccessDenied(ParkingAccessError):
    # Role policy rejected the call. Never reveals whether the record exists.
    code = "access_denied"
    status_code = HTTP_403_FORBIDDEN


class NotFound(ParkingAccessError):
    code = "not_found"
    status_code = HTTP_404_NOT_FOUND


class AlreadyExists(ParkingAccessError):
    code = "already_exists"
    status_code = HTTP_409_CONFLICT


class ValidationFailed(ParkingAccessError):
    code = "validation_failed"
    status_code = HTTP_422_UNPROCESSABLE_CONTENT


class DependencyUnavailable(ParkingAccessError):
    """
    Store or cache transport failure.

    Raised from the cache it is swallowed by the cache-aside accessor; raised from
    the record store it fails the request.
    """

    code = "dependency_unavailable"
    status_code = HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, dependency: str, message: str) -> None:
        super().__init__(f"{dependency} unavailable: {message}")
        self.dependency = dependency


# --- Module Notes -----------------------------------------------------------
# No error here is retried by this layer; retries belong to collaborator clients.
