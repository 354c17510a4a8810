"""
parking_access.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Convert a bearer token into a typed `AuthenticatedCaller`.

Authorization is not done here: services call the role policy explicitly at the top
of every operation with the caller passed in.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED

from parking_access.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from parking_access.auth.models import AuthenticatedCaller
from parking_access.settings import Settings, get_settings

_bearer = HTTPBearer(auto_error=False)


def get_caller(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedCaller:
    # Authn: require a bearer token.
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        cfg = JwtConfig.from_settings(settings)
        payload = decode_and_validate(cfg=cfg, token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    subject = str(payload.get("sub", ""))
    role = payload.get("role")
    residence_id = payload.get("residence_id")
    if not subject.isdigit():
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token subject")
    if not isinstance(role, str) or not role:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token role")
    if residence_id is not None and not isinstance(residence_id, int):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token residence")

    return AuthenticatedCaller(id=int(subject), role=role.upper(), residence_id=residence_id)


# --- Module Notes -----------------------------------------------------------
# Token issuance is out of scope for this service; the caller descriptor is all that
# crosses into the service layer.
