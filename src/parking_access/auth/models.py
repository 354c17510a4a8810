"""
parking_access.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`AuthenticatedCaller`) threaded through
  every service call.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(enum.StrEnum):
    admin = "ADMIN"
    security = "SECURITY"
    resident = "RESIDENT"


@dataclass(frozen=True, slots=True)
class AuthenticatedCaller:
    """
    Authenticated caller identity, immutable for the lifetime of a request.

    `role` is kept as a plain string so unknown roles from the token survive
    decoding and are denied by the role policy rather than rejected as malformed.
    """

    id: int
    role: str
    residence_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is used across API, services and cache keys.
