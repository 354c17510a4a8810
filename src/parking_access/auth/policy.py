"""
parking_access.auth.policy

Role policy: maps (caller role, resource, action) to an access decision.

Responsibilities:
- Decide Allow / AllowScopedTo(filter) / Deny without touching the store or cache.
- Provide `enforce`, which turns a Deny into `AccessDenied` and logs it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from parking_access.auth.models import AuthenticatedCaller, Role
from parking_access.errors import AccessDenied
from parking_access.observability.logging import get_logger

log = get_logger(__name__)


class Resource(enum.StrEnum):
    vehicle = "vehicles"
    section = "sections"


class Action(enum.StrEnum):
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"
    report = "report"


@dataclass(frozen=True, slots=True)
class Allow:
    pass


@dataclass(frozen=True, slots=True)
class AllowScopedTo:
    # Store-level predicate the caller's results must satisfy, e.g. {"residence_id": 4}.
    filter: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Deny:
    reason: str = "not allowed"


Decision = Allow | AllowScopedTo | Deny

_SECURITY_ALLOWED: frozenset[tuple[Resource, Action]] = frozenset(
    {
        (Resource.vehicle, Action.read),
        (Resource.vehicle, Action.create),
        (Resource.section, Action.read),
        (Resource.section, Action.create),
        (Resource.section, Action.report),
    }
)


def _resident_scope(caller: AuthenticatedCaller, resource: Resource, action: Action) -> Decision:
    if action is not Action.read:
        return Deny("residents may only read")
    if resource is Resource.vehicle:
        if caller.residence_id is None:
            return Deny("caller has no residence")
        return AllowScopedTo({"residence_id": caller.residence_id})
    return AllowScopedTo({"privileged_caller": caller.id, "privileged_role": caller.role})


def authorize(caller: AuthenticatedCaller, resource: Resource, action: Action) -> Decision:
    role = caller.role
    if role == Role.admin:
        return Allow()
    if role == Role.security:
        if (resource, action) in _SECURITY_ALLOWED:
            return Allow()
        return Deny(f"{role} may not {action} {resource}")
    if role == Role.resident:
        return _resident_scope(caller, resource, action)
    return Deny(f"role {role!r} has no access to {resource}")


def enforce(
    caller: AuthenticatedCaller, resource: Resource, action: Action
) -> Allow | AllowScopedTo:
    decision = authorize(caller, resource, action)
    if isinstance(decision, Deny):
        log.info(
            "access.denied",
            caller_id=caller.id,
            role=caller.role,
            resource=str(resource),
            action=str(action),
            reason=decision.reason,
        )
        raise AccessDenied(f"Not allowed to {action} {resource}")
    return decision


def in_scope(decision: Allow | AllowScopedTo, record: dict[str, Any]) -> bool:
    """
    Check a single serialized record against a scoped decision.

    Used for by-id reads, where the store is queried by primary key and the scope has
    to be applied afterwards.
    """

    if isinstance(decision, Allow):
        return True
    scope = decision.filter
    if "residence_id" in scope:
        return record.get("residence_id") == scope["residence_id"]
    if "privileged_caller" in scope:
        privileged = record.get("privileged_to") or []
        return scope["privileged_caller"] in privileged or scope["privileged_role"] in privileged
    return False


# --- Module Notes -----------------------------------------------------------
# Scope filters are also the authorization-relevant part of cache keys; see
# `cache.keys.build_key`.
