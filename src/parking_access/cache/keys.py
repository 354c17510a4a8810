"""
parking_access.cache.keys

Cache key derivation.

Keys have the shape::

    <resource>:<positional>...[:<name>=<value>...]

List reads use `page` and `limit` as positional fields, by-id reads use `id`.
Absent positional fields render as `*`. Named fields (filters, and the caller
role plus scope filter for scoped decisions) are emitted only when present,
sorted by name. Values are percent-encoded, so no explicit value can render as
the placeholder or smuggle in a separator.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from parking_access.auth.models import AuthenticatedCaller
from parking_access.auth.policy import Allow, AllowScopedTo

PLACEHOLDER = "*"


@dataclass(frozen=True, slots=True)
class Selector:
    """
    Query shape of a read: which subset of a resource is being addressed.
    """

    id: int | None = None
    page: int | None = None
    limit: int | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    scope: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def for_list(
        cls,
        *,
        decision: Allow | AllowScopedTo,
        caller: AuthenticatedCaller,
        page: int | None,
        limit: int | None,
        **filters: Any,
    ) -> Selector:
        return cls(page=page, limit=limit, filters=filters, scope=_scope_of(decision, caller))

    @classmethod
    def for_id(
        cls,
        *,
        decision: Allow | AllowScopedTo,
        caller: AuthenticatedCaller,
        id: int,
    ) -> Selector:
        return cls(id=id, scope=_scope_of(decision, caller))


def _scope_of(decision: Allow | AllowScopedTo, caller: AuthenticatedCaller) -> dict[str, Any]:
    # Unscoped results are role-independent, so they share one key across roles.
    if isinstance(decision, Allow):
        return {}
    return {"role": caller.role, **{f"scope.{k}": v for k, v in decision.filter.items()}}


def _render(value: Any) -> str:
    if value is None:
        return PLACEHOLDER
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe="")


def build_key(resource_type: str, selector: Selector) -> str:
    if selector.id is not None:
        parts = [_render(selector.id)]
    else:
        parts = [_render(selector.page), _render(selector.limit)]

    named = {k: v for k, v in selector.filters.items() if v is not None}
    named.update(selector.scope)
    for name in sorted(named):
        parts.append(f"{quote(name, safe='.')}={_render(named[name])}")

    return ":".join([quote(resource_type, safe=""), *parts])


# --- Module Notes -----------------------------------------------------------
# List keys always carry two positional fields and by-id keys one, and named
# segments always contain "=", so list and by-id keys for the same resource never
# collide.
