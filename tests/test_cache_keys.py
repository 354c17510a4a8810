from __future__ import annotations

import pytest

from parking_access.auth.models import AuthenticatedCaller
from parking_access.auth.policy import Allow, AllowScopedTo
from parking_access.cache.keys import Selector, build_key

SECURITY = AuthenticatedCaller(id=2, role="SECURITY")
ADMIN = AuthenticatedCaller(id=1, role="ADMIN")
RESIDENT = AuthenticatedCaller(id=7, role="RESIDENT", residence_id=3)


def _list_key(page=None, limit=None, caller=SECURITY, decision=None, **filters) -> str:
    return build_key(
        "vehicles",
        Selector.for_list(
            decision=decision or Allow(), caller=caller, page=page, limit=limit, **filters
        ),
    )


def test_list_key_for_paginated_unscoped_read() -> None:
    assert _list_key(page=1, limit=10) == "vehicles:1:10"


def test_key_is_deterministic() -> None:
    assert _list_key(page=2, limit=5, plate="AB 12") == _list_key(page=2, limit=5, plate="AB 12")


@pytest.mark.parametrize(
    "other",
    [
        {"page": 2, "limit": 10},
        {"page": 1, "limit": 11},
        {"page": 1, "limit": 10, "plate": "ABC"},
        {"page": None, "limit": 10},
        {"page": 1, "limit": None},
    ],
)
def test_any_selector_change_changes_key(other: dict) -> None:
    assert _list_key(page=1, limit=10) != _list_key(**other)


def test_absent_fields_do_not_collide_with_explicit_values() -> None:
    absent = _list_key()
    assert absent == "vehicles:*:*"
    assert _list_key(plate="*") != absent
    assert _list_key(plate="") != _list_key()
    assert _list_key(plate="*") == "vehicles:*:*:plate=%2A"


def test_separators_in_values_are_escaped() -> None:
    assert _list_key(plate="a:b") != _list_key(plate="a", b="")
    assert ":" not in _list_key(plate="x:y=z").split(":", 3)[-1]


def test_unscoped_results_share_a_key_across_roles() -> None:
    assert _list_key(page=1, limit=10, caller=ADMIN) == _list_key(page=1, limit=10, caller=SECURITY)


def test_scoped_results_key_on_role_and_scope() -> None:
    scoped = _list_key(
        page=1, limit=10, caller=RESIDENT, decision=AllowScopedTo({"residence_id": 3})
    )
    other_residence = _list_key(
        page=1,
        limit=10,
        caller=AuthenticatedCaller(id=8, role="RESIDENT", residence_id=4),
        decision=AllowScopedTo({"residence_id": 4}),
    )
    assert scoped == "vehicles:1:10:role=RESIDENT:scope.residence_id=3"
    assert scoped != _list_key(page=1, limit=10)
    assert scoped != other_residence


def test_by_id_keys() -> None:
    key = build_key("vehicles", Selector.for_id(decision=Allow(), caller=ADMIN, id=5))
    scoped = build_key(
        "vehicles",
        Selector.for_id(decision=AllowScopedTo({"residence_id": 3}), caller=RESIDENT, id=5),
    )
    assert key == "vehicles:5"
    assert scoped != key
    assert key != build_key("vehicles", Selector.for_id(decision=Allow(), caller=ADMIN, id=6))
    assert key != build_key("sections", Selector.for_id(decision=Allow(), caller=ADMIN, id=5))


def test_list_and_by_id_keys_never_collide() -> None:
    by_id = build_key("vehicles", Selector.for_id(decision=Allow(), caller=ADMIN, id=5))
    assert by_id not in {_list_key(page=5), _list_key(page=5, limit=10), _list_key(limit=5)}
