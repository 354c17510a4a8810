"""
tests.test_api

End-to-end tests through the HTTP surface.

Responsibilities:
- Boot the app with an in-memory store and cache.
- Check status codes for the error taxonomy and the Cache-Control bypass.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from parking_access.api.app import create_app
from parking_access.auth.jwt import JwtConfig, issue_token
from parking_access.cache.backends import InMemoryCache
from parking_access.settings import Settings

from .conftest import FailingCache


def _auth(settings: Settings, subject: int, role: str, residence_id: int | None = None) -> dict[str, str]:
    token = issue_token(
        cfg=JwtConfig.from_settings(settings), subject=subject, role=role, residence_id=residence_id
    )
    return {"Authorization": f"Bearer {token}"}


@asynccontextmanager
async def _client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest_asyncio.fixture
async def client(settings: Settings, memory_cache: InMemoryCache) -> AsyncIterator[httpx.AsyncClient]:
    async with _client(create_app(settings=settings, cache=memory_cache)) as c:
        yield c


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"
    assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_missing_or_invalid_token_is_unauthorized(client: httpx.AsyncClient) -> None:
    assert (await client.get("/vehicles")).status_code == 401
    r = await client.get("/vehicles", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_vehicle_lifecycle_and_cache_control(
    client: httpx.AsyncClient, settings: Settings, memory_cache: InMemoryCache
) -> None:
    admin = _auth(settings, 1, "ADMIN")
    security = _auth(settings, 2, "SECURITY")

    r = await client.post("/vehicles", json={"plate": "ABC1234"}, headers=security)
    assert r.status_code == 201
    vehicle_id = r.json()["id"]

    r = await client.post("/vehicles", json={"plate": "ABC1234"}, headers=admin)
    assert r.status_code == 409
    assert r.json()["error"] == "already_exists"

    r = await client.get("/vehicles", params={"page": 1, "limit": 10}, headers=security)
    assert r.status_code == 200
    assert [v["plate"] for v in r.json()] == ["ABC1234"]
    assert await memory_cache.get("vehicles:1:10") is not None

    r = await client.get(f"/vehicles/{vehicle_id}", headers=security)
    assert r.json()["plate"] == "ABC1234"

    r = await client.patch(f"/vehicles/{vehicle_id}", json={"plate": "ZZZ9999"}, headers=security)
    assert r.status_code == 403
    r = await client.patch(f"/vehicles/{vehicle_id}", json={"plate": "ZZZ9999"}, headers=admin)
    assert r.status_code == 200

    r = await client.get(f"/vehicles/{vehicle_id}", headers=security)
    assert r.json()["plate"] == "ABC1234"
    r = await client.get(
        f"/vehicles/{vehicle_id}", headers={**security, "Cache-Control": "no-cache"}
    )
    assert r.json()["plate"] == "ZZZ9999"

    r = await client.delete(f"/vehicles/{vehicle_id}", headers=admin)
    assert r.status_code == 200
    assert r.json()["plate"] == "ZZZ9999"

    r = await client.get(f"/vehicles/{vehicle_id}", headers={**admin, "Cache-Control": "no-cache"})
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_validation_errors(client: httpx.AsyncClient, settings: Settings) -> None:
    admin = _auth(settings, 1, "ADMIN")

    assert (await client.post("/vehicles", json={"plate": ""}, headers=admin)).status_code == 422
    assert (await client.get("/vehicles", params={"page": 0}, headers=admin)).status_code == 422
    assert (await client.get("/vehicles", params={"page": 3}, headers=admin)).status_code == 422
    r = await client.get("/vehicles", params={"limit": settings.max_page_size + 1}, headers=admin)
    assert r.status_code == 422
    assert r.json()["error"] == "validation_failed"


@pytest.mark.asyncio
async def test_resident_is_denied_writes(client: httpx.AsyncClient, settings: Settings) -> None:
    resident = _auth(settings, 7, "RESIDENT", residence_id=1)

    r = await client.post("/vehicles", json={"plate": "RES1"}, headers=resident)
    assert r.status_code == 403
    assert r.json()["error"] == "access_denied"
    assert (await client.get("/vehicles", headers=resident)).status_code == 200


@pytest.mark.asyncio
async def test_section_endpoints(client: httpx.AsyncClient, settings: Settings) -> None:
    admin = _auth(settings, 1, "ADMIN")
    security = _auth(settings, 2, "SECURITY")
    resident = _auth(settings, 7, "RESIDENT")

    r = await client.post(
        "/sections", json={"name": "B1", "capacity": 100, "privilegedTo": [7]}, headers=admin
    )
    assert r.status_code == 201
    section_id = r.json()["id"]

    r = await client.post("/sections", json={"name": "B1", "capacity": 1}, headers=admin)
    assert r.status_code == 409
    r = await client.post("/sections", json={"name": "B9", "capacity": 0}, headers=admin)
    assert r.status_code == 422
    r = await client.patch(f"/sections/{section_id}", json={"capacity": 5}, headers=security)
    assert r.status_code == 403

    r = await client.get("/sections", headers=resident)
    assert [s["name"] for s in r.json()] == ["B1"]

    r = await client.get(f"/sections/{section_id}/reserved", headers=security)
    assert r.status_code == 200
    assert r.json() == []

    r = await client.post(
        f"/sections/{section_id}/report",
        params={"from": "2024-01-01", "to": "2024-12-31"},
        headers=security,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["from"] == "2024-01-01"
    assert body["to"] == "2024-12-31"
    assert body["tickets"] == 0

    r = await client.post(
        f"/sections/{section_id}/report",
        params={"from": "2024-12-31", "to": "2024-01-01"},
        headers=security,
    )
    assert r.status_code == 422

    r = await client.delete(f"/sections/{section_id}", headers=admin)
    assert r.status_code == 200
    assert r.json()["name"] == "B1"


@pytest.mark.asyncio
async def test_reads_succeed_while_cache_is_down(settings: Settings) -> None:
    app = create_app(settings=settings, cache=FailingCache())
    admin = _auth(settings, 1, "ADMIN")
    async with _client(app) as client:
        r = await client.post("/vehicles", json={"plate": "CACHELESS"}, headers=admin)
        assert r.status_code == 201

        r = await client.get("/vehicles", params={"page": 1, "limit": 10}, headers=admin)
        assert r.status_code == 200
        assert [v["plate"] for v in r.json()] == ["CACHELESS"]


@pytest.mark.asyncio
async def test_dev_token_roundtrip(client: httpx.AsyncClient) -> None:
    r = await client.post("/v1/dev/token", json={"subject": 2, "role": "security"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await client.get("/sections", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
