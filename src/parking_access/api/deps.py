"""
parking_access.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the cache.
- Build per-request resource access services.
- Parse the client's cache bypass directive.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parking_access.cache.accessor import CacheAside
from parking_access.cache.backends import Cache
from parking_access.services.section_service import SectionService
from parking_access.services.vehicle_service import VehicleService
from parking_access.settings import Settings, get_settings


def settings_dep(settings: Settings = Depends(get_settings)) -> Settings:
    # create_app overrides get_settings so the app and its dependencies share one instance.
    return settings


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `parking_access.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed by the service layer.
    async with session_factory() as session:
        yield session


def cache_from_app(request: Request) -> Cache:
    return request.app.state.cache  # type: ignore[attr-defined]


def cache_aside(
    cache: Cache = Depends(cache_from_app),
    settings: Settings = Depends(settings_dep),
) -> CacheAside:
    return CacheAside.from_settings(cache, settings)


def cache_bypass(cache_control: str | None = Header(default=None)) -> bool:
    # Only an explicit `no-cache` directive skips the cache read.
    if not cache_control:
        return False
    directives = {d.strip().lower() for d in cache_control.split(",")}
    return "no-cache" in directives


def vehicle_service(
    session: AsyncSession = Depends(db_session),
    cache: CacheAside = Depends(cache_aside),
    settings: Settings = Depends(settings_dep),
) -> VehicleService:
    return VehicleService(session=session, cache=cache, settings=settings)


def section_service(
    session: AsyncSession = Depends(db_session),
    cache: CacheAside = Depends(cache_aside),
    settings: Settings = Depends(settings_dep),
) -> SectionService:
    return SectionService(session=session, cache=cache, settings=settings)
