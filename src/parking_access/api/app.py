"""
parking_access.api.app

FastAPI app factory for the parking access service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory, cache).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from parking_access import __version__
from parking_access.api.errors import register_error_handlers
from parking_access.api.routers.dev_auth import router as dev_auth_router
from parking_access.api.routers.health import router as health_router
from parking_access.api.routers.sections import router as sections_router
from parking_access.api.routers.vehicles import router as vehicles_router
from parking_access.cache.backends import Cache, create_cache
from parking_access.db.init_db import init_db
from parking_access.db.session import create_engine, create_sessionmaker
from parking_access.observability.logging import configure_logging, get_logger
from parking_access.observability.middleware import RequestContextMiddleware
from parking_access.settings import Settings, get_settings

log = get_logger(__name__)


def create_app(*, settings: Settings, cache: Cache | None = None) -> FastAPI:
    """
    `cache` replaces the backend chosen from settings; tests pass fakes here.
    """

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.cache = cache if cache is not None else create_cache(settings)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await app.state.cache.close()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Parking Access Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(vehicles_router)
    app.include_router(sections_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; authorization, caching and persistence decisions stay
# in the service layer.
