"""
parking_access.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from parking_access.api.deps import db_session
from parking_access.db.errors import translate_store_errors

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    # Readiness: the record store must be reachable. The cache is optional by design
    # of the read path, so it is not probed.
    with translate_store_errors():
        await session.execute(text("SELECT 1"))
    return {"status": "ready"}
