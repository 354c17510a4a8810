"""
tests.conftest

Shared fixtures: in-memory record store, in-memory cache with a controllable clock,
and callers for each role.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from parking_access.auth.models import AuthenticatedCaller
from parking_access.cache.accessor import CacheAside
from parking_access.cache.backends import InMemoryCache
from parking_access.db.init_db import init_db
from parking_access.db.models import ParkingTicket, Residence, ReservedSlot, Section
from parking_access.db.session import create_engine, create_sessionmaker
from parking_access.errors import DependencyUnavailable
from parking_access.settings import Settings


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingCache:
    """Cache whose transport is down: every call fails like a refused connection."""

    def __init__(self) -> None:
        self.calls = 0

    async def get(self, key: str) -> bytes | None:
        self.calls += 1
        raise DependencyUnavailable("cache", "connection refused")

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self.calls += 1
        raise DependencyUnavailable("cache", "connection refused")

    async def close(self) -> None:
        return None


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", database_url="sqlite+aiosqlite:///:memory:", redis_url=None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(clock=clock)


@pytest.fixture
def accessor(memory_cache: InMemoryCache, settings: Settings) -> CacheAside:
    return CacheAside.from_settings(memory_cache, settings)


@pytest_asyncio.fixture
async def session(settings: Settings) -> AsyncIterator[AsyncSession]:
    engine = create_engine(settings)
    await init_db(engine)
    factory = create_sessionmaker(engine)
    try:
        async with factory() as s:
            yield s
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def seeded(session: AsyncSession) -> dict[str, int]:
    """
    Two residences and two sections:
    - "A1" open to resident 7 and to SECURITY, with two reserved slots and tickets
    - "B2" privileged to nobody
    """

    r1 = Residence(unit="101")
    r2 = Residence(unit="202")
    a1 = Section(name="A1", capacity=50, privileged_to=[7, "SECURITY"])
    b2 = Section(name="B2", capacity=20, privileged_to=[])
    session.add_all([r1, r2, a1, b2])
    await session.flush()
    session.add_all(
        [
            ReservedSlot(section_id=a1.id, slot_number=2, reserved_for=7),
            ReservedSlot(section_id=a1.id, slot_number=1, reserved_for=8),
            ParkingTicket(
                section_id=a1.id,
                checked_in_at=datetime(2024, 1, 1, 8, 0),
                checked_out_at=datetime(2024, 1, 1, 10, 0),
                fee=Decimal("12.50"),
            ),
            ParkingTicket(
                section_id=a1.id,
                checked_in_at=datetime(2024, 1, 31, 20, 0),
                checked_out_at=datetime(2024, 1, 31, 23, 30),
                fee=Decimal("7.50"),
            ),
            ParkingTicket(
                section_id=a1.id,
                checked_in_at=datetime(2024, 2, 1, 9, 0),
                checked_out_at=datetime(2024, 2, 1, 9, 45),
                fee=Decimal("3.00"),
            ),
            # Still parked: never counted as revenue.
            ParkingTicket(section_id=a1.id, checked_in_at=datetime(2024, 1, 15, 9, 0), fee=Decimal("0")),
        ]
    )
    await session.commit()
    # Drop identity-map state so services load sections with their slots.
    session.expunge_all()
    return {"residence_1": r1.id, "residence_2": r2.id, "section_a1": a1.id, "section_b2": b2.id}


@pytest.fixture
def admin() -> AuthenticatedCaller:
    return AuthenticatedCaller(id=1, role="ADMIN")


@pytest.fixture
def security() -> AuthenticatedCaller:
    return AuthenticatedCaller(id=2, role="SECURITY")


@pytest.fixture
def resident(seeded: dict[str, int]) -> AuthenticatedCaller:
    return AuthenticatedCaller(id=7, role="RESIDENT", residence_id=seeded["residence_1"])
