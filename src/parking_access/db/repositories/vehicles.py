"""
parking_access.db.repositories.vehicles

Repository for `Vehicle` entities.

Responsibilities:
- CRUD for vehicles, with plate uniqueness enforced by the schema.
- Filtered, paginated listing (plate substring, residence).
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parking_access.db.errors import page_window, translate_store_errors
from parking_access.db.models import Residence, Vehicle


class VehicleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, plate: str, type: str, residence_id: int | None = None) -> Vehicle:
        vehicle = Vehicle(plate=plate, type=type, residence_id=residence_id)
        with translate_store_errors():
            self._session.add(vehicle)
            await self._session.flush()
            await self._session.refresh(vehicle, attribute_names=["residence"])
        return vehicle

    async def get(self, vehicle_id: int) -> Vehicle | None:
        with translate_store_errors():
            return await self._session.get(Vehicle, vehicle_id)

    async def get_by_plate(self, plate: str) -> Vehicle | None:
        stmt = select(Vehicle).where(Vehicle.plate == plate)
        with translate_store_errors():
            return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list(
        self,
        *,
        plate: str | None = None,
        residence_id: int | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Vehicle]:
        stmt = select(Vehicle).order_by(Vehicle.id)
        if plate is not None:
            stmt = stmt.where(Vehicle.plate.icontains(plate, autoescape=True))
        if residence_id is not None:
            stmt = stmt.where(Vehicle.residence_id == residence_id)
        offset, limit = page_window(page, limit)
        stmt = stmt.offset(offset).limit(limit)
        with translate_store_errors():
            return list((await self._session.execute(stmt)).scalars().all())

    async def count(self) -> int:
        with translate_store_errors():
            return (await self._session.execute(select(func.count(Vehicle.id)))).scalar_one()

    async def update_plate(self, vehicle: Vehicle, plate: str) -> Vehicle:
        vehicle.plate = plate
        with translate_store_errors():
            await self._session.flush()
        return vehicle

    async def delete(self, vehicle: Vehicle) -> None:
        with translate_store_errors():
            await self._session.delete(vehicle)
            await self._session.flush()

    async def residence_exists(self, residence_id: int) -> bool:
        with translate_store_errors():
            return await self._session.get(Residence, residence_id) is not None


# --- Module Notes -----------------------------------------------------------
# The plate filter is a literal substring: `%` and `_` in user input are escaped and
# never act as LIKE wildcards.
