"""
parking_access.services.vehicle_service

Resource access service for vehicles.

Responsibilities:
- Authorize every call against the role policy before touching cache or store.
- Serve list/by-id reads through the cache-aside accessor.
- Register, re-plate and delete vehicles in a single transaction each.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from parking_access.auth.models import AuthenticatedCaller
from parking_access.auth.policy import Action, Allow, AllowScopedTo, Resource, enforce, in_scope
from parking_access.cache.accessor import CacheAside
from parking_access.cache.keys import Selector, build_key
from parking_access.db.errors import unit_of_work
from parking_access.db.repositories.vehicles import VehicleRepo
from parking_access.errors import AccessDenied, AlreadyExists, NotFound, ValidationFailed
from parking_access.observability.logging import get_logger
from parking_access.services.schemas import VehicleOut, dump
from parking_access.settings import Settings

log = get_logger(__name__)


def _clean_plate(plate: str | None) -> str:
    plate = (plate or "").strip()
    if not plate:
        raise ValidationFailed("Plate must not be empty")
    if len(plate) > 32:
        raise ValidationFailed("Plate must be at most 32 characters")
    return plate


def check_pagination(page: int | None, limit: int | None, *, max_page_size: int) -> None:
    if page is not None and page < 1:
        raise ValidationFailed("page must be >= 1")
    if page is not None and limit is None:
        raise ValidationFailed("page requires limit")
    if limit is not None and not 1 <= limit <= max_page_size:
        raise ValidationFailed(f"limit must be between 1 and {max_page_size}")


class VehicleService:
    def __init__(self, *, session: AsyncSession, cache: CacheAside, settings: Settings) -> None:
        self._session = session
        self._cache = cache
        self._settings = settings
        self._vehicles = VehicleRepo(session)

    async def list_vehicles(
        self,
        caller: AuthenticatedCaller,
        *,
        plate: str | None = None,
        page: int | None = None,
        limit: int | None = None,
        bypass: bool = False,
    ) -> list[dict[str, Any]]:
        decision = enforce(caller, Resource.vehicle, Action.read)
        check_pagination(page, limit, max_page_size=self._settings.max_page_size)

        key = build_key(
            Resource.vehicle,
            Selector.for_list(
                decision=decision, caller=caller, page=page, limit=limit, plate=plate
            ),
        )
        scope = decision.filter if isinstance(decision, AllowScopedTo) else {}
        residence_id = scope.get("residence_id")

        async def load() -> list[dict[str, Any]]:
            vehicles = await self._vehicles.list(
                plate=plate, residence_id=residence_id, page=page, limit=limit
            )
            return [dump(VehicleOut, v) for v in vehicles]

        return await self._cache.read_through(key, load, bypass=bypass)

    async def get_vehicle(
        self,
        caller: AuthenticatedCaller,
        vehicle_id: int,
        *,
        bypass: bool = False,
    ) -> dict[str, Any]:
        decision = enforce(caller, Resource.vehicle, Action.read)
        selector = Selector.for_id(decision=decision, caller=caller, id=vehicle_id)
        key = build_key(Resource.vehicle, selector)

        async def load() -> dict[str, Any]:
            return await self._load_one(decision, vehicle_id)

        return await self._cache.read_through(key, load, bypass=bypass)

    async def _load_one(self, decision: Allow | AllowScopedTo, vehicle_id: int) -> dict[str, Any]:
        vehicle = await self._vehicles.get(vehicle_id)
        if vehicle is None:
            # Scoped callers learn nothing about records outside their scope,
            # including whether they exist.
            if isinstance(decision, AllowScopedTo):
                raise AccessDenied("Not allowed to read this vehicle")
            raise NotFound(f"Vehicle {vehicle_id} not found")
        data = dump(VehicleOut, vehicle)
        if not in_scope(decision, data):
            raise AccessDenied("Not allowed to read this vehicle")
        return data

    async def register_vehicle(
        self,
        caller: AuthenticatedCaller,
        *,
        plate: str,
        type: str = "CAR",
        residence_id: int | None = None,
    ) -> dict[str, Any]:
        enforce(caller, Resource.vehicle, Action.create)
        plate = _clean_plate(plate)
        type = (type or "CAR").strip().upper()

        async with unit_of_work(self._session, conflict=f"Vehicle plate {plate!r} already exists"):
            if await self._vehicles.get_by_plate(plate) is not None:
                raise AlreadyExists(f"Vehicle plate {plate!r} already exists")
            if residence_id is not None and not await self._vehicles.residence_exists(residence_id):
                raise ValidationFailed(f"Residence {residence_id} does not exist")
            vehicle = await self._vehicles.create(plate=plate, type=type, residence_id=residence_id)
            data = dump(VehicleOut, vehicle)

        log.info("vehicle.registered", vehicle_id=data["id"], caller_id=caller.id, role=caller.role)
        return data

    async def update_plate(
        self, caller: AuthenticatedCaller, vehicle_id: int, plate: str
    ) -> dict[str, Any]:
        enforce(caller, Resource.vehicle, Action.update)
        plate = _clean_plate(plate)

        async with unit_of_work(self._session, conflict=f"Vehicle plate {plate!r} already exists"):
            vehicle = await self._vehicles.get(vehicle_id)
            if vehicle is None:
                raise NotFound(f"Vehicle {vehicle_id} not found")
            if vehicle.plate != plate:
                if await self._vehicles.get_by_plate(plate) is not None:
                    raise AlreadyExists(f"Vehicle plate {plate!r} already exists")
                await self._vehicles.update_plate(vehicle, plate)
            data = dump(VehicleOut, vehicle)

        # Cached reads of this vehicle keep the old plate until their TTL expires.
        log.info("vehicle.updated", vehicle_id=vehicle_id, caller_id=caller.id, role=caller.role)
        return data

    async def delete_vehicle(self, caller: AuthenticatedCaller, vehicle_id: int) -> dict[str, Any]:
        enforce(caller, Resource.vehicle, Action.delete)

        async with unit_of_work(self._session, conflict="Vehicle is still referenced"):
            vehicle = await self._vehicles.get(vehicle_id)
            if vehicle is None:
                raise NotFound(f"Vehicle {vehicle_id} not found")
            data = dump(VehicleOut, vehicle)
            await self._vehicles.delete(vehicle)

        log.info("vehicle.deleted", vehicle_id=vehicle_id, caller_id=caller.id, role=caller.role)
        return data


# --- Module Notes -----------------------------------------------------------
# Writes never touch the cache: entries are bounded by the fixed TTL only.
