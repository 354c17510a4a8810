"""
parking_access.api.routers.vehicles

Vehicle endpoints.

Responsibilities:
- List/get vehicles (cache-aware; `Cache-Control: no-cache` skips the cache read).
- Register, re-plate and delete vehicles.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from parking_access.api.deps import cache_bypass, vehicle_service
from parking_access.auth.deps import get_caller
from parking_access.auth.models import AuthenticatedCaller
from parking_access.services.vehicle_service import VehicleService

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


class VehicleCreateRequest(BaseModel):
    plate: str = Field(min_length=1, max_length=32)
    type: str = Field(default="CAR", min_length=1, max_length=32)
    residence_id: int | None = None


class VehiclePlateRequest(BaseModel):
    plate: str = Field(min_length=1, max_length=32)


@router.get("")
async def list_vehicles(
    plate: str | None = Query(default=None, max_length=32),
    page: int | None = Query(default=None, ge=1),
    limit: int | None = Query(default=None, ge=1),
    bypass: bool = Depends(cache_bypass),
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: VehicleService = Depends(vehicle_service),
) -> list[dict[str, Any]]:
    return await svc.list_vehicles(caller, plate=plate, page=page, limit=limit, bypass=bypass)


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: int,
    bypass: bool = Depends(cache_bypass),
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: VehicleService = Depends(vehicle_service),
) -> dict[str, Any]:
    return await svc.get_vehicle(caller, vehicle_id, bypass=bypass)


@router.post("", status_code=201)
async def register_vehicle(
    body: VehicleCreateRequest,
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: VehicleService = Depends(vehicle_service),
) -> dict[str, Any]:
    return await svc.register_vehicle(
        caller, plate=body.plate, type=body.type, residence_id=body.residence_id
    )


@router.patch("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: int,
    body: VehiclePlateRequest,
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: VehicleService = Depends(vehicle_service),
) -> dict[str, Any]:
    return await svc.update_plate(caller, vehicle_id, body.plate)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int,
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: VehicleService = Depends(vehicle_service),
) -> dict[str, Any]:
    return await svc.delete_vehicle(caller, vehicle_id)
