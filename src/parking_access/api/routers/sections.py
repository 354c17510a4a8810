"""
parking_access.api.routers.sections

Parking section endpoints.

Responsibilities:
- List/get sections (cache-aware; `Cache-Control: no-cache` skips the cache read).
- Create, update and delete sections.
- Reserved slot listing and revenue reports.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from parking_access.api.deps import cache_bypass, section_service
from parking_access.auth.deps import get_caller
from parking_access.auth.models import AuthenticatedCaller
from parking_access.services.schemas import RevenueReport
from parking_access.services.section_service import SectionService

router = APIRouter(prefix="/sections", tags=["sections"])


class SectionCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    capacity: int = Field(gt=0)
    privileged_to: list[int | str] = Field(default_factory=list, alias="privilegedTo")

    model_config = {"populate_by_name": True}


class SectionUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=64)
    capacity: int | None = Field(default=None, gt=0)
    privileged_to: list[int | str] | None = Field(default=None, alias="privilegedTo")

    model_config = {"populate_by_name": True}


@router.get("")
async def list_sections(
    page: int | None = Query(default=None, ge=1),
    limit: int | None = Query(default=None, ge=1),
    bypass: bool = Depends(cache_bypass),
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: SectionService = Depends(section_service),
) -> list[dict[str, Any]]:
    return await svc.list_sections(caller, page=page, limit=limit, bypass=bypass)


@router.get("/{section_id}")
async def get_section(
    section_id: int,
    bypass: bool = Depends(cache_bypass),
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: SectionService = Depends(section_service),
) -> dict[str, Any]:
    return await svc.get_section(caller, section_id, bypass=bypass)


@router.get("/{section_id}/reserved")
async def list_reserved_slots(
    section_id: int,
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: SectionService = Depends(section_service),
) -> list[dict[str, Any]]:
    return await svc.list_reserved_slots(caller, section_id)


@router.post("", status_code=201)
async def create_section(
    body: SectionCreateRequest,
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: SectionService = Depends(section_service),
) -> dict[str, Any]:
    return await svc.create_section(
        caller, name=body.name, capacity=body.capacity, privileged_to=body.privileged_to
    )


@router.patch("/{section_id}")
async def update_section(
    section_id: int,
    body: SectionUpdateRequest,
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: SectionService = Depends(section_service),
) -> dict[str, Any]:
    return await svc.update_section(
        caller,
        section_id,
        name=body.name,
        capacity=body.capacity,
        privileged_to=body.privileged_to,
    )


@router.delete("/{section_id}")
async def delete_section(
    section_id: int,
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: SectionService = Depends(section_service),
) -> dict[str, Any]:
    return await svc.delete_section(caller, section_id)


@router.post("/{section_id}/report", response_model=RevenueReport)
async def report_revenue(
    section_id: int,
    from_date: date | None = Query(default=None, alias="from"),
    to_date: date | None = Query(default=None, alias="to"),
    caller: AuthenticatedCaller = Depends(get_caller),
    svc: SectionService = Depends(section_service),
) -> RevenueReport:
    return await svc.report_revenue(caller, section_id, from_date=from_date, to_date=to_date)
