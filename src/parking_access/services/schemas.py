"""
parking_access.services.schemas

Serialized shapes of resources as returned to callers and stored in the cache.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResidenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    unit: str


class VehicleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    plate: str
    type: str
    residence_id: int | None = None
    residence: ResidenceOut | None = None


class ReservedSlotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    section_id: int
    slot_number: int
    vehicle_id: int | None = None
    reserved_for: int | None = None
    created_at: datetime


class SectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    capacity: int
    privileged_to: list[int | str] = Field(default_factory=list)
    reserved_slots: list[ReservedSlotOut] = Field(default_factory=list)


class RevenueReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    section_id: int
    from_date: date | None = Field(default=None, alias="from")
    to_date: date | None = Field(default=None, alias="to")
    tickets: int
    revenue: Decimal


def dump(model: type[BaseModel], obj: Any) -> dict[str, Any]:
    # JSON-mode dump: the result is what the cache stores and what callers receive.
    return model.model_validate(obj).model_dump(mode="json")
