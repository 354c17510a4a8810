"""
parking_access.db.repositories.sections

Repository for `Section` entities and their derived views.

Responsibilities:
- CRUD for sections.
- Read-only access to reserved slots.
- Revenue aggregation over checked-out parking tickets.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parking_access.db.errors import page_window, translate_store_errors
from parking_access.db.models import ParkingTicket, ReservedSlot, Section


class SectionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str, capacity: int, privileged_to: list[Any]) -> Section:
        section = Section(name=name, capacity=capacity, privileged_to=privileged_to)
        with translate_store_errors():
            self._session.add(section)
            await self._session.flush()
            await self._session.refresh(section, attribute_names=["reserved_slots"])
        return section

    async def get(self, section_id: int) -> Section | None:
        with translate_store_errors():
            return await self._session.get(Section, section_id)

    async def get_by_name(self, name: str) -> Section | None:
        stmt = select(Section).where(Section.name == name)
        with translate_store_errors():
            return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list(
        self,
        *,
        privileged_caller: int | None = None,
        privileged_role: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Section]:
        with translate_store_errors():
            result = await self._session.execute(select(Section).order_by(Section.id))
            sections = list(result.scalars().all())

        # JSON membership is not portable across backends; the privilege filter runs here.
        if privileged_caller is not None or privileged_role is not None:
            sections = [
                s
                for s in sections
                if privileged_caller in (s.privileged_to or [])
                or privileged_role in (s.privileged_to or [])
            ]
        offset, limit = page_window(page, limit)
        return sections[offset : None if limit is None else offset + limit]

    async def update(
        self,
        section: Section,
        *,
        name: str | None = None,
        capacity: int | None = None,
        privileged_to: list[Any] | None = None,
    ) -> Section:
        if name is not None:
            section.name = name
        if capacity is not None:
            section.capacity = capacity
        if privileged_to is not None:
            section.privileged_to = privileged_to
        with translate_store_errors():
            await self._session.flush()
        return section

    async def delete(self, section: Section) -> None:
        with translate_store_errors():
            await self._session.delete(section)
            await self._session.flush()

    async def list_reserved_slots(self, section_id: int) -> list[ReservedSlot]:
        stmt = (
            select(ReservedSlot)
            .where(ReservedSlot.section_id == section_id)
            .order_by(ReservedSlot.slot_number)
        )
        with translate_store_errors():
            return list((await self._session.execute(stmt)).scalars().all())

    async def revenue(
        self,
        section_id: int,
        *,
        start: datetime | None,
        end: datetime | None,
    ) -> tuple[int, Decimal]:
        """
        Count and fee total of tickets checked out in `[start, end)`.
        Open tickets (not checked out) never count.
        """

        totals = select(
            func.count(ParkingTicket.id), func.coalesce(func.sum(ParkingTicket.fee), 0)
        )
        stmt = totals.where(
            ParkingTicket.section_id == section_id,
            ParkingTicket.checked_out_at.is_not(None),
        )
        if start is not None:
            stmt = stmt.where(ParkingTicket.checked_out_at >= start)
        if end is not None:
            stmt = stmt.where(ParkingTicket.checked_out_at < end)
        with translate_store_errors():
            count, total = (await self._session.execute(stmt)).one()
        return int(count), Decimal(str(total))


# --- Module Notes -----------------------------------------------------------
# Reserved slots and tickets are written by other parts of the parking system; this
# repository never mutates them directly.
