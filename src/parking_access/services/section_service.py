"""
parking_access.services.section_service

Resource access service for parking sections.

Responsibilities:
- Authorize every call against the role policy before touching cache or store.
- Serve list/by-id reads through the cache-aside accessor.
- Create, update and delete sections; expose reserved slots and revenue reports.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from parking_access.auth.models import AuthenticatedCaller
from parking_access.auth.policy import Action, Allow, AllowScopedTo, Resource, enforce, in_scope
from parking_access.cache.accessor import CacheAside
from parking_access.cache.keys import Selector, build_key
from parking_access.db.errors import unit_of_work
from parking_access.db.models import Section
from parking_access.db.repositories.sections import SectionRepo
from parking_access.errors import AccessDenied, AlreadyExists, NotFound, ValidationFailed
from parking_access.observability.logging import get_logger
from parking_access.services.schemas import ReservedSlotOut, RevenueReport, SectionOut, dump
from parking_access.services.vehicle_service import check_pagination
from parking_access.settings import Settings

log = get_logger(__name__)


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Section name must not be empty")
    if len(name) > 64:
        raise ValidationFailed("Section name must be at most 64 characters")
    return name


def _check_capacity(capacity: int) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise ValidationFailed("Capacity must be a positive integer")
    return capacity


def _check_privileged(privileged_to: list[Any]) -> list[Any]:
    for item in privileged_to:
        if isinstance(item, bool) or not isinstance(item, int | str):
            raise ValidationFailed("privileged_to items must be caller ids or role names")
    return list(privileged_to)


class SectionService:
    def __init__(self, *, session: AsyncSession, cache: CacheAside, settings: Settings) -> None:
        self._session = session
        self._cache = cache
        self._settings = settings
        self._sections = SectionRepo(session)

    async def list_sections(
        self,
        caller: AuthenticatedCaller,
        *,
        page: int | None = None,
        limit: int | None = None,
        bypass: bool = False,
    ) -> list[dict[str, Any]]:
        decision = enforce(caller, Resource.section, Action.read)
        check_pagination(page, limit, max_page_size=self._settings.max_page_size)

        key = build_key(
            Resource.section,
            Selector.for_list(decision=decision, caller=caller, page=page, limit=limit),
        )
        scope = decision.filter if isinstance(decision, AllowScopedTo) else {}

        async def load() -> list[dict[str, Any]]:
            sections = await self._sections.list(
                privileged_caller=scope.get("privileged_caller"),
                privileged_role=scope.get("privileged_role"),
                page=page,
                limit=limit,
            )
            return [dump(SectionOut, s) for s in sections]

        return await self._cache.read_through(key, load, bypass=bypass)

    async def get_section(
        self,
        caller: AuthenticatedCaller,
        section_id: int,
        *,
        bypass: bool = False,
    ) -> dict[str, Any]:
        decision = enforce(caller, Resource.section, Action.read)
        selector = Selector.for_id(decision=decision, caller=caller, id=section_id)
        key = build_key(Resource.section, selector)

        async def load() -> dict[str, Any]:
            return dump(SectionOut, await self._authorized_section(decision, section_id))

        return await self._cache.read_through(key, load, bypass=bypass)

    async def list_reserved_slots(
        self, caller: AuthenticatedCaller, section_id: int
    ) -> list[dict[str, Any]]:
        decision = enforce(caller, Resource.section, Action.read)
        await self._authorized_section(decision, section_id)
        slots = await self._sections.list_reserved_slots(section_id)
        return [dump(ReservedSlotOut, s) for s in slots]

    async def _authorized_section(
        self, decision: Allow | AllowScopedTo, section_id: int
    ) -> Section:
        section = await self._sections.get(section_id)
        if section is None:
            if isinstance(decision, AllowScopedTo):
                raise AccessDenied("Not allowed to view this section")
            raise NotFound(f"Section {section_id} not found")
        if not in_scope(decision, {"privileged_to": section.privileged_to}):
            raise AccessDenied("Not allowed to view this section")
        return section

    async def create_section(
        self,
        caller: AuthenticatedCaller,
        *,
        name: str,
        capacity: int,
        privileged_to: list[Any] | None = None,
    ) -> dict[str, Any]:
        enforce(caller, Resource.section, Action.create)
        name = _clean_name(name)
        capacity = _check_capacity(capacity)
        privileged = _check_privileged(privileged_to or [])

        async with unit_of_work(self._session, conflict=f"Section name {name!r} already exists"):
            if await self._sections.get_by_name(name) is not None:
                raise AlreadyExists(f"Section name {name!r} already exists")
            section = await self._sections.create(
                name=name, capacity=capacity, privileged_to=privileged
            )
            data = dump(SectionOut, section)

        log.info("section.created", section_id=data["id"], caller_id=caller.id, role=caller.role)
        return data

    async def update_section(
        self,
        caller: AuthenticatedCaller,
        section_id: int,
        *,
        name: str | None = None,
        capacity: int | None = None,
        privileged_to: list[Any] | None = None,
    ) -> dict[str, Any]:
        enforce(caller, Resource.section, Action.update)
        name = _clean_name(name) if name is not None else None
        capacity = _check_capacity(capacity) if capacity is not None else None
        privileged = _check_privileged(privileged_to) if privileged_to is not None else None

        conflict = f"Section name {name!r} already exists"
        async with unit_of_work(self._session, conflict=conflict):
            section = await self._sections.get(section_id)
            if section is None:
                raise NotFound(f"Section {section_id} not found")
            if name is not None and name != section.name:
                if await self._sections.get_by_name(name) is not None:
                    raise AlreadyExists(conflict)
            await self._sections.update(
                section, name=name, capacity=capacity, privileged_to=privileged
            )
            data = dump(SectionOut, section)

        log.info("section.updated", section_id=section_id, caller_id=caller.id, role=caller.role)
        return data

    async def delete_section(self, caller: AuthenticatedCaller, section_id: int) -> dict[str, Any]:
        enforce(caller, Resource.section, Action.delete)

        async with unit_of_work(self._session, conflict="Section is still referenced"):
            section = await self._sections.get(section_id)
            if section is None:
                raise NotFound(f"Section {section_id} not found")
            data = dump(SectionOut, section)
            await self._sections.delete(section)

        log.info("section.deleted", section_id=section_id, caller_id=caller.id, role=caller.role)
        return data

    async def report_revenue(
        self,
        caller: AuthenticatedCaller,
        section_id: int,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> RevenueReport:
        """
        Revenue of a section over an inclusive date range.

        Either bound may be omitted. `to_date` covers the whole day, so a report
        for 2024-01-01..2024-01-01 includes every ticket checked out that day.
        """

        enforce(caller, Resource.section, Action.report)
        if from_date is not None and to_date is not None and from_date > to_date:
            raise ValidationFailed("'from' must not be after 'to'")

        section = await self._sections.get(section_id)
        if section is None:
            raise NotFound(f"Section {section_id} not found")

        start = end = None
        if from_date is not None:
            start = datetime.combine(from_date, time.min)
        if to_date is not None:
            end = datetime.combine(to_date + timedelta(days=1), time.min)
        tickets, revenue = await self._sections.revenue(section_id, start=start, end=end)
        return RevenueReport(
            section_id=section_id,
            from_date=from_date,
            to_date=to_date,
            tickets=tickets,
            revenue=revenue,
        )


# --- Module Notes -----------------------------------------------------------
# Reserved slots and reports are never cached: they are derived views over data
# written outside this service.
