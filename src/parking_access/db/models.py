"""
parking_access.db.models

Persistence schema for the parking access service.

Responsibilities:
- Define ORM models:
  - Residence: a unit vehicles can belong to
  - Vehicle: registered vehicle, unique plate
  - Section: parking section, unique name, capacity and privilege list
  - ReservedSlot: per-section reservations (read-only through this service)
  - ParkingTicket: check-in/check-out records used for revenue reports
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parking_access.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity.
    return datetime.utcnow()


class Residence(Base):
    __tablename__ = "residences"

    id: Mapped[int] = mapped_column(primary_key=True)
    unit: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    vehicles: Mapped[list[Vehicle]] = relationship(back_populates="residence")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(primary_key=True)
    plate: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="CAR")
    residence_id: Mapped[int | None] = mapped_column(
        ForeignKey("residences.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    residence: Mapped[Residence | None] = relationship(back_populates="vehicles", lazy="joined")


class Section(Base):
    __tablename__ = "sections"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    capacity: Mapped[int] = mapped_column(nullable=False)
    # Caller ids (int) and/or role names (str) allowed into this section.
    privileged_to: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    reserved_slots: Mapped[list[ReservedSlot]] = relationship(
        back_populates="section",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ReservedSlot.slot_number",
    )


class ReservedSlot(Base):
    __tablename__ = "reserved_slots"

    id: Mapped[int] = mapped_column(primary_key=True)
    section_id: Mapped[int] = mapped_column(
        ForeignKey("sections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slot_number: Mapped[int] = mapped_column(nullable=False)
    vehicle_id: Mapped[int | None] = mapped_column(
        ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True
    )
    reserved_for: Mapped[int | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    section: Mapped[Section] = relationship(back_populates="reserved_slots")

    __table_args__ = (
        Index("ux_reserved_slots_section_slot", "section_id", "slot_number", unique=True),
    )


class ParkingTicket(Base):
    __tablename__ = "parking_tickets"

    id: Mapped[int] = mapped_column(primary_key=True)
    section_id: Mapped[int] = mapped_column(
        ForeignKey("sections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vehicle_id: Mapped[int | None] = mapped_column(
        ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True
    )
    checked_in_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    checked_out_at: Mapped[datetime | None] = mapped_column(nullable=True)
    fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    __table_args__ = (Index("ix_tickets_section_checkout", "section_id", "checked_out_at"),)


# --- Module Notes -----------------------------------------------------------
# Uniqueness of plate and section name is enforced here as well as by the services'
# pre-checks; the constraint is what holds under concurrent inserts.
