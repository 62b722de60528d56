"""Booked-count storage for per-date timeslot quotas."""

from __future__ import annotations

import logging
import threading
from datetime import date
from enum import Enum
from typing import NamedTuple, Protocol

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from delivery_scheduler.models.booking import SlotBooking

logger = logging.getLogger(__name__)


class SlotKind(str, Enum):
    GLOBAL = "global"
    EXPRESS = "express"


class SlotKey(NamedTuple):
    """Global and express timeslots have independent id sequences."""

    kind: SlotKind
    timeslot_id: int


class BookingCounter(Protocol):
    def get_booked(self, delivery_date: date, slot: SlotKey) -> int: ...

    def try_reserve(self, delivery_date: date, slot: SlotKey, capacity: int) -> bool:
        """Increment the booked count only while it is below capacity."""
        ...


class InMemoryBookingCounter:
    """Process-local counter, used by tests and single-process deployments."""

    def __init__(self, booked: dict[tuple[date, SlotKey], int] | None = None) -> None:
        self._booked: dict[tuple[date, SlotKey], int] = dict(booked or {})
        self._lock = threading.Lock()

    def get_booked(self, delivery_date: date, slot: SlotKey) -> int:
        with self._lock:
            return self._booked.get((delivery_date, slot), 0)

    def try_reserve(self, delivery_date: date, slot: SlotKey, capacity: int) -> bool:
        with self._lock:
            booked: int = self._booked.get((delivery_date, slot), 0)
            if booked >= capacity:
                return False
            self._booked[(delivery_date, slot)] = booked + 1
            return True


class SqlBookingCounter:
    """Counter stored in ``slot_bookings`` with a conditional UPDATE per reserve."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_booked(self, delivery_date: date, slot: SlotKey) -> int:
        row: SlotBooking | None = self._get_row(delivery_date, slot)
        return row.booked_count if row is not None else 0

    def try_reserve(self, delivery_date: date, slot: SlotKey, capacity: int) -> bool:
        if capacity <= 0:
            return False
        self._ensure_row(delivery_date, slot)
        result = self.db.execute(
            update(SlotBooking)
            .where(
                SlotBooking.delivery_date == delivery_date,
                SlotBooking.slot_kind == slot.kind.value,
                SlotBooking.timeslot_id == slot.timeslot_id,
                SlotBooking.booked_count < capacity,
            )
            .values(booked_count=SlotBooking.booked_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        reserved: bool = result.rowcount == 1
        if not reserved:
            logger.info("Reserve rejected for %s %s on %s: capacity %s reached", slot.kind.value, slot.timeslot_id, delivery_date, capacity)
        return reserved

    def _get_row(self, delivery_date: date, slot: SlotKey) -> SlotBooking | None:
        return (
            self.db.query(SlotBooking)
            .filter(
                SlotBooking.delivery_date == delivery_date,
                SlotBooking.slot_kind == slot.kind.value,
                SlotBooking.timeslot_id == slot.timeslot_id,
            )
            .first()
        )

    def _ensure_row(self, delivery_date: date, slot: SlotKey) -> None:
        if self._get_row(delivery_date, slot) is not None:
            return
        self.db.add(
            SlotBooking(
                delivery_date=delivery_date,
                slot_kind=slot.kind.value,
                timeslot_id=slot.timeslot_id,
                booked_count=0,
            )
        )
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created the row first.
            self.db.rollback()
