"""Timeslot reservation on top of the availability calendar."""

from __future__ import annotations

import logging
from datetime import date, datetime

from delivery_scheduler.schemas.rules import DeliveryType
from delivery_scheduler.services.booking_counter import BookingCounter
from delivery_scheduler.services.calendar_service import CalendarAvailabilityFacade, DateAvailability
from delivery_scheduler.services.errors import QuotaRaceError, SlotUnavailableError
from delivery_scheduler.services.timeslot_service import OpenTimeslot

logger = logging.getLogger(__name__)


def reserve_timeslot(
    calendar: CalendarAvailabilityFacade,
    counter: BookingCounter,
    delivery_date: date,
    delivery_type: DeliveryType,
    timeslot_id: int,
    now: datetime,
    product_name: str | None = None,
    collection_name: str | None = None,
) -> OpenTimeslot:
    """Re-check the slot for the date and take one unit of its quota.

    Raises ``SlotUnavailableError`` when the slot is not offered and
    ``QuotaRaceError`` when it filled up after the availability read.
    """
    availability: DateAvailability = calendar.check_date(
        delivery_date,
        delivery_type,
        product_name=product_name,
        collection_name=collection_name,
        now=now,
    )
    if not availability.available:
        message: str = availability.reason.message if availability.reason else "Date is not available"
        raise SlotUnavailableError(message)

    offered: OpenTimeslot | None = next(
        (item for item in availability.timeslots if item.slot.timeslot_id == timeslot_id),
        None,
    )
    if offered is None:
        raise SlotUnavailableError(f"Timeslot {timeslot_id} is not available on {delivery_date.isoformat()}")

    if not counter.try_reserve(delivery_date, offered.slot.key, offered.slot.max_slots):
        logger.warning(
            "Lost reservation race for %s timeslot %s on %s",
            offered.slot.kind.value,
            timeslot_id,
            delivery_date,
        )
        raise QuotaRaceError()

    logger.info("Reserved %s timeslot %s on %s", offered.slot.kind.value, timeslot_id, delivery_date)
    return OpenTimeslot(slot=offered.slot, remaining=offered.remaining - 1, cutoff_at=offered.cutoff_at)
