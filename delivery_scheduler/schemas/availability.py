"""Availability and booking API schemas."""

from datetime import date as dt_date, datetime
from decimal import Decimal

from pydantic import Field

from delivery_scheduler.schemas.postal_code import CamelModel
from delivery_scheduler.schemas.rules import DeliveryArea, DeliveryType
from delivery_scheduler.services.booking_counter import SlotKind
from delivery_scheduler.services.timeslot_service import OpenTimeslot
from delivery_scheduler.utils.time import format_hhmm


class AvailabilityRequest(CamelModel):
    """Single-date availability query."""

    date: dt_date
    delivery_area_id: int | None = None
    delivery_type: DeliveryType = DeliveryType.STANDARD
    product_name: str | None = None
    collection_name: str | None = None
    postal_code: str | None = None
    shop_domain: str | None = None


class TimeslotRead(CamelModel):
    id: int
    name: str
    kind: SlotKind
    start: str
    end: str
    available_slots: int
    cutoff_time: datetime
    fee: Decimal

    @classmethod
    def from_open_slot(cls, item: OpenTimeslot) -> "TimeslotRead":
        return cls(
            id=item.slot.timeslot_id,
            name=item.slot.name,
            kind=item.slot.kind,
            start=format_hhmm(item.slot.start_time),
            end=format_hhmm(item.slot.end_time),
            available_slots=item.remaining,
            cutoff_time=item.cutoff_at,
            fee=item.slot.fee,
        )


class BlockingReasonRead(CamelModel):
    code: str
    message: str


class AvailabilityResponse(CamelModel):
    date: dt_date
    available: bool
    reason: BlockingReasonRead | None = None
    delivery_area: DeliveryArea | None = None
    available_timeslots: list[TimeslotRead] = []


class DateRangeRequest(CamelModel):
    start_date: dt_date
    end_date: dt_date
    delivery_type: DeliveryType = DeliveryType.STANDARD
    product_name: str | None = None
    collection_name: str | None = None
    shop_domain: str | None = None


class DateRangeResponse(CamelModel):
    dates: list[dt_date]


class BookingRequest(CamelModel):
    """Reserve one unit of a timeslot quota for a date."""

    date: dt_date
    delivery_type: DeliveryType = DeliveryType.STANDARD
    timeslot_id: int = Field(ge=1)
    product_name: str | None = None
    collection_name: str | None = None


class BookingResponse(CamelModel):
    date: dt_date
    timeslot: TimeslotRead
