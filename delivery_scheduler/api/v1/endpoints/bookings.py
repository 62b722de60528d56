"""Timeslot reservation endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends, status

from delivery_scheduler.api.v1.deps import get_booking_counter, get_calendar, get_now
from delivery_scheduler.schemas.availability import BookingRequest, BookingResponse, TimeslotRead
from delivery_scheduler.services.booking_counter import SqlBookingCounter
from delivery_scheduler.services.booking_service import reserve_timeslot
from delivery_scheduler.services.calendar_service import CalendarAvailabilityFacade

router = APIRouter()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingRequest,
    calendar: CalendarAvailabilityFacade = Depends(get_calendar),
    counter: SqlBookingCounter = Depends(get_booking_counter),
    now: datetime = Depends(get_now),
) -> BookingResponse:
    reserved = reserve_timeslot(
        calendar,
        counter,
        payload.date,
        payload.delivery_type,
        payload.timeslot_id,
        now,
        product_name=payload.product_name,
        collection_name=payload.collection_name,
    )
    return BookingResponse(date=payload.date, timeslot=TimeslotRead.from_open_slot(reserved))
