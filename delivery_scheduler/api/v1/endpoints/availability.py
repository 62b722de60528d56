"""Delivery date and timeslot availability endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends

from delivery_scheduler.api.v1.deps import get_calendar, get_now, get_ruleset
from delivery_scheduler.schemas.availability import (
    AvailabilityRequest,
    AvailabilityResponse,
    BlockingReasonRead,
    DateRangeRequest,
    DateRangeResponse,
    TimeslotRead,
)
from delivery_scheduler.schemas.rules import DeliveryArea, DeliveryType
from delivery_scheduler.services.calendar_service import BlockingReasonCode, CalendarAvailabilityFacade
from delivery_scheduler.services.errors import NotFoundError, ValidationError
from delivery_scheduler.services.postal_code_service import PostalCodeResolver
from delivery_scheduler.services.rule_store import RuleSet

router = APIRouter()


def _outside_area(payload: AvailabilityRequest, message: str) -> AvailabilityResponse:
    return AvailabilityResponse(
        date=payload.date,
        available=False,
        reason=BlockingReasonRead(code=BlockingReasonCode.OUTSIDE_DELIVERY_AREA.value, message=message),
    )


@router.post("", response_model=AvailabilityResponse)
def check_availability(
    payload: AvailabilityRequest,
    ruleset: RuleSet = Depends(get_ruleset),
    calendar: CalendarAvailabilityFacade = Depends(get_calendar),
    now: datetime = Depends(get_now),
) -> AvailabilityResponse:
    resolver = PostalCodeResolver(ruleset.delivery_areas, ruleset.postal_districts)
    area: DeliveryArea | None = None
    if payload.delivery_area_id is not None:
        area = resolver.get_area(payload.delivery_area_id)
        if area is None:
            raise NotFoundError("Delivery area not found")

    # Collection orders are picked up, so the customer's postal code is not checked.
    if payload.postal_code and payload.delivery_type is not DeliveryType.COLLECTION:
        validation = resolver.validate(payload.postal_code)
        if validation.format_error:
            raise ValidationError(validation.error or "Invalid postal code format", field="postalCode")
        if not validation.is_valid or validation.delivery_area is None:
            return _outside_area(payload, validation.error or "Postal code is not served")
        if area is not None and validation.delivery_area.id != area.id:
            return _outside_area(payload, f"Postal code {validation.postal_code} is outside {area.name}")
        area = validation.delivery_area

    result = calendar.check_date(
        payload.date,
        payload.delivery_type,
        product_name=payload.product_name,
        collection_name=payload.collection_name,
        now=now,
    )
    return AvailabilityResponse(
        date=result.date,
        available=result.available,
        reason=BlockingReasonRead(code=result.reason.code.value, message=result.reason.message) if result.reason else None,
        delivery_area=area,
        available_timeslots=[TimeslotRead.from_open_slot(item) for item in result.timeslots],
    )


@router.post("/dates", response_model=DateRangeResponse)
def list_available_dates(
    payload: DateRangeRequest,
    calendar: CalendarAvailabilityFacade = Depends(get_calendar),
    now: datetime = Depends(get_now),
) -> DateRangeResponse:
    dates = calendar.get_available_dates_in_range(
        payload.start_date,
        payload.end_date,
        payload.delivery_type,
        product_name=payload.product_name,
        collection_name=payload.collection_name,
        now=now,
    )
    return DateRangeResponse(dates=dates)
