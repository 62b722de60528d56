"""Schema exports."""

from delivery_scheduler.schemas.availability import (
    AvailabilityRequest,
    AvailabilityResponse,
    BookingRequest,
    BookingResponse,
    DateRangeRequest,
    DateRangeResponse,
    TimeslotRead,
)
from delivery_scheduler.schemas.location import LocationCreate, LocationRead, LocationUpdate
from delivery_scheduler.schemas.postal_code import (
    AutocompleteRequest,
    AutocompleteResponse,
    PostalCodeValidateRequest,
    PostalCodeValidateResponse,
)
from delivery_scheduler.schemas.rules import RulesSnapshot

__all__ = [
    "AvailabilityRequest",
    "AvailabilityResponse",
    "BookingRequest",
    "BookingResponse",
    "DateRangeRequest",
    "DateRangeResponse",
    "TimeslotRead",
    "LocationCreate",
    "LocationRead",
    "LocationUpdate",
    "AutocompleteRequest",
    "AutocompleteResponse",
    "PostalCodeValidateRequest",
    "PostalCodeValidateResponse",
    "RulesSnapshot",
]
