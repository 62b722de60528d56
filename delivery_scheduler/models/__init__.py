"""Application models package."""

from delivery_scheduler.models.advance_rule import GlobalAdvanceOrderRule, ProductAdvanceOrderRule
from delivery_scheduler.models.blocking import BlockedDate, BlockedTimeslot
from delivery_scheduler.models.booking import SlotBooking
from delivery_scheduler.models.delivery_area import DeliveryArea, PostalDistrict
from delivery_scheduler.models.location import Location
from delivery_scheduler.models.timeslot import (
    DayTimeslotAssignment,
    ExpressTimeslot,
    ExpressTimeslotAssignment,
    GlobalTimeslot,
)

__all__ = [
    "DeliveryArea", "PostalDistrict", "GlobalTimeslot", "ExpressTimeslot", "DayTimeslotAssignment",
    "ExpressTimeslotAssignment", "BlockedDate", "BlockedTimeslot", "GlobalAdvanceOrderRule",
    "ProductAdvanceOrderRule", "Location", "SlotBooking",
]
