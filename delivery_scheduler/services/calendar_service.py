"""Per-date availability combining advance-order rules and timeslots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from delivery_scheduler.core.config import settings
from delivery_scheduler.schemas.rules import DeliveryType
from delivery_scheduler.services.advance_order_service import (
    AdvanceOrderDecision,
    AdvanceOrderEvaluator,
    AdvanceRuleTieBreak,
)
from delivery_scheduler.services.booking_counter import BookingCounter
from delivery_scheduler.services.errors import ValidationError
from delivery_scheduler.services.rule_store import RuleSet
from delivery_scheduler.services.timeslot_service import (
    DayTimeslotReport,
    OpenTimeslot,
    TimeslotAvailabilityEngine,
)
from delivery_scheduler.utils.time import current_local_datetime, iter_dates

logger = logging.getLogger(__name__)


class BlockingReasonCode(str, Enum):
    ADVANCE_ORDER = "advance_order"
    BLOCKED_DATE = "blocked_date"
    NO_TIMESLOTS = "no_timeslots"
    CUTOFF_PASSED = "cutoff_passed"
    FULLY_BOOKED = "fully_booked"
    OUTSIDE_DELIVERY_AREA = "outside_delivery_area"


@dataclass(frozen=True)
class BlockingReason:
    code: BlockingReasonCode
    message: str


@dataclass(frozen=True)
class DateAvailability:
    date: date
    available: bool
    reason: BlockingReason | None = None
    timeslots: list[OpenTimeslot] = field(default_factory=list)


def _timeslot_blocking_reason(report: DayTimeslotReport) -> BlockingReason:
    if report.blocked_date is not None:
        title: str = report.blocked_date.title
        message: str = f"Date is blocked: {title}" if title else "Date is blocked"
        return BlockingReason(BlockingReasonCode.BLOCKED_DATE, message)
    if report.quota_excluded > 0:
        return BlockingReason(BlockingReasonCode.FULLY_BOOKED, "All timeslots are fully booked")
    if report.cutoff_excluded > 0:
        return BlockingReason(BlockingReasonCode.CUTOFF_PASSED, "Order cutoff has passed for all timeslots")
    return BlockingReason(BlockingReasonCode.NO_TIMESLOTS, "No timeslots available for this date")


class CalendarAvailabilityFacade:
    """Answers "can this date be ordered" for one rule snapshot."""

    def __init__(self, evaluator: AdvanceOrderEvaluator, engine: TimeslotAvailabilityEngine) -> None:
        self.evaluator = evaluator
        self.engine = engine

    def check_date(
        self,
        delivery_date: date,
        delivery_type: DeliveryType,
        product_name: str | None = None,
        collection_name: str | None = None,
        now: datetime | None = None,
    ) -> DateAvailability:
        """Evaluate one date: advance-order rules first, then open timeslots."""
        now = now or current_local_datetime()
        decision: AdvanceOrderDecision = self.evaluator.evaluate(
            delivery_date,
            delivery_type,
            product_name=product_name,
            collection_name=collection_name,
            now=now,
        )
        if not decision.available:
            return DateAvailability(
                date=delivery_date,
                available=False,
                reason=BlockingReason(BlockingReasonCode.ADVANCE_ORDER, decision.reason or "Not available for ordering"),
            )

        report: DayTimeslotReport = self.engine.evaluate_day(delivery_date, delivery_type, now)
        if not report.open_slots:
            return DateAvailability(date=delivery_date, available=False, reason=_timeslot_blocking_reason(report))
        return DateAvailability(date=delivery_date, available=True, timeslots=report.open_slots)

    def is_date_available(
        self,
        delivery_date: date,
        delivery_type: DeliveryType,
        product_name: str | None = None,
        collection_name: str | None = None,
        now: datetime | None = None,
    ) -> bool:
        return self.check_date(delivery_date, delivery_type, product_name, collection_name, now).available

    def get_date_blocking_reason(
        self,
        delivery_date: date,
        delivery_type: DeliveryType,
        product_name: str | None = None,
        collection_name: str | None = None,
        now: datetime | None = None,
    ) -> BlockingReason | None:
        return self.check_date(delivery_date, delivery_type, product_name, collection_name, now).reason

    def get_available_dates_in_range(
        self,
        start_date: date,
        end_date: date,
        delivery_type: DeliveryType,
        product_name: str | None = None,
        collection_name: str | None = None,
        now: datetime | None = None,
    ) -> list[date]:
        if start_date > end_date:
            raise ValidationError("startDate must be on or before endDate", field="startDate")
        span: int = (end_date - start_date).days + 1
        if span > settings.max_range_days:
            raise ValidationError(f"Date range cannot exceed {settings.max_range_days} days", field="endDate")

        # One clock reading for the whole range.
        now = now or current_local_datetime()
        available: list[date] = [
            current
            for current in iter_dates(start_date, end_date)
            if self.is_date_available(current, delivery_type, product_name, collection_name, now)
        ]
        logger.debug("%s of %s dates available for %s", len(available), span, delivery_type.value)
        return available


def build_calendar(
    ruleset: RuleSet,
    counter: BookingCounter,
    tie_break: AdvanceRuleTieBreak | None = None,
) -> CalendarAvailabilityFacade:
    """Wire an evaluator and timeslot engine over one rule snapshot."""
    policy: AdvanceRuleTieBreak = tie_break or AdvanceRuleTieBreak(settings.advance_rule_tie_break)
    evaluator = AdvanceOrderEvaluator(ruleset.global_advance_rules, ruleset.product_advance_rules, tie_break=policy)
    engine = TimeslotAvailabilityEngine(ruleset, counter)
    return CalendarAvailabilityFacade(evaluator, engine)
