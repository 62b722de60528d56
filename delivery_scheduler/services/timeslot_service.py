"""Timeslot availability for one date and delivery type.

Pipeline per call:

1. resolve candidate slots assigned to the weekday,
2. apply blocked dates (whole day) and blocked timeslots (drop / re-quota),
3. drop slots whose cutoff instant has passed,
4. drop slots without remaining quota,
5. sort by start time.

The engine reads one ``RuleSet`` snapshot and a booked-count counter. It
never mutates either.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import Decimal

from delivery_scheduler.schemas.rules import (
    BlockedDate,
    BlockedTimeslot,
    BlockType,
    CutoffType,
    DeliveryType,
    ExpressTimeslot,
    GlobalTimeslot,
)
from delivery_scheduler.services.booking_counter import BookingCounter, SlotKey, SlotKind
from delivery_scheduler.services.rule_store import RuleSet
from delivery_scheduler.utils.time import day_of_week

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateSlot:
    """A timeslot template resolved for one date.

    ``max_slots`` is the effective quota for that date, after any quota
    override. The template itself is kept untouched in ``source``.
    """

    key: SlotKey
    name: str
    start_time: time
    end_time: time
    max_slots: int
    fee: Decimal
    source: GlobalTimeslot | ExpressTimeslot

    @property
    def timeslot_id(self) -> int:
        return self.key.timeslot_id

    @property
    def kind(self) -> SlotKind:
        return self.key.kind


@dataclass(frozen=True)
class OpenTimeslot:
    slot: CandidateSlot
    remaining: int
    cutoff_at: datetime


@dataclass(frozen=True)
class DayTimeslotReport:
    """Outcome of one pass over a date, with the reason each slot dropped out."""

    delivery_date: date
    delivery_type: DeliveryType
    blocked_date: BlockedDate | None = None
    candidate_count: int = 0
    blocked_slot_count: int = 0
    cutoff_excluded: int = 0
    quota_excluded: int = 0
    open_slots: list[OpenTimeslot] = field(default_factory=list)


def _global_candidate(slot: GlobalTimeslot) -> CandidateSlot:
    return CandidateSlot(
        key=SlotKey(SlotKind.GLOBAL, slot.id),
        name=slot.name,
        start_time=slot.start_time,
        end_time=slot.end_time,
        max_slots=slot.max_slots,
        fee=Decimal("0.00"),
        source=slot,
    )


def _express_candidate(slot: ExpressTimeslot) -> CandidateSlot:
    return CandidateSlot(
        key=SlotKey(SlotKind.EXPRESS, slot.id),
        name=slot.name,
        start_time=slot.start_time,
        end_time=slot.end_time,
        max_slots=slot.max_slots,
        fee=slot.fee,
        source=slot,
    )


class TimeslotAvailabilityEngine:
    def __init__(self, ruleset: RuleSet, counter: BookingCounter) -> None:
        self.ruleset = ruleset
        self.counter = counter
        self._global_by_id: dict[int, GlobalTimeslot] = {slot.id: slot for slot in ruleset.global_timeslots}
        self._express_by_id: dict[int, ExpressTimeslot] = {slot.id: slot for slot in ruleset.express_timeslots}

    def resolve_candidate_slots(self, delivery_date: date, delivery_type: DeliveryType) -> list[CandidateSlot]:
        """Return active templates assigned to the weekday of ``delivery_date``."""
        weekday: int = day_of_week(delivery_date)
        if delivery_type is DeliveryType.EXPRESS:
            return [_express_candidate(slot) for slot in self._express_slots_for_day(weekday)]

        seen: set[int] = set()
        candidates: list[CandidateSlot] = []
        for assignment in self.ruleset.day_assignments:
            if not assignment.is_active or assignment.day_of_week != weekday:
                continue
            slot: GlobalTimeslot | None = self._global_by_id.get(assignment.global_timeslot_id)
            if slot is None:
                logger.debug("Assignment %s points at unknown timeslot %s", assignment.id, assignment.global_timeslot_id)
                continue
            if not slot.is_active or slot.delivery_type is not delivery_type or slot.id in seen:
                continue
            seen.add(slot.id)
            candidates.append(_global_candidate(slot))
        return candidates

    def _express_slots_for_day(self, weekday: int) -> list[ExpressTimeslot]:
        assigned_ids: set[int] = {assignment.express_timeslot_id for assignment in self.ruleset.express_assignments}
        selected: list[ExpressTimeslot] = []
        seen: set[int] = set()
        for assignment in self.ruleset.express_assignments:
            if not assignment.is_active or assignment.day_of_week != weekday:
                continue
            slot: ExpressTimeslot | None = self._express_by_id.get(assignment.express_timeslot_id)
            if slot is None or not slot.is_active or slot.id in seen:
                continue
            seen.add(slot.id)
            selected.append(slot)
        # Slots never referenced by an assignment fall back to their own weekday.
        for slot in self.ruleset.express_timeslots:
            if slot.id in assigned_ids or slot.id in seen or not slot.is_active:
                continue
            if slot.day_of_week == weekday:
                seen.add(slot.id)
                selected.append(slot)
        return selected

    def find_blocked_date(self, delivery_date: date) -> BlockedDate | None:
        for blocked in self.ruleset.blocked_dates:
            if blocked.covers(delivery_date):
                return blocked
        return None

    def apply_date_overrides(self, delivery_date: date, slots: list[CandidateSlot]) -> list[CandidateSlot]:
        """Apply blocked dates and per-date timeslot blocks to candidate slots."""
        if self.find_blocked_date(delivery_date) is not None:
            return []

        overrides: dict[int, list[BlockedTimeslot]] = {}
        for blocked in self.ruleset.blocked_timeslots:
            if blocked.date == delivery_date:
                overrides.setdefault(blocked.global_timeslot_id, []).append(blocked)

        result: list[CandidateSlot] = []
        for slot in slots:
            slot_overrides: list[BlockedTimeslot] = overrides.get(slot.timeslot_id, []) if slot.kind is SlotKind.GLOBAL else []
            if any(blocked.block_type is BlockType.COMPLETE for blocked in slot_overrides):
                continue
            quotas: list[int] = [
                blocked.custom_quota
                for blocked in slot_overrides
                if blocked.block_type is BlockType.QUOTA_OVERRIDE and blocked.custom_quota is not None
            ]
            if quotas:
                slot = replace(slot, max_slots=min(quotas))
            result.append(slot)
        return result

    def compute_cutoff(self, delivery_date: date, slot: CandidateSlot, tz: tzinfo | None = None) -> datetime:
        """Return the last instant an order for ``slot`` on ``delivery_date`` is accepted."""
        source = slot.source
        if isinstance(source, ExpressTimeslot):
            start: datetime = datetime.combine(delivery_date, source.start_time, tzinfo=tz)
            return start - timedelta(minutes=source.cutoff_minutes)

        cutoff_day: date = delivery_date
        if source.cutoff_type is CutoffType.NEXT_DAY:
            cutoff_day = delivery_date - timedelta(days=1)
        return datetime.combine(cutoff_day, source.cutoff_time, tzinfo=tz)

    def is_past_cutoff(self, delivery_date: date, slot: CandidateSlot, now: datetime) -> bool:
        return now >= self.compute_cutoff(delivery_date, slot, tz=now.tzinfo)

    def compute_remaining_quota(self, delivery_date: date, slot: CandidateSlot) -> int:
        """Snapshot read of free capacity, clamped at zero."""
        booked: int = self.counter.get_booked(delivery_date, slot.key)
        return max(0, slot.max_slots - booked)

    def evaluate_day(self, delivery_date: date, delivery_type: DeliveryType, now: datetime) -> DayTimeslotReport:
        blocked_date: BlockedDate | None = self.find_blocked_date(delivery_date)
        if blocked_date is not None:
            return DayTimeslotReport(delivery_date=delivery_date, delivery_type=delivery_type, blocked_date=blocked_date)

        candidates: list[CandidateSlot] = self.resolve_candidate_slots(delivery_date, delivery_type)
        overridden: list[CandidateSlot] = self.apply_date_overrides(delivery_date, candidates)

        cutoff_excluded: int = 0
        quota_excluded: int = 0
        open_slots: list[OpenTimeslot] = []
        for slot in overridden:
            if self.is_past_cutoff(delivery_date, slot, now):
                cutoff_excluded += 1
                continue
            remaining: int = self.compute_remaining_quota(delivery_date, slot)
            if remaining <= 0:
                quota_excluded += 1
                continue
            open_slots.append(
                OpenTimeslot(
                    slot=slot,
                    remaining=remaining,
                    cutoff_at=self.compute_cutoff(delivery_date, slot, tz=now.tzinfo),
                )
            )

        open_slots.sort(key=lambda item: (item.slot.start_time, item.slot.end_time, item.slot.timeslot_id))
        return DayTimeslotReport(
            delivery_date=delivery_date,
            delivery_type=delivery_type,
            candidate_count=len(candidates),
            blocked_slot_count=len(candidates) - len(overridden),
            cutoff_excluded=cutoff_excluded,
            quota_excluded=quota_excluded,
            open_slots=open_slots,
        )

    def get_available_timeslots(
        self,
        delivery_date: date,
        delivery_type: DeliveryType,
        now: datetime,
    ) -> list[OpenTimeslot]:
        return self.evaluate_day(delivery_date, delivery_type, now).open_slots
