"""Timeslot resolution, overrides, cutoff and quota tests."""

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from delivery_scheduler.schemas.rules import (
    BlockedDate,
    BlockedTimeslot,
    BlockType,
    CutoffType,
    DeliveryType,
    ExpressTimeslot,
    ExpressTimeslotAssignment,
    GlobalTimeslot,
)
from delivery_scheduler.services.booking_counter import InMemoryBookingCounter, SlotKey, SlotKind
from delivery_scheduler.services.rule_store import DEFAULT_RULESET, RuleSet
from delivery_scheduler.services.timeslot_service import TimeslotAvailabilityEngine

MONDAY = date(2026, 10, 19)
FRIDAY = date(2026, 10, 23)
SUNDAY = date(2026, 10, 25)
DAY_BEFORE = datetime(2026, 10, 18, 12, 0)


def _engine(ruleset: RuleSet = DEFAULT_RULESET, counter: InMemoryBookingCounter | None = None) -> TimeslotAvailabilityEngine:
    return TimeslotAvailabilityEngine(ruleset, counter or InMemoryBookingCounter())


def _open_ids(engine: TimeslotAvailabilityEngine, delivery_date: date, delivery_type: DeliveryType, now: datetime) -> list[int]:
    return [item.slot.timeslot_id for item in engine.get_available_timeslots(delivery_date, delivery_type, now)]


def _express_ruleset(start: time, cutoff_minutes: int) -> RuleSet:
    return replace(
        DEFAULT_RULESET,
        express_timeslots=(
            ExpressTimeslot(
                id=9,
                name="Express Test",
                start_time=start,
                end_time=time(12, 0),
                fee=Decimal("15.00"),
                max_slots=3,
                cutoff_minutes=cutoff_minutes,
            ),
        ),
        express_assignments=(ExpressTimeslotAssignment(id=1, day_of_week=1, express_timeslot_id=9),),
    )


def test_weekday_standard_slots_sorted_with_full_quota() -> None:
    """Monday standard delivery should offer the two default windows in start order."""
    slots = _engine().get_available_timeslots(MONDAY, DeliveryType.STANDARD, DAY_BEFORE)

    assert [item.slot.timeslot_id for item in slots] == [1, 2]
    assert [item.remaining for item in slots] == [10, 8]
    assert slots[0].slot.start_time == time(9, 0)


def test_collection_uses_collection_templates() -> None:
    assert _open_ids(_engine(), MONDAY, DeliveryType.COLLECTION, DAY_BEFORE) == [3]


def test_day_without_assignments_has_no_slots() -> None:
    assert _engine().get_available_timeslots(SUNDAY, DeliveryType.STANDARD, DAY_BEFORE) == []


def test_inactive_template_is_skipped() -> None:
    morning, afternoon, evening = DEFAULT_RULESET.global_timeslots
    ruleset = replace(DEFAULT_RULESET, global_timeslots=(morning.model_copy(update={"is_active": False}), afternoon, evening))

    assert _open_ids(_engine(ruleset), MONDAY, DeliveryType.STANDARD, DAY_BEFORE) == [2]


def test_same_day_cutoff_is_inclusive() -> None:
    """At the cutoff instant the slot should already be closed."""
    engine = _engine()

    assert _open_ids(engine, MONDAY, DeliveryType.STANDARD, datetime(2026, 10, 19, 7, 59)) == [1, 2]
    assert _open_ids(engine, MONDAY, DeliveryType.STANDARD, datetime(2026, 10, 19, 8, 0)) == [2]
    assert _open_ids(engine, MONDAY, DeliveryType.STANDARD, datetime(2026, 10, 19, 12, 0)) == []


def test_next_day_cutoff_uses_previous_day() -> None:
    slot = GlobalTimeslot(
        id=1,
        name="Early",
        start_time=time(8, 0),
        end_time=time(10, 0),
        max_slots=5,
        cutoff_time=time(18, 0),
        cutoff_type=CutoffType.NEXT_DAY,
    )
    ruleset = replace(DEFAULT_RULESET, global_timeslots=(slot,))
    engine = _engine(ruleset)

    assert engine.compute_cutoff(MONDAY, engine.resolve_candidate_slots(MONDAY, DeliveryType.STANDARD)[0]) == datetime(
        2026, 10, 18, 18, 0
    )
    assert _open_ids(engine, MONDAY, DeliveryType.STANDARD, datetime(2026, 10, 18, 17, 59)) == [1]
    assert _open_ids(engine, MONDAY, DeliveryType.STANDARD, datetime(2026, 10, 18, 18, 0)) == []


def test_express_cutoff_is_minutes_before_start() -> None:
    """A 10:30 express slot with a 60 minute cutoff closes at 09:30."""
    engine = _engine(_express_ruleset(time(10, 30), 60))
    candidate = engine.resolve_candidate_slots(MONDAY, DeliveryType.EXPRESS)[0]

    assert engine.compute_cutoff(MONDAY, candidate) == datetime(2026, 10, 19, 9, 30)
    assert _open_ids(engine, MONDAY, DeliveryType.EXPRESS, datetime(2026, 10, 19, 9, 15)) == [9]
    assert _open_ids(engine, MONDAY, DeliveryType.EXPRESS, datetime(2026, 10, 19, 9, 31)) == []
    assert _open_ids(engine, MONDAY, DeliveryType.EXPRESS, datetime(2026, 10, 19, 9, 45)) == []


def test_express_slots_fall_back_to_own_weekday() -> None:
    """Without assignments express slots should use their own day of week."""
    engine = _engine()

    monday = engine.get_available_timeslots(MONDAY, DeliveryType.EXPRESS, DAY_BEFORE)
    friday = engine.get_available_timeslots(FRIDAY, DeliveryType.EXPRESS, DAY_BEFORE)

    assert [item.slot.timeslot_id for item in monday] == [1, 2]
    assert all(item.slot.kind is SlotKind.EXPRESS for item in monday)
    assert monday[0].slot.fee == Decimal("15.00")
    assert [item.slot.timeslot_id for item in friday] == [3]


def test_express_assignment_replaces_own_weekday() -> None:
    ruleset = replace(
        DEFAULT_RULESET,
        express_assignments=(ExpressTimeslotAssignment(id=1, day_of_week=1, express_timeslot_id=3),),
    )
    engine = _engine(ruleset)

    assert _open_ids(engine, MONDAY, DeliveryType.EXPRESS, DAY_BEFORE) == [1, 2, 3]
    assert _open_ids(engine, FRIDAY, DeliveryType.EXPRESS, DAY_BEFORE) == []


def test_quota_override_replaces_max_for_that_date() -> None:
    """A quota override of 2 should cap the morning slot regardless of its max of 10."""
    ruleset = replace(
        DEFAULT_RULESET,
        blocked_timeslots=(
            BlockedTimeslot(
                id=1, date=MONDAY, global_timeslot_id=1, block_type=BlockType.QUOTA_OVERRIDE, custom_quota=2
            ),
        ),
    )
    counter = InMemoryBookingCounter()
    engine = _engine(ruleset, counter)
    morning = SlotKey(SlotKind.GLOBAL, 1)

    assert engine.get_available_timeslots(MONDAY, DeliveryType.STANDARD, DAY_BEFORE)[0].remaining == 2
    assert counter.try_reserve(MONDAY, morning, 2)
    assert engine.get_available_timeslots(MONDAY, DeliveryType.STANDARD, DAY_BEFORE)[0].remaining == 1
    assert counter.try_reserve(MONDAY, morning, 2)
    assert _open_ids(engine, MONDAY, DeliveryType.STANDARD, DAY_BEFORE) == [2]

    next_monday = MONDAY + timedelta(days=7)
    assert engine.get_available_timeslots(next_monday, DeliveryType.STANDARD, DAY_BEFORE)[0].remaining == 10


def test_lowest_quota_override_wins() -> None:
    ruleset = replace(
        DEFAULT_RULESET,
        blocked_timeslots=(
            BlockedTimeslot(id=1, date=MONDAY, global_timeslot_id=1, block_type=BlockType.QUOTA_OVERRIDE, custom_quota=4),
            BlockedTimeslot(id=2, date=MONDAY, global_timeslot_id=1, block_type=BlockType.QUOTA_OVERRIDE, custom_quota=3),
        ),
    )

    assert _engine(ruleset).get_available_timeslots(MONDAY, DeliveryType.STANDARD, DAY_BEFORE)[0].remaining == 3


def test_complete_block_drops_slot() -> None:
    ruleset = replace(
        DEFAULT_RULESET,
        blocked_timeslots=(
            BlockedTimeslot(id=1, date=MONDAY, global_timeslot_id=2, block_type=BlockType.COMPLETE),
            BlockedTimeslot(id=2, date=MONDAY, global_timeslot_id=99, block_type=BlockType.COMPLETE),
        ),
    )
    report = _engine(ruleset).evaluate_day(MONDAY, DeliveryType.STANDARD, DAY_BEFORE)

    assert [item.slot.timeslot_id for item in report.open_slots] == [1]
    assert report.blocked_slot_count == 1


def test_blocked_date_dominates_everything() -> None:
    """A blocked date range should empty the day whatever quotas or overrides say."""
    ruleset = replace(
        DEFAULT_RULESET,
        blocked_dates=(
            BlockedDate(id=1, date=date(2026, 10, 18), is_range=True, end_date=date(2026, 10, 20), title="Holiday"),
        ),
        blocked_timeslots=(
            BlockedTimeslot(id=1, date=MONDAY, global_timeslot_id=1, block_type=BlockType.QUOTA_OVERRIDE, custom_quota=50),
        ),
    )
    engine = _engine(ruleset)

    for delivery_type in DeliveryType:
        assert engine.get_available_timeslots(MONDAY, delivery_type, DAY_BEFORE) == []
    assert engine.evaluate_day(MONDAY, DeliveryType.STANDARD, DAY_BEFORE).blocked_date.title == "Holiday"
    assert engine.apply_date_overrides(MONDAY, engine.resolve_candidate_slots(MONDAY, DeliveryType.STANDARD)) == []
    assert _open_ids(engine, date(2026, 10, 21), DeliveryType.STANDARD, DAY_BEFORE) == [1, 2]


def test_remaining_quota_is_never_negative() -> None:
    counter = InMemoryBookingCounter({(MONDAY, SlotKey(SlotKind.GLOBAL, 1)): 15})
    engine = _engine(counter=counter)
    morning = engine.resolve_candidate_slots(MONDAY, DeliveryType.STANDARD)[0]

    assert engine.compute_remaining_quota(MONDAY, morning) == 0
    assert _open_ids(engine, MONDAY, DeliveryType.STANDARD, DAY_BEFORE) == [2]


def test_cutoff_exclusion_is_monotone_in_time() -> None:
    """Once a slot is past its cutoff it should stay excluded for later clocks."""
    engine = _engine()
    now = datetime(2026, 10, 18, 0, 0)
    previous: set[int] = set(_open_ids(engine, MONDAY, DeliveryType.STANDARD, now))
    while now < datetime(2026, 10, 20, 0, 0):
        now += timedelta(minutes=30)
        current = set(_open_ids(engine, MONDAY, DeliveryType.STANDARD, now))
        assert current <= previous
        previous = current
    assert previous == set()


def test_evaluate_day_counts_exclusions() -> None:
    counter = InMemoryBookingCounter({(MONDAY, SlotKey(SlotKind.GLOBAL, 2)): 8})
    report = _engine(counter=counter).evaluate_day(MONDAY, DeliveryType.STANDARD, datetime(2026, 10, 19, 8, 30))

    assert report.candidate_count == 2
    assert report.cutoff_excluded == 1
    assert report.quota_excluded == 1
    assert report.open_slots == []
