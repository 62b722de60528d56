"""Request-scoped dependencies for the scheduling endpoints."""

from datetime import datetime

from fastapi import Depends
from sqlalchemy.orm import Session

from delivery_scheduler.db.session import get_db
from delivery_scheduler.services.booking_counter import SqlBookingCounter
from delivery_scheduler.services.calendar_service import CalendarAvailabilityFacade, build_calendar
from delivery_scheduler.services.rule_store import RuleSet, SqlRuleStore
from delivery_scheduler.utils.time import current_local_datetime


def get_now() -> datetime:
    return current_local_datetime()


def get_ruleset(db: Session = Depends(get_db)) -> RuleSet:
    """Load one rule snapshot per request."""
    return SqlRuleStore(db).load()


def get_booking_counter(db: Session = Depends(get_db)) -> SqlBookingCounter:
    return SqlBookingCounter(db)


def get_calendar(
    ruleset: RuleSet = Depends(get_ruleset),
    counter: SqlBookingCounter = Depends(get_booking_counter),
) -> CalendarAvailabilityFacade:
    return build_calendar(ruleset, counter)
