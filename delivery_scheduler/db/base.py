"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from delivery_scheduler.models import advance_rule as _advance_rule  # noqa: E402,F401
from delivery_scheduler.models import blocking as _blocking  # noqa: E402,F401
from delivery_scheduler.models import booking as _booking  # noqa: E402,F401
from delivery_scheduler.models import delivery_area as _delivery_area  # noqa: E402,F401
from delivery_scheduler.models import location as _location  # noqa: E402,F401
from delivery_scheduler.models import timeslot as _timeslot  # noqa: E402,F401
