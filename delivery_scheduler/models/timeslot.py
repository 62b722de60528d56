"""Timeslot template and weekday assignment ORM models."""

from datetime import datetime, time, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from delivery_scheduler.db.base import Base


class GlobalTimeslot(Base):
    """Reusable standard/collection window, bound to weekdays by assignments."""

    __tablename__ = "global_timeslots"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    max_slots: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    delivery_type: Mapped[str] = mapped_column(String(32), nullable=False, default="standard")
    cutoff_time: Mapped[time] = mapped_column(Time, nullable=False)
    cutoff_type: Mapped[str] = mapped_column(String(16), nullable=False, default="same-day")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class ExpressTimeslot(Base):
    """Fee-bearing express window with a minutes-before-start cutoff."""

    __tablename__ = "express_timeslots"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    max_slots: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    cutoff_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    day_of_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class DayTimeslotAssignment(Base):
    """Binds a global timeslot to a weekday (0 = Sunday)."""

    __tablename__ = "day_timeslot_assignments"
    __table_args__ = (Index("ix_day_timeslot_assignments_day", "day_of_week"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    global_timeslot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ExpressTimeslotAssignment(Base):
    """Binds an express timeslot to a weekday (0 = Sunday)."""

    __tablename__ = "express_timeslot_assignments"
    __table_args__ = (Index("ix_express_timeslot_assignments_day", "day_of_week"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    express_timeslot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
