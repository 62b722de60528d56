"""Blocked date and blocked timeslot ORM models."""

from datetime import date as dt_date

from sqlalchemy import Boolean, Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from delivery_scheduler.db.base import Base


class BlockedDate(Base):
    """Closes a single date or an inclusive date range for every delivery type."""

    __tablename__ = "blocked_dates"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    is_range: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    end_date: Mapped[dt_date | None] = mapped_column(Date, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")


class BlockedTimeslot(Base):
    """Removes or re-quotas one global timeslot on one date."""

    __tablename__ = "blocked_timeslots"
    __table_args__ = (Index("ix_blocked_timeslots_date", "date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    global_timeslot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    block_type: Mapped[str] = mapped_column(String(32), nullable=False)
    custom_quota: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
