"""Booked-count ORM model backing slot quotas."""

from datetime import date

from sqlalchemy import Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from delivery_scheduler.db.base import Base


class SlotBooking(Base):
    """Number of orders that consumed a timeslot on a delivery date."""

    __tablename__ = "slot_bookings"
    __table_args__ = (
        UniqueConstraint("delivery_date", "slot_kind", "timeslot_id", name="uq_slot_booking"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    delivery_date: Mapped[date] = mapped_column(Date, nullable=False)
    slot_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    timeslot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    booked_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
