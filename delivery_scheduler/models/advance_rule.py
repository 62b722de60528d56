"""Advance-order rule ORM models."""

from datetime import date

from sqlalchemy import Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from delivery_scheduler.db.base import Base


class GlobalAdvanceOrderRule(Base):
    """Minimum lead time in days for a class of delivery types."""

    __tablename__ = "global_advance_order_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    global_advance_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_to: Mapped[str] = mapped_column(String(32), nullable=False, default="all")


class ProductAdvanceOrderRule(Base):
    """Ordering and delivery window for one product or collection."""

    __tablename__ = "product_advance_order_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    product_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    collection_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rule_type: Mapped[str] = mapped_column(String(32), nullable=False, default="product")
    lead_time_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    order_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    delivery_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    delivery_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
