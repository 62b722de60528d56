"""Delivery area ORM models."""

from decimal import Decimal

from sqlalchemy import JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from delivery_scheduler.db.base import Base


class DeliveryArea(Base):
    """Delivery zone served by the shop, keyed by 2-digit postal prefixes."""

    __tablename__ = "delivery_areas"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    postal_code_prefixes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    delivery_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    minimum_order: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    estimated_delivery_time: Mapped[str] = mapped_column(String(64), nullable=False, default="")


class PostalDistrict(Base):
    """City/province metadata for a postal prefix."""

    __tablename__ = "postal_districts"

    prefix: Mapped[str] = mapped_column(String(2), primary_key=True)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    province: Mapped[str] = mapped_column(String(64), nullable=False, default="SG")
