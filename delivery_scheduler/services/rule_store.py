"""Rule snapshots and their SQL-backed store."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from delivery_scheduler import models as orm
from delivery_scheduler.schemas.rules import (
    BlockedDate,
    BlockedTimeslot,
    CutoffType,
    DayTimeslotAssignment,
    DeliveryArea,
    DeliveryType,
    ExpressTimeslot,
    ExpressTimeslotAssignment,
    GlobalAdvanceOrderRule,
    GlobalTimeslot,
    PostalDistrict,
    ProductAdvanceOrderRule,
    RuleRecord,
)
from delivery_scheduler.services.errors import ValidationError
from delivery_scheduler.services.postal_code_service import PostalCodeResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleSet:
    """Immutable snapshot of every rule record used by one evaluation."""

    delivery_areas: tuple[DeliveryArea, ...] = ()
    postal_districts: tuple[PostalDistrict, ...] = ()
    global_timeslots: tuple[GlobalTimeslot, ...] = ()
    express_timeslots: tuple[ExpressTimeslot, ...] = ()
    day_assignments: tuple[DayTimeslotAssignment, ...] = ()
    express_assignments: tuple[ExpressTimeslotAssignment, ...] = ()
    blocked_dates: tuple[BlockedDate, ...] = ()
    blocked_timeslots: tuple[BlockedTimeslot, ...] = ()
    global_advance_rules: tuple[GlobalAdvanceOrderRule, ...] = ()
    product_advance_rules: tuple[ProductAdvanceOrderRule, ...] = ()


def _areas_from_prefix_ranges() -> tuple[DeliveryArea, ...]:
    specs: list[tuple[int, str, range, str, str, str]] = [
        (1, "Central Singapore", range(1, 9), "8.99", "30.00", "2-3 hours"),
        (2, "North Singapore", range(9, 14), "10.99", "35.00", "3-4 hours"),
        (3, "East Singapore", range(14, 19), "9.99", "30.00", "2-3 hours"),
        (4, "West Singapore", range(19, 24), "11.99", "40.00", "3-4 hours"),
        (5, "South Singapore", range(24, 29), "12.99", "45.00", "3-4 hours"),
    ]
    return tuple(
        DeliveryArea(
            id=area_id,
            name=name,
            postal_code_prefixes=frozenset(f"{number:02d}" for number in prefixes),
            delivery_fee=Decimal(fee),
            minimum_order=Decimal(minimum),
            estimated_delivery_time=eta,
        )
        for area_id, name, prefixes, fee, minimum, eta in specs
    )


_DISTRICT_CITIES: dict[str, str] = {
    "01": "Marina Bay", "02": "Tanjong Pagar", "03": "Queenstown", "04": "Telok Blangah",
    "05": "Pasir Panjang", "06": "Bukit Timah", "07": "Orchard", "08": "Museum",
    "09": "Woodlands", "10": "Sembawang", "11": "Yishun", "12": "Seletar",
    "13": "Ang Mo Kio", "14": "Eunos", "15": "Katong", "16": "Bedok",
    "17": "Changi", "18": "Tampines", "19": "Jurong", "20": "Bukit Batok",
    "21": "Choa Chu Kang", "22": "Kranji", "23": "Tengah", "24": "Sentosa",
    "25": "Keppel", "26": "Bukit Merah", "27": "Alexandra", "28": "Dover",
}

# Monday (1) to Saturday (6).
_WORKING_DAYS: range = range(1, 7)

DEFAULT_RULESET: RuleSet = RuleSet(
    delivery_areas=_areas_from_prefix_ranges(),
    postal_districts=tuple(
        PostalDistrict(prefix=prefix, city=city, province="SG") for prefix, city in _DISTRICT_CITIES.items()
    ),
    global_timeslots=(
        GlobalTimeslot(
            id=1, name="Morning Delivery", start_time=time(9, 0), end_time=time(12, 0), max_slots=10,
            delivery_type=DeliveryType.STANDARD, cutoff_time=time(8, 0), cutoff_type=CutoffType.SAME_DAY,
        ),
        GlobalTimeslot(
            id=2, name="Afternoon Delivery", start_time=time(13, 0), end_time=time(17, 0), max_slots=8,
            delivery_type=DeliveryType.STANDARD, cutoff_time=time(12, 0), cutoff_type=CutoffType.SAME_DAY,
        ),
        GlobalTimeslot(
            id=3, name="Evening Collection", start_time=time(18, 0), end_time=time(20, 0), max_slots=5,
            delivery_type=DeliveryType.COLLECTION, cutoff_time=time(17, 0), cutoff_type=CutoffType.SAME_DAY,
        ),
    ),
    express_timeslots=(
        ExpressTimeslot(
            id=1, name="Express Morning", start_time=time(10, 0), end_time=time(12, 0), fee=Decimal("15.00"),
            max_slots=3, cutoff_minutes=60, day_of_week=1,
        ),
        ExpressTimeslot(
            id=2, name="Express Afternoon", start_time=time(14, 0), end_time=time(16, 0), fee=Decimal("18.00"),
            max_slots=3, cutoff_minutes=90, day_of_week=1,
        ),
        ExpressTimeslot(
            id=3, name="Express Friday", start_time=time(15, 0), end_time=time(17, 0), fee=Decimal("20.00"),
            max_slots=2, cutoff_minutes=120, day_of_week=5,
        ),
    ),
    day_assignments=tuple(
        DayTimeslotAssignment(id=index, day_of_week=day, global_timeslot_id=timeslot_id)
        for index, (day, timeslot_id) in enumerate(
            ((day, timeslot_id) for day in _WORKING_DAYS for timeslot_id in (1, 2, 3)),
            start=1,
        )
    ),
)


# Snapshot field -> (ORM model, record schema).
COLLECTIONS: dict[str, tuple[type, type[RuleRecord]]] = {
    "delivery_areas": (orm.DeliveryArea, DeliveryArea),
    "postal_districts": (orm.PostalDistrict, PostalDistrict),
    "global_timeslots": (orm.GlobalTimeslot, GlobalTimeslot),
    "express_timeslots": (orm.ExpressTimeslot, ExpressTimeslot),
    "day_assignments": (orm.DayTimeslotAssignment, DayTimeslotAssignment),
    "express_assignments": (orm.ExpressTimeslotAssignment, ExpressTimeslotAssignment),
    "blocked_dates": (orm.BlockedDate, BlockedDate),
    "blocked_timeslots": (orm.BlockedTimeslot, BlockedTimeslot),
    "global_advance_rules": (orm.GlobalAdvanceOrderRule, GlobalAdvanceOrderRule),
    "product_advance_rules": (orm.ProductAdvanceOrderRule, ProductAdvanceOrderRule),
}


def _row_values(row: Any) -> dict[str, Any]:
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


def _record_values(record: RuleRecord, model: type) -> dict[str, Any]:
    """Dump a record into ORM column values."""
    columns: set[str] = {attr.key for attr in inspect(model).column_attrs}
    values: dict[str, Any] = {}
    for key, value in record.model_dump(mode="python").items():
        if key not in columns or (key == "created_at" and value is None):
            continue
        if isinstance(value, frozenset):
            value = sorted(value)
        elif isinstance(value, Enum):
            value = value.value
        values[key] = value
    return values


def _check_records(collection: str, model: type, records: Sequence[RuleRecord]) -> None:
    key: str = inspect(model).primary_key[0].key
    seen: set[Any] = set()
    for record in records:
        value = getattr(record, key)
        if value in seen:
            raise ValidationError(f"Duplicate {key} {value!r} in {collection}", field=key)
        seen.add(value)
    if collection == "delivery_areas":
        try:
            PostalCodeResolver(records)
        except ValueError as exc:
            raise ValidationError(str(exc), field="postalCodePrefixes") from exc


class SqlRuleStore:
    """Reads and replaces rule collections in the database."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_records(self, collection: str) -> list[RuleRecord]:
        model, schema = COLLECTIONS[collection]
        primary_key = inspect(model).primary_key[0]
        rows = self.db.query(model).order_by(primary_key.asc()).all()
        return [schema.model_validate(_row_values(row)) for row in rows]

    def load(self) -> RuleSet:
        """Read every collection into one snapshot."""
        return RuleSet(**{collection: tuple(self.list_records(collection)) for collection in COLLECTIONS})

    def replace(self, collection: str, records: Sequence[RuleRecord], *, commit: bool = True) -> None:
        """Replace a whole collection, the way the admin dashboard saves arrays."""
        model, schema = COLLECTIONS[collection]
        for record in records:
            if not isinstance(record, schema):
                raise TypeError(f"{collection} expects {schema.__name__} records")
        _check_records(collection, model, records)
        self.db.query(model).delete()
        self.db.add_all(model(**_record_values(record, model)) for record in records)
        if commit:
            self.db.commit()
        logger.info("Replaced %s with %s records", collection, len(records))

    def is_empty(self, collections: Iterable[str] = tuple(COLLECTIONS)) -> bool:
        return all(self.db.query(COLLECTIONS[name][0]).first() is None for name in collections)
