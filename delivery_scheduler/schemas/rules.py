"""Rule records consumed by the availability engine.

Records are frozen pydantic models. Field names are snake_case in Python and
accept the camelCase keys used by the admin dashboard JSON documents.
"""

from datetime import date as dt_date, datetime, time
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class DeliveryType(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    COLLECTION = "collection"

    @classmethod
    def _missing_(cls, value: object) -> "DeliveryType | None":
        # Dashboard data written before the rename still says "delivery".
        if value == "delivery":
            return cls.STANDARD
        return None


class AppliesTo(str, Enum):
    ALL = "all"
    DELIVERY = "delivery"
    COLLECTION = "collection"
    EXPRESS = "express"


class CutoffType(str, Enum):
    SAME_DAY = "same-day"
    NEXT_DAY = "next-day"


class BlockType(str, Enum):
    COMPLETE = "complete"
    QUOTA_OVERRIDE = "quota-override"


class RuleType(str, Enum):
    PRODUCT = "product"
    COLLECTION = "collection"


class RuleRecord(BaseModel):
    """Base for immutable rule records."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DeliveryArea(RuleRecord):
    id: int
    name: str
    postal_code_prefixes: frozenset[str] = frozenset()
    delivery_fee: Decimal = Decimal("0.00")
    minimum_order: Decimal = Decimal("0.00")
    estimated_delivery_time: str = ""

    @field_validator("postal_code_prefixes")
    @classmethod
    def _two_digit_prefixes(cls, value: frozenset[str]) -> frozenset[str]:
        for prefix in value:
            if len(prefix) != 2 or not prefix.isdigit():
                raise ValueError(f"Postal code prefix must be 2 digits, got {prefix!r}")
        return value


class PostalDistrict(RuleRecord):
    prefix: str
    city: str
    province: str = "SG"


class GlobalTimeslot(RuleRecord):
    id: int
    name: str
    start_time: time
    end_time: time
    max_slots: int = Field(ge=0)
    delivery_type: DeliveryType = DeliveryType.STANDARD
    cutoff_time: time
    cutoff_type: CutoffType = CutoffType.SAME_DAY
    is_active: bool = True
    created_at: datetime | None = None

    @field_validator("delivery_type")
    @classmethod
    def _no_express_templates(cls, value: DeliveryType) -> DeliveryType:
        if value is DeliveryType.EXPRESS:
            raise ValueError("Express windows are configured as express timeslots")
        return value


class ExpressTimeslot(RuleRecord):
    id: int
    name: str
    start_time: time
    end_time: time
    fee: Decimal = Decimal("0.00")
    max_slots: int = Field(ge=0)
    is_active: bool = True
    cutoff_minutes: int = Field(default=0, ge=0)
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    created_at: datetime | None = None


class DayTimeslotAssignment(RuleRecord):
    id: int
    day_of_week: int = Field(ge=0, le=6)
    global_timeslot_id: int
    is_active: bool = True


class ExpressTimeslotAssignment(RuleRecord):
    id: int
    day_of_week: int = Field(ge=0, le=6)
    express_timeslot_id: int
    is_active: bool = True


class BlockedDate(RuleRecord):
    id: int
    date: dt_date
    is_range: bool = False
    end_date: dt_date | None = None
    title: str = ""

    @model_validator(mode="after")
    def _check_range(self) -> "BlockedDate":
        if self.is_range:
            if self.end_date is None:
                raise ValueError("end_date is required for a blocked date range")
            if self.end_date < self.date:
                raise ValueError("end_date must not be before date")
        return self

    def covers(self, value: dt_date) -> bool:
        if self.is_range and self.end_date is not None:
            return self.date <= value <= self.end_date
        return value == self.date


class BlockedTimeslot(RuleRecord):
    id: int
    date: dt_date
    global_timeslot_id: int
    block_type: BlockType
    custom_quota: int | None = Field(default=None, ge=0)
    title: str = ""

    @model_validator(mode="after")
    def _check_quota(self) -> "BlockedTimeslot":
        if self.block_type is BlockType.QUOTA_OVERRIDE and self.custom_quota is None:
            raise ValueError("custom_quota is required for a quota override")
        return self


class GlobalAdvanceOrderRule(RuleRecord):
    id: int
    name: str
    global_advance_days: int = Field(ge=0)
    description: str = ""
    is_active: bool = True
    applies_to: AppliesTo = AppliesTo.ALL


class ProductAdvanceOrderRule(RuleRecord):
    id: int
    product_name: str | None = None
    collection_name: str | None = None
    rule_type: RuleType = RuleType.PRODUCT
    lead_time_days: int = Field(default=0, ge=0)
    order_start_date: dt_date
    order_end_date: dt_date
    delivery_start_date: dt_date | None = None
    delivery_end_date: dt_date | None = None
    description: str = ""
    is_active: bool = True
    priority: int = 0

    @model_validator(mode="after")
    def _check_windows(self) -> "ProductAdvanceOrderRule":
        if self.order_end_date < self.order_start_date:
            raise ValueError("order_end_date must not be before order_start_date")
        if (
            self.delivery_start_date is not None
            and self.delivery_end_date is not None
            and self.delivery_end_date < self.delivery_start_date
        ):
            raise ValueError("delivery_end_date must not be before delivery_start_date")
        if self.rule_type is RuleType.PRODUCT and not self.product_name:
            raise ValueError("product_name is required for a product rule")
        if self.rule_type is RuleType.COLLECTION and not self.collection_name:
            raise ValueError("collection_name is required for a collection rule")
        return self

    @property
    def target_name(self) -> str:
        if self.rule_type is RuleType.COLLECTION:
            return self.collection_name or ""
        return self.product_name or ""


class RulesSnapshot(RuleRecord):
    """Every rule collection, as served to the admin dashboard."""

    delivery_areas: list[DeliveryArea] = []
    postal_districts: list[PostalDistrict] = []
    global_timeslots: list[GlobalTimeslot] = []
    express_timeslots: list[ExpressTimeslot] = []
    day_assignments: list[DayTimeslotAssignment] = []
    express_assignments: list[ExpressTimeslotAssignment] = []
    blocked_dates: list[BlockedDate] = []
    blocked_timeslots: list[BlockedTimeslot] = []
    global_advance_rules: list[GlobalAdvanceOrderRule] = []
    product_advance_rules: list[ProductAdvanceOrderRule] = []
