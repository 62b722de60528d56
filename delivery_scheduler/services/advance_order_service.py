"""Advance-order window evaluation.

Product and collection rules override global rules completely. Without a
product rule the most specific active global rule for the delivery type sets
a minimum lead time. Without any rule the date is open.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from delivery_scheduler.schemas.rules import (
    AppliesTo,
    DeliveryType,
    GlobalAdvanceOrderRule,
    ProductAdvanceOrderRule,
    RuleType,
)
from delivery_scheduler.utils.time import current_local_datetime

logger = logging.getLogger(__name__)


class AdvanceRuleTieBreak(str, Enum):
    """How to choose between equally specific global rules."""

    MOST_RESTRICTIVE = "most_restrictive"
    LEAST_RESTRICTIVE = "least_restrictive"


# Which global rule scopes cover a delivery type, with their specificity.
APPLIES_TO_SPECIFICITY: dict[DeliveryType, dict[AppliesTo, int]] = {
    DeliveryType.STANDARD: {AppliesTo.ALL: 0, AppliesTo.DELIVERY: 1},
    DeliveryType.EXPRESS: {AppliesTo.ALL: 0, AppliesTo.DELIVERY: 1, AppliesTo.EXPRESS: 2},
    DeliveryType.COLLECTION: {AppliesTo.ALL: 0, AppliesTo.COLLECTION: 1},
}


@dataclass(frozen=True)
class AdvanceOrderDecision:
    available: bool
    reason: str | None = None
    rule_kind: str | None = None
    rule_id: int | None = None


class AdvanceOrderEvaluator:
    def __init__(
        self,
        global_rules: tuple[GlobalAdvanceOrderRule, ...] | list[GlobalAdvanceOrderRule],
        product_rules: tuple[ProductAdvanceOrderRule, ...] | list[ProductAdvanceOrderRule],
        tie_break: AdvanceRuleTieBreak = AdvanceRuleTieBreak.MOST_RESTRICTIVE,
    ) -> None:
        self.global_rules = tuple(global_rules)
        self.product_rules = tuple(product_rules)
        self.tie_break = tie_break

    def resolve_global_rule(self, delivery_type: DeliveryType) -> GlobalAdvanceOrderRule | None:
        scopes: dict[AppliesTo, int] = APPLIES_TO_SPECIFICITY[delivery_type]
        matching: list[GlobalAdvanceOrderRule] = [
            rule for rule in self.global_rules if rule.is_active and rule.applies_to in scopes
        ]
        if not matching:
            return None

        top: int = max(scopes[rule.applies_to] for rule in matching)
        contenders: list[GlobalAdvanceOrderRule] = [rule for rule in matching if scopes[rule.applies_to] == top]
        if len(contenders) > 1:
            logger.warning(
                "Ambiguous global advance-order rules %s for %s; applying %s tie-break",
                [rule.id for rule in contenders],
                delivery_type.value,
                self.tie_break.value,
            )
        if self.tie_break is AdvanceRuleTieBreak.LEAST_RESTRICTIVE:
            return min(contenders, key=lambda rule: (rule.global_advance_days, rule.id))
        return min(contenders, key=lambda rule: (-rule.global_advance_days, rule.id))

    def resolve_product_rule(
        self,
        product_name: str | None,
        collection_name: str | None = None,
    ) -> ProductAdvanceOrderRule | None:
        """Return the highest-priority rule for the product or collection.

        A collection rule matches ``collection_name``, or ``product_name`` when
        the caller passes a collection handle as the only name.
        """
        if not product_name and not collection_name:
            return None

        collection_names: set[str] = {name for name in (collection_name, product_name) if name}
        matching: list[ProductAdvanceOrderRule] = []
        for rule in self.product_rules:
            if not rule.is_active:
                continue
            if rule.rule_type is RuleType.PRODUCT and product_name and rule.product_name == product_name:
                matching.append(rule)
            elif rule.rule_type is RuleType.COLLECTION and rule.collection_name in collection_names:
                matching.append(rule)
        if not matching:
            return None
        return min(
            matching,
            key=lambda rule: (-rule.priority, 0 if rule.rule_type is RuleType.PRODUCT else 1, rule.id),
        )

    def evaluate(
        self,
        delivery_date: date,
        delivery_type: DeliveryType,
        product_name: str | None = None,
        collection_name: str | None = None,
        now: datetime | None = None,
    ) -> AdvanceOrderDecision:
        today: date = (now or current_local_datetime()).date()

        product_rule = self.resolve_product_rule(product_name, collection_name)
        if product_rule is not None:
            return self._evaluate_product_rule(product_rule, delivery_date, today)

        global_rule = self.resolve_global_rule(delivery_type)
        if global_rule is not None:
            lead_days: int = (delivery_date - today).days
            if lead_days < global_rule.global_advance_days:
                return AdvanceOrderDecision(
                    available=False,
                    reason=f"Requires {global_rule.global_advance_days} days advance notice",
                    rule_kind="global",
                    rule_id=global_rule.id,
                )
            return AdvanceOrderDecision(available=True, rule_kind="global", rule_id=global_rule.id)

        return AdvanceOrderDecision(available=True)

    def _evaluate_product_rule(
        self,
        rule: ProductAdvanceOrderRule,
        delivery_date: date,
        today: date,
    ) -> AdvanceOrderDecision:
        name: str = rule.target_name

        def blocked(reason: str) -> AdvanceOrderDecision:
            return AdvanceOrderDecision(available=False, reason=reason, rule_kind=rule.rule_type.value, rule_id=rule.id)

        if today < rule.order_start_date:
            return blocked(f"Outside ordering window for {name}: opens {rule.order_start_date.isoformat()}")
        if today > rule.order_end_date:
            return blocked(f"Outside ordering window for {name}: closed {rule.order_end_date.isoformat()}")

        start, end = rule.delivery_start_date, rule.delivery_end_date
        if (start is not None and delivery_date < start) or (end is not None and delivery_date > end):
            window: str = f"{start.isoformat() if start else 'any date'} and {end.isoformat() if end else 'any date'}"
            return blocked(f"{name} can only be delivered between {window}")

        if (delivery_date - today).days < rule.lead_time_days:
            return blocked(f"Requires {rule.lead_time_days} days advance notice")

        return AdvanceOrderDecision(available=True, rule_kind=rule.rule_type.value, rule_id=rule.id)
