"""Rule collection admin endpoints.

Each PUT replaces one whole collection, matching how the admin dashboard
saves its arrays.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from delivery_scheduler.api.v1.deps import get_ruleset
from delivery_scheduler.db.session import get_db
from delivery_scheduler.schemas.rules import RulesSnapshot
from delivery_scheduler.services.rule_store import COLLECTIONS, RuleSet, SqlRuleStore

router = APIRouter()

# URL segment -> RuleSet field.
RULE_COLLECTIONS: dict[str, str] = {
    "delivery-areas": "delivery_areas",
    "postal-districts": "postal_districts",
    "global-timeslots": "global_timeslots",
    "express-timeslots": "express_timeslots",
    "day-assignments": "day_assignments",
    "express-timeslot-assignments": "express_assignments",
    "blocked-dates": "blocked_dates",
    "blocked-timeslots": "blocked_timeslots",
    "global-advance-rules": "global_advance_rules",
    "product-advance-rules": "product_advance_rules",
}


def _snapshot(ruleset: RuleSet) -> RulesSnapshot:
    return RulesSnapshot(**{name: list(getattr(ruleset, name)) for name in COLLECTIONS})


@router.get("", response_model=RulesSnapshot)
def get_rules(ruleset: RuleSet = Depends(get_ruleset)) -> RulesSnapshot:
    return _snapshot(ruleset)


@router.put("/{collection}", response_model=RulesSnapshot)
def replace_rules(
    collection: str,
    records: list[dict[str, Any]] = Body(...),
    db: Session = Depends(get_db),
) -> RulesSnapshot:
    field = RULE_COLLECTIONS.get(collection)
    if field is None:
        raise HTTPException(status_code=404, detail=f"Unknown rule collection: {collection}")

    schema = COLLECTIONS[field][1]
    try:
        parsed = TypeAdapter(list[schema]).validate_python(records)
    except PydanticValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()],
        ) from exc

    store = SqlRuleStore(db)
    store.replace(field, parsed)
    return _snapshot(store.load())
