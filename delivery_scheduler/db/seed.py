"""Database seeding helpers."""

import logging

from sqlalchemy.orm import Session

from delivery_scheduler.services.rule_store import COLLECTIONS, DEFAULT_RULESET, SqlRuleStore

logger = logging.getLogger(__name__)


def ensure_default_rules(session: Session) -> bool:
    """Seed the default ruleset when every rule table is empty.

    Returns True when rows were written.
    """
    store = SqlRuleStore(session)
    if not store.is_empty():
        return False

    for collection in COLLECTIONS:
        store.replace(collection, getattr(DEFAULT_RULESET, collection), commit=False)
    session.commit()
    logger.info(
        "Seeded default rules: %s delivery areas, %s timeslots",
        len(DEFAULT_RULESET.delivery_areas),
        len(DEFAULT_RULESET.global_timeslots) + len(DEFAULT_RULESET.express_timeslots),
    )
    return True
