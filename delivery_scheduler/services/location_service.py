"""Collection point persistence helpers."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from delivery_scheduler.models.location import Location
from delivery_scheduler.schemas.location import LocationCreate, LocationUpdate
from delivery_scheduler.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def _flatten(payload: LocationCreate | LocationUpdate) -> dict[str, str | bool | None]:
    values: dict[str, str | bool | None] = {"name": payload.name, "is_active": payload.is_active}
    values.update(payload.address.model_dump())
    return values


def list_locations(db: Session, active_only: bool = False) -> list[Location]:
    query = select(Location).order_by(Location.name.asc(), Location.id.asc())
    if active_only:
        query = query.where(Location.is_active.is_(True))
    return list(db.scalars(query).all())


def get_location(db: Session, location_id: int) -> Location:
    location = db.get(Location, location_id)
    if location is None:
        raise NotFoundError("Location not found")
    return location


def create_location(db: Session, payload: LocationCreate) -> Location:
    location = Location(**_flatten(payload))
    db.add(location)
    db.commit()
    db.refresh(location)
    logger.info("Created location %s (%s)", location.id, location.name)
    return location


def update_location(db: Session, location_id: int, payload: LocationUpdate) -> Location:
    location = get_location(db, location_id)
    for key, value in _flatten(payload).items():
        setattr(location, key, value)
    db.commit()
    db.refresh(location)
    return location


def delete_location(db: Session, location_id: int) -> None:
    location = get_location(db, location_id)
    db.delete(location)
    db.commit()
    logger.info("Deleted location %s", location_id)
