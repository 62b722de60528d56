"""Collection point endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from delivery_scheduler.db.session import get_db
from delivery_scheduler.schemas.location import LocationCreate, LocationRead, LocationUpdate
from delivery_scheduler.services import location_service

router = APIRouter()


@router.get("", response_model=list[LocationRead])
def list_locations(active_only: bool = False, db: Session = Depends(get_db)) -> list[LocationRead]:
    return [LocationRead.from_model(location) for location in location_service.list_locations(db, active_only)]


@router.post("", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
def create_location(payload: LocationCreate, db: Session = Depends(get_db)) -> LocationRead:
    return LocationRead.from_model(location_service.create_location(db, payload))


@router.get("/{location_id}", response_model=LocationRead)
def get_location(location_id: int, db: Session = Depends(get_db)) -> LocationRead:
    return LocationRead.from_model(location_service.get_location(db, location_id))


@router.put("/{location_id}", response_model=LocationRead)
def update_location(location_id: int, payload: LocationUpdate, db: Session = Depends(get_db)) -> LocationRead:
    return LocationRead.from_model(location_service.update_location(db, location_id, payload))


@router.delete("/{location_id}")
def delete_location(location_id: int, db: Session = Depends(get_db)) -> dict[str, str]:
    location_service.delete_location(db, location_id)
    return {"message": "Location removed"}
