"""Collection point API schemas."""

from datetime import datetime

from delivery_scheduler.models.location import Location
from delivery_scheduler.schemas.postal_code import CamelModel


class LocationAddress(CamelModel):
    address1: str
    address2: str | None = None
    city: str
    province: str = ""
    country: str = "Singapore"
    zip: str


class LocationCreate(CamelModel):
    name: str
    address: LocationAddress
    is_active: bool = True


class LocationUpdate(LocationCreate):
    pass


class LocationRead(CamelModel):
    id: int
    name: str
    address: LocationAddress
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, location: Location) -> "LocationRead":
        return cls(
            id=location.id,
            name=location.name,
            address=LocationAddress(
                address1=location.address1,
                address2=location.address2,
                city=location.city,
                province=location.province,
                country=location.country,
                zip=location.zip,
            ),
            is_active=location.is_active,
            created_at=location.created_at,
            updated_at=location.updated_at,
        )
