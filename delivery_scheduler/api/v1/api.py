"""API v1 router composition."""

from fastapi import APIRouter

from delivery_scheduler.api.v1.endpoints import availability, bookings, locations, postal_code, rules

api_router: APIRouter = APIRouter()
api_router.include_router(postal_code.router, prefix="/postal-code", tags=["postal-code"])
api_router.include_router(availability.router, prefix="/availability", tags=["availability"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(rules.router, prefix="/rules", tags=["rules"])
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])
