"""API v1 router configuration."""

from fastapi import APIRouter

from clinic_booking.api.v1.endpoints import availability, bookings, health, payments

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(availability.router, prefix="/availability", tags=["Availability"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
