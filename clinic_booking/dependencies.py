"""FastAPI dependencies."""

from datetime import datetime
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.config import settings
from clinic_booking.core.clock import utc_now
from clinic_booking.core.exceptions import UnauthorizedException
from clinic_booking.core.redis_client import CacheManager, get_cache_manager
from clinic_booking.database import get_db
from clinic_booking.services.availability_service import AvailabilityService
from clinic_booking.services.booking_service import BookingService
from clinic_booking.services.booking_store import BookingStore
from clinic_booking.services.doctor_service import DoctorService
from clinic_booking.services.notification_service import Notifier, get_notifier
from clinic_booking.services.override_service import OverrideService
from clinic_booking.services.payment_service import PaymentService, get_payment_service
from clinic_booking.services.schedule_service import ScheduleService


def get_now() -> datetime:
    """Current instant; overridden in tests to pin the clock."""
    return utc_now()


async def require_admin(
    x_admin_secret: Annotated[str | None, Header(description="Admin secret key")] = None,
) -> None:
    """
    Guard admin routes with the shared secret header.

    Raises:
        UnauthorizedException: If the header is missing or does not match
    """
    if not x_admin_secret or x_admin_secret != settings.admin_secret:
        raise UnauthorizedException("Invalid admin secret key")


async def is_admin(
    x_admin_secret: Annotated[str | None, Header(description="Admin secret key")] = None,
) -> bool:
    """Whether the request carries a valid admin secret, without rejecting it."""
    return bool(x_admin_secret) and x_admin_secret == settings.admin_secret


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
Cache = Annotated[CacheManager | None, Depends(get_cache_manager)]
CurrentTime = Annotated[datetime, Depends(get_now)]


def get_schedule_service(db: DatabaseSession, cache: Cache) -> ScheduleService:
    """Schedule storage bound to the request's session."""
    return ScheduleService(db, settings.doctor_id, cache)


def get_booking_store(db: DatabaseSession) -> BookingStore:
    """Booking store bound to the request's session."""
    return BookingStore(db)


def get_availability_service(
    schedule: Annotated[ScheduleService, Depends(get_schedule_service)],
    store: Annotated[BookingStore, Depends(get_booking_store)],
) -> AvailabilityService:
    """Availability engine for the configured doctor."""
    return AvailabilityService(
        schedule,
        store,
        settings.doctor_id,
        settings.reference_timezone,
        lead_time_minutes=settings.lead_time_minutes,
    )


def get_booking_service(
    availability: Annotated[AvailabilityService, Depends(get_availability_service)],
    store: Annotated[BookingStore, Depends(get_booking_store)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> BookingService:
    """Booking coordinator wired with the clinic's details."""
    return BookingService(
        availability,
        store,
        notifier,
        settings.doctor_id,
        settings.reference_timezone,
        doctor_name=settings.doctor_name,
        clinic_name=settings.clinic_name,
        doctor_phone=settings.doctor_phone,
        country_code=settings.default_country_code,
        video_room_prefix=settings.video_room_prefix,
        notification_timeout=settings.notification_timeout_seconds,
    )


def get_override_service(
    schedule: Annotated[ScheduleService, Depends(get_schedule_service)],
) -> OverrideService:
    """Override administration service."""
    return OverrideService(schedule, settings.reference_timezone)


def get_doctor_service(db: DatabaseSession, cache: Cache) -> DoctorService:
    """Doctor profile service."""
    return DoctorService(db, cache)


AdminAccess = Depends(require_admin)
AdminCaller = Annotated[bool, Depends(is_admin)]
Availability = Annotated[AvailabilityService, Depends(get_availability_service)]
Bookings = Annotated[BookingService, Depends(get_booking_service)]
Overrides = Annotated[OverrideService, Depends(get_override_service)]
Doctors = Annotated[DoctorService, Depends(get_doctor_service)]
Payments = Annotated[PaymentService, Depends(get_payment_service)]
