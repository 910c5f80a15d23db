"""Availability engine: bookable slots for a date and consultation type."""

from datetime import date as date_type
from datetime import datetime, tzinfo

import structlog

from clinic_booking.core.clock import minutes_since_midnight, parse_date, slot_minutes, today_in
from clinic_booking.core.exceptions import PastDateException
from clinic_booking.schemas.availability import AvailableSlotsResponse, DefaultSlotsResponse
from clinic_booking.schemas.common import ConsultType
from clinic_booking.services.booking_store import BookingStore
from clinic_booking.services.schedule_service import ScheduleService
from clinic_booking.services.slot_deriver import (
    OfferedSlots,
    derive_default_slots,
    derive_offered_slots,
)

logger = structlog.get_logger(__name__)


def filter_lead_time(
    slots: list[str],
    now: datetime,
    tz: tzinfo,
    lead_time_minutes: int,
) -> list[str]:
    """Keep slots starting strictly more than ``lead_time_minutes`` after ``now``."""
    cutoff = minutes_since_midnight(now, tz) + lead_time_minutes
    return [slot for slot in slots if slot_minutes(slot) > cutoff]


class AvailabilityService:
    """Composes the slot deriver with booked times and the current time."""

    def __init__(
        self,
        schedule: ScheduleService,
        store: BookingStore,
        doctor_id: str,
        tz: tzinfo,
        lead_time_minutes: int = 15,
    ):
        """Initialize with schedule storage, booking store and clock settings."""
        self.schedule = schedule
        self.store = store
        self.doctor_id = doctor_id
        self.tz = tz
        self.lead_time_minutes = lead_time_minutes

    async def get_offered_slots(self, day: date_type, consult_type: ConsultType) -> OfferedSlots:
        """Load the template and override for a date and derive its offered slots."""
        override = await self.schedule.get_override(day.isoformat(), consult_type)
        template = await self._template_for(consult_type)
        return derive_offered_slots(day, consult_type, template, override)

    async def get_available_slots(
        self,
        date: str | date_type,
        consult_type: ConsultType,
        now: datetime,
    ) -> AvailableSlotsResponse:
        """
        Get bookable slots for a date.

        Args:
            date: Requested date
            consult_type: Online or offline
            now: Current instant; converted to the reference timezone

        Returns:
            Offered slots minus booked ones, in offered order, with same-day
            slots inside the lead-time window removed

        Raises:
            ValidationException: If the date is malformed
            PastDateException: If the date is before today
        """
        day = parse_date(date, self.tz)
        today = today_in(now, self.tz)
        if day < today:
            raise PastDateException()

        normalized = day.isoformat()
        offered = await self.get_offered_slots(day, consult_type)
        if offered.closed:
            return AvailableSlotsResponse(
                date=normalized,
                consult_type=consult_type,
                available_slots=[],
                closed=True,
                message=offered.reason,
            )

        booked = await self.store.list_booked_times(self.doctor_id, normalized)
        available = [slot for slot in offered.slots if slot not in booked]

        if day == today:
            available = filter_lead_time(available, now, self.tz, self.lead_time_minutes)

        logger.debug(
            "available_slots_computed",
            date=normalized,
            consult_type=consult_type.value,
            offered=len(offered.slots),
            booked=len(booked),
            available=len(available),
        )

        return AvailableSlotsResponse(
            date=normalized,
            consult_type=consult_type,
            available_slots=available,
        )

    async def get_default_slots(
        self,
        date: str | date_type,
        consult_type: ConsultType,
    ) -> DefaultSlotsResponse:
        """Default slots for a date, ignoring overrides, bookings and the clock."""
        day = parse_date(date, self.tz)
        template = await self._template_for(consult_type)
        return DefaultSlotsResponse(
            date=day.isoformat(),
            consult_type=consult_type,
            slots=derive_default_slots(day, consult_type, template),
        )

    async def _template_for(self, consult_type: ConsultType) -> list[str]:
        # Online slots come from the weekday policy, never the stored template
        if consult_type == ConsultType.ONLINE:
            return []
        return await self.schedule.get_weekly_template()
