"""Admin edits to the schedule: per-date overrides and permanent template changes."""

from datetime import tzinfo

from clinic_booking.core.clock import normalize_date
from clinic_booking.core.exceptions import UnsupportedOperationException, ValidationException
from clinic_booking.schemas.availability import (
    ApplyMode,
    OverrideDeleteResponse,
    OverrideLookupResponse,
    OverrideMutationResponse,
    OverrideResponse,
    OverrideUpsert,
)
from clinic_booking.schemas.common import ConsultType
from clinic_booking.services.schedule_service import ONLINE_TEMPLATE_UNSUPPORTED, ScheduleService


class OverrideService:
    """Service behind the admin availability endpoints."""

    def __init__(self, schedule: ScheduleService, tz: tzinfo):
        """Initialize with schedule storage and the reference timezone."""
        self.schedule = schedule
        self.tz = tz

    async def get_override(self, date: str, consult_type: ConsultType) -> OverrideLookupResponse:
        """Get the override for a date; ``override`` is None when there is none."""
        normalized = normalize_date(date, self.tz)
        override = await self.schedule.get_override(normalized, consult_type)
        return OverrideLookupResponse(
            override=OverrideResponse.model_validate(override) if override else None
        )

    async def upsert_override(self, data: OverrideUpsert) -> OverrideMutationResponse:
        """
        Apply an admin schedule edit.

        ``once`` merges an override for the single date. ``always`` rewrites
        the weekly offline template and is rejected for online schedules.

        Raises:
            ValidationException: If the date is malformed or ``always`` has no slots
            UnsupportedOperationException: For ``always`` on the online schedule
        """
        normalized = normalize_date(data.date, self.tz)

        if data.apply_mode == ApplyMode.ALWAYS:
            if data.consult_type != ConsultType.OFFLINE:
                raise UnsupportedOperationException(ONLINE_TEMPLATE_UNSUPPORTED)
            if not data.slots:
                raise ValidationException(
                    "A non-empty slots list is required when applyMode is 'always'."
                )

            slots = await self.schedule.set_weekly_template(data.slots, data.consult_type)
            return OverrideMutationResponse(
                message="Default offline schedule updated permanently",
                mode=ApplyMode.ALWAYS,
                slots=slots,
            )

        override = await self.schedule.set_override(
            normalized,
            data.consult_type,
            closed=data.closed,
            slots=data.slots,
        )
        return OverrideMutationResponse(
            message="Override saved for this date",
            mode=ApplyMode.ONCE,
            override=OverrideResponse.model_validate(override),
        )

    async def delete_override(self, date: str, consult_type: ConsultType) -> OverrideDeleteResponse:
        """
        Delete the override for a date.

        Raises:
            NotFoundException: If no override exists
        """
        normalized = normalize_date(date, self.tz)
        await self.schedule.delete_override(normalized, consult_type)
        return OverrideDeleteResponse(
            message="Override deleted",
            date=normalized,
            consult_type=consult_type,
        )
