"""Availability and override schemas."""

from enum import Enum

from pydantic import Field, field_validator

from clinic_booking.schemas.common import CamelModel, ConsultType, validate_slot_list


class ApplyMode(str, Enum):
    """How an admin schedule edit is applied."""

    ONCE = "once"
    ALWAYS = "always"


class AvailableSlotsResponse(CamelModel):
    """Bookable slots for a date and consultation type."""

    date: str
    consult_type: ConsultType
    available_slots: list[str]
    closed: bool = False
    message: str | None = None


class DefaultSlotsResponse(CamelModel):
    """Default slots for a date, ignoring overrides and bookings."""

    date: str
    consult_type: ConsultType
    slots: list[str]


class OverrideUpsert(CamelModel):
    """Schema for creating or updating a schedule override."""

    date: str = Field(..., min_length=1, description="YYYY-MM-DD")
    consult_type: ConsultType = ConsultType.OFFLINE
    closed: bool | None = None
    slots: list[str] | None = None
    apply_mode: ApplyMode = ApplyMode.ONCE

    @field_validator("slots")
    @classmethod
    def validate_slots(cls, v: list[str] | None) -> list[str] | None:
        """Validate slot format and uniqueness."""
        if v is None:
            return v
        return validate_slot_list(v)


class OverrideResponse(CamelModel):
    """Stored override for one date and consultation type."""

    doctor_id: str
    date: str
    consult_type: ConsultType
    closed: bool
    slots: list[str] | None = None


class OverrideLookupResponse(CamelModel):
    """Override lookup result; ``override`` is null when none is set."""

    override: OverrideResponse | None = None


class OverrideMutationResponse(CamelModel):
    """Result of an admin schedule edit."""

    message: str
    mode: ApplyMode
    override: OverrideResponse | None = None
    slots: list[str] | None = None


class OverrideDeleteResponse(CamelModel):
    """Result of deleting an override."""

    message: str
    date: str
    consult_type: ConsultType
