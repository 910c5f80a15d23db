"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import Field, field_validator

from clinic_booking.core.clock import is_valid_slot_time
from clinic_booking.schemas.common import CamelModel, ConsultType


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    BOOKED = "booked"
    BOOKED_ONLINE = "booked_online"
    COMPLETED = "completed"


# Statuses that occupy a slot
ACTIVE_STATUSES = (AppointmentStatus.BOOKED.value, AppointmentStatus.BOOKED_ONLINE.value)


class VideoLinks(CamelModel):
    """Meeting links for an online consultation."""

    jitsi_url: str
    meet_url: str


class PaymentRecord(CamelModel):
    """Payment captured for a paid online booking."""

    provider: str
    order_id: str
    payment_id: str
    amount: int
    currency: str
    status: str


class BookingCreate(CamelModel):
    """Schema for booking an appointment."""

    date: str = Field(..., min_length=1, description="YYYY-MM-DD or ISO-8601 timestamp")
    time: str = Field(..., description="24-hour HH:MM slot")
    patient_name: str = Field(..., min_length=1, max_length=200)
    patient_phone: str = Field(..., min_length=7, max_length=20)
    age: int = Field(..., ge=0, le=150)
    gender: str = Field(..., min_length=1, max_length=20)
    consult_type: ConsultType

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate slot time format."""
        if not is_valid_slot_time(v):
            raise ValueError("Time must be a 24-hour HH:MM value")
        return v

    @field_validator("patient_phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Validate phone number format."""
        cleaned = (
            v.replace("-", "").replace(" ", "").replace("(", "").replace(")", "").replace("+", "")
        )
        if not cleaned.isdigit():
            raise ValueError("Phone number must contain only digits and separators")
        if len(cleaned) < 7:
            raise ValueError("Phone number must have at least 7 digits")
        return v


class AppointmentResponse(CamelModel):
    """Schema for appointment response."""

    id: UUID
    booking_id: UUID
    doctor_id: str
    date: str
    time: str
    patient_name: str
    patient_phone: str
    age: int
    gender: str
    consult_type: ConsultType
    status: AppointmentStatus
    video_links: VideoLinks | None = None
    payment: PaymentRecord | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None


class NotificationResult(CamelModel):
    """Outcome of one notification delivery attempt chain."""

    success: bool
    method: str
    message_id: str | None = None
    manual_link: str | None = None
    error: str | None = None


class NotificationSummary(CamelModel):
    """Advisory notification outcome attached to a booking."""

    patient: NotificationResult | None = None
    doctor: NotificationResult | None = None
    dispatched: bool = False


class BookingResponse(CamelModel):
    """Schema returned after a successful booking."""

    message: str
    appointment: AppointmentResponse
    notifications: NotificationSummary


class AppointmentCompleteResponse(CamelModel):
    """Schema returned when an appointment is marked complete."""

    message: str
    appointment: AppointmentResponse


class AppointmentListResponse(CamelModel):
    """Schema for appointment list response."""

    total: int
    items: list[AppointmentResponse]
