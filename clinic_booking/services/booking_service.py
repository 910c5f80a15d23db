"""Booking transaction coordinator."""

import asyncio
from datetime import datetime, tzinfo
from typing import Any
from uuid import UUID, uuid4

import structlog
from pydantic import ValidationError

from clinic_booking.core.clock import parse_date, today_in
from clinic_booking.core.exceptions import (
    AlreadyBookedException,
    NotFoundException,
    SlotConflict,
    SlotNotOfferedException,
    ValidationException,
)
from clinic_booking.schemas.appointments import (
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatus,
    BookingCreate,
    BookingResponse,
    NotificationResult,
    NotificationSummary,
    PaymentRecord,
    VideoLinks,
)
from clinic_booking.schemas.common import ConsultType
from clinic_booking.schemas.payments import VerifiedOrder
from clinic_booking.services.availability_service import AvailabilityService
from clinic_booking.services.booking_store import BookingStore
from clinic_booking.services.notification_service import (
    Notifier,
    normalize_phone,
    render_doctor_message,
    render_patient_message,
)

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("date", "time", "patientName", "patientPhone", "age", "gender", "consultType")


def generate_video_links(appointment_id: UUID, room_prefix: str) -> VideoLinks:
    """Derive the meeting rooms for an online consultation from its booking id."""
    return VideoLinks(
        jitsi_url=f"https://meet.jit.si/{room_prefix}-{appointment_id.hex}",
        meet_url=f"https://meet.google.com/{room_prefix}-{appointment_id.hex[:8]}",
    )


def parse_booking_request(payload: dict[str, Any]) -> BookingCreate:
    """
    Validate a raw booking payload.

    Raises:
        ValidationException: Listing missing fields, or the first invalid one
    """
    missing = [name for name in REQUIRED_FIELDS if payload.get(name) in (None, "")]
    if missing:
        raise ValidationException(
            "All fields are required: date, time, patientName, patientPhone, age, gender, "
            f"consultType. Missing: {', '.join(missing)}."
        )
    try:
        return BookingCreate.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationException(f"Invalid {field}: {first['msg']}")


def to_appointment_response(row: dict) -> AppointmentResponse:
    """Build the API view of a stored appointment row."""
    return AppointmentResponse.model_validate({**row, "booking_id": row["id"]})


class BookingService:
    """Validates a requested slot, reserves it and notifies both parties."""

    def __init__(
        self,
        availability: AvailabilityService,
        store: BookingStore,
        notifier: Notifier,
        doctor_id: str,
        tz: tzinfo,
        *,
        doctor_name: str,
        clinic_name: str,
        doctor_phone: str,
        country_code: str = "91",
        video_room_prefix: str = "consult",
        notification_timeout: float = 10.0,
    ):
        """Initialize with collaborators and clinic details used in messages."""
        self.availability = availability
        self.store = store
        self.notifier = notifier
        self.doctor_id = doctor_id
        self.tz = tz
        self.doctor_name = doctor_name
        self.clinic_name = clinic_name
        self.doctor_phone = doctor_phone
        self.country_code = country_code
        self.video_room_prefix = video_room_prefix
        self.notification_timeout = notification_timeout

    async def book_appointment(self, request: BookingCreate) -> BookingResponse:
        """
        Book an appointment.

        Args:
            request: Validated booking request

        Returns:
            Created appointment with advisory notification results

        Raises:
            ValidationException: If the date is malformed
            SlotNotOfferedException: If the time is not offered that day
            AlreadyBookedException: If another booking holds the slot
            PersistenceException: On store failure
        """
        return await self._book(request, status=AppointmentStatus.BOOKED)

    async def confirm_paid_booking(self, verified: VerifiedOrder) -> BookingResponse:
        """
        Turn a verified payment into a booking.

        Runs the same offered-slot check, reservation and notification as a
        regular booking, with the payment captured on the record.
        """
        payment = PaymentRecord(
            provider="razorpay",
            order_id=verified.order_id,
            payment_id=verified.payment_id,
            amount=verified.amount,
            currency=verified.currency,
            status="paid",
        )
        try:
            return await self._book(
                verified.booking,
                status=AppointmentStatus.BOOKED_ONLINE,
                payment=payment,
            )
        except AlreadyBookedException:
            logger.error(
                "paid_slot_already_booked",
                order_id=verified.order_id,
                payment_id=verified.payment_id,
            )
            raise AlreadyBookedException(
                "This slot was just booked by someone else. Payment received; "
                "please contact support for rescheduling/refund."
            )

    async def ensure_offered(self, request: BookingCreate) -> str:
        """
        Check the requested time is an offered slot on the requested date.

        The same-day lead-time filter is not applied: a slot shown a moment
        ago stays bookable.

        Returns:
            The normalized YYYY-MM-DD date

        Raises:
            ValidationException: If the date is malformed
            SlotNotOfferedException: If the time is not offered
        """
        day = parse_date(request.date, self.tz)
        offered = await self.availability.get_offered_slots(day, request.consult_type)
        if request.time not in offered:
            logger.info(
                "slot_not_offered",
                date=day.isoformat(),
                time=request.time,
                consult_type=request.consult_type.value,
            )
            raise SlotNotOfferedException()
        return day.isoformat()

    async def _book(
        self,
        request: BookingCreate,
        status: AppointmentStatus,
        payment: PaymentRecord | None = None,
    ) -> BookingResponse:
        normalized = await self.ensure_offered(request)

        appointment_id = uuid4()
        values: dict[str, Any] = {
            "id": appointment_id,
            "patient_name": request.patient_name,
            "patient_phone": request.patient_phone,
            "age": request.age,
            "gender": request.gender,
            "consult_type": request.consult_type.value,
            "status": status.value,
        }
        if request.consult_type == ConsultType.ONLINE:
            values["video_links"] = generate_video_links(
                appointment_id, self.video_room_prefix
            ).model_dump()
        if payment is not None:
            values["payment"] = payment.model_dump()

        try:
            await self.store.reserve(self.doctor_id, normalized, request.time, values)
        except SlotConflict:
            logger.info("slot_conflict", date=normalized, time=request.time)
            raise AlreadyBookedException()

        row = await self.store.get_appointment(appointment_id)
        if row is None:
            raise NotFoundException("Appointment not found")
        appointment = to_appointment_response(row)

        logger.info(
            "appointment_booked",
            booking_id=str(appointment_id),
            date=normalized,
            time=request.time,
            consult_type=request.consult_type.value,
        )

        notifications = await self._notify(appointment)
        return BookingResponse(
            message="Appointment booked successfully!",
            appointment=appointment,
            notifications=notifications,
        )

    async def _notify(self, appointment: AppointmentResponse) -> NotificationSummary:
        """Send patient and doctor messages; never raises."""
        patient_phone = normalize_phone(appointment.patient_phone, self.country_code)
        doctor_phone = normalize_phone(self.doctor_phone, self.country_code)

        try:
            patient, doctor = await asyncio.wait_for(
                asyncio.gather(
                    self.notifier.send(
                        patient_phone,
                        render_patient_message(appointment, self.doctor_name, self.clinic_name),
                    ),
                    self.notifier.send(doctor_phone, render_doctor_message(appointment)),
                    return_exceptions=True,
                ),
                timeout=self.notification_timeout,
            )
        except TimeoutError:
            logger.warning("notification_timeout", booking_id=str(appointment.booking_id))
            return NotificationSummary(dispatched=False)

        results: list[NotificationResult | None] = []
        for recipient, outcome in (("patient", patient), ("doctor", doctor)):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "notification_failed",
                    recipient=recipient,
                    booking_id=str(appointment.booking_id),
                    error=str(outcome),
                )
                results.append(None)
            else:
                results.append(outcome)

        return NotificationSummary(
            patient=results[0],
            doctor=results[1],
            dispatched=all(result is not None and result.success for result in results),
        )

    async def mark_completed(self, appointment_id: UUID) -> tuple[AppointmentResponse, bool]:
        """
        Mark an appointment completed.

        Returns:
            The appointment and whether it was already completed

        Raises:
            NotFoundException: If appointment not found
        """
        row = await self.store.get_appointment(appointment_id)
        if row is None:
            raise NotFoundException("Appointment not found.")

        if row["status"] == AppointmentStatus.COMPLETED.value:
            return to_appointment_response(row), True

        updated = await self.store.mark_completed(appointment_id)
        if updated is None:
            raise NotFoundException("Appointment not found.")

        logger.info("appointment_completed", booking_id=str(appointment_id))
        return to_appointment_response(updated), False

    async def list_upcoming_by_phone(self, phone: str, now: datetime) -> AppointmentListResponse:
        """List a patient's upcoming active appointments."""
        if not phone.strip():
            raise ValidationException("Phone number is required.")

        today = today_in(now, self.tz).isoformat()
        rows = await self.store.list_upcoming_by_phone(phone.strip(), today)
        items = [to_appointment_response(row) for row in rows]
        return AppointmentListResponse(total=len(items), items=items)

    async def list_doctor_appointments(
        self,
        status: AppointmentStatus | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> AppointmentListResponse:
        """List the doctor's appointments with optional status and date range filters."""
        start = parse_date(start_date, self.tz).isoformat() if start_date else None
        end = parse_date(end_date, self.tz).isoformat() if end_date else None
        rows = await self.store.list_for_doctor(self.doctor_id, status, start, end)
        items = [to_appointment_response(row) for row in rows]
        return AppointmentListResponse(total=len(items), items=items)
