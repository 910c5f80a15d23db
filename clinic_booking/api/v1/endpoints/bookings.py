"""Booking endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_booking.config import settings
from clinic_booking.dependencies import AdminAccess, Availability, Bookings, CurrentTime, Doctors
from clinic_booking.schemas.appointments import (
    AppointmentCompleteResponse,
    AppointmentListResponse,
    AppointmentStatus,
    BookingCreate,
    BookingResponse,
)
from clinic_booking.schemas.availability import AvailableSlotsResponse, DefaultSlotsResponse
from clinic_booking.schemas.common import ConsultType
from clinic_booking.schemas.doctors import DoctorResponse

router = APIRouter()


@router.get(
    "/slots",
    response_model=AvailableSlotsResponse,
    status_code=status.HTTP_200_OK,
    summary="Get available slots",
)
async def get_available_slots(
    availability: Availability,
    now: CurrentTime,
    date: str = Query(..., description="YYYY-MM-DD or ISO-8601 timestamp"),
    consult_type: ConsultType = Query(ConsultType.OFFLINE, alias="consultType"),
) -> AvailableSlotsResponse:
    """
    Get the bookable slots for a date.

    Args:
        availability: Availability engine
        now: Current instant
        date: Requested date
        consult_type: Online or offline

    Returns:
        Offered slots minus booked ones, or a closed-day response

    Raises:
        ValidationException: If the date is malformed
        PastDateException: If the date is before today
    """
    return await availability.get_available_slots(date, consult_type, now)


@router.get(
    "/slots/default",
    response_model=DefaultSlotsResponse,
    status_code=status.HTTP_200_OK,
    summary="Get default slots",
)
async def get_default_slots(
    availability: Availability,
    date: str = Query(...),
    consult_type: ConsultType = Query(ConsultType.OFFLINE, alias="consultType"),
) -> DefaultSlotsResponse:
    """Get the default slots for a date, ignoring overrides and bookings."""
    return await availability.get_default_slots(date, consult_type)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
)
async def book_appointment(data: BookingCreate, bookings: Bookings) -> BookingResponse:
    """
    Book an appointment slot.

    Notification results are advisory; delivery failures never fail the booking.

    Args:
        data: Booking request
        bookings: Booking coordinator

    Returns:
        Created appointment with notification results

    Raises:
        SlotNotOfferedException: If the time is not offered that day
        AlreadyBookedException: If the slot is taken
    """
    return await bookings.book_appointment(data)


@router.get(
    "/check",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="Check bookings by phone",
)
async def check_bookings(
    bookings: Bookings,
    now: CurrentTime,
    phone: str = Query(..., min_length=1),
) -> AppointmentListResponse:
    """List a patient's upcoming active appointments by phone number."""
    return await bookings.list_upcoming_by_phone(phone, now)


@router.get(
    "/doctor",
    response_model=DoctorResponse,
    status_code=status.HTTP_200_OK,
    summary="Get doctor profile",
)
async def get_doctor(doctors: Doctors) -> DoctorResponse:
    """
    Get the clinic's doctor profile.

    Raises:
        NotFoundException: If the doctor has not been seeded
    """
    return await doctors.get_doctor(settings.doctor_id)


@router.get(
    "/doctor/appointments",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[AdminAccess],
    summary="List doctor appointments",
)
async def list_doctor_appointments(
    bookings: Bookings,
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
) -> AppointmentListResponse:
    """
    List the doctor's appointments for the dashboard.

    Args:
        bookings: Booking coordinator
        status_filter: Filter by status
        start_date: Inclusive lower date bound
        end_date: Inclusive upper date bound

    Returns:
        Appointments ordered by date descending, then time
    """
    return await bookings.list_doctor_appointments(status_filter, start_date, end_date)


@router.patch(
    "/{appointment_id}/complete",
    response_model=AppointmentCompleteResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[AdminAccess],
    summary="Mark appointment completed",
)
async def complete_appointment(
    appointment_id: UUID,
    bookings: Bookings,
) -> AppointmentCompleteResponse:
    """
    Mark an appointment as completed, releasing its slot.

    Raises:
        NotFoundException: If appointment not found
    """
    appointment, already_completed = await bookings.mark_completed(appointment_id)
    message = (
        "Appointment already completed"
        if already_completed
        else "Appointment marked as completed"
    )
    return AppointmentCompleteResponse(message=message, appointment=appointment)
