"""Payment endpoints for paid online consultations."""

from fastapi import APIRouter, status

from clinic_booking.config import settings
from clinic_booking.core.exceptions import ValidationException
from clinic_booking.dependencies import AdminCaller, Bookings, Payments
from clinic_booking.schemas.appointments import BookingResponse
from clinic_booking.schemas.common import ConsultType
from clinic_booking.schemas.payments import (
    CreateOrderRequest,
    CreateOrderResponse,
    PaymentVerifyRequest,
)

router = APIRouter()


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create payment order",
)
async def create_order(
    data: CreateOrderRequest,
    bookings: Bookings,
    payments: Payments,
    admin: AdminCaller,
) -> CreateOrderResponse:
    """
    Create a payment order for an online consultation.

    The slot is checked up front so patients are not charged for a time the
    doctor does not offer. It is reserved only once the payment is verified.
    The configured fee is charged unless an admin caller sets ``amountInINR``.

    Raises:
        ValidationException: If the consultation is not online
        SlotNotOfferedException: If the time is not offered that day
        UnsupportedOperationException: If payments are not configured
    """
    if data.consult_type != ConsultType.ONLINE:
        raise ValidationException("Payments are only taken for online consultations.")

    normalized = await bookings.ensure_offered(data)
    order = await payments.create_order(
        settings.doctor_id,
        data,
        normalized,
        amount_in_inr=data.amount_in_inr if admin else None,
    )
    return CreateOrderResponse(order=order)


@router.post(
    "/verify",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Verify payment and book",
)
async def verify_payment(
    data: PaymentVerifyRequest,
    bookings: Bookings,
    payments: Payments,
) -> BookingResponse:
    """
    Verify a checkout and book the paid slot.

    Raises:
        PaymentVerificationException: If the payment cannot be verified
        AlreadyBookedException: If the slot was taken while paying
    """
    verified = await payments.verify_payment(
        data.razorpay_order_id,
        data.razorpay_payment_id,
        data.razorpay_signature,
    )
    return await bookings.confirm_paid_booking(verified)
