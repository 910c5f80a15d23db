"""Payment schemas for paid online consultations."""

from pydantic import Field

from clinic_booking.schemas.appointments import BookingCreate
from clinic_booking.schemas.common import CamelModel, ConsultType


class CreateOrderRequest(BookingCreate):
    """Booking intent submitted before payment."""

    consult_type: ConsultType = ConsultType.ONLINE
    # Honored only for admin callers
    amount_in_inr: int | None = Field(None, ge=1, alias="amountInINR")


class OrderResponse(CamelModel):
    """Payment provider order handed to the checkout widget."""

    id: str
    amount: int
    currency: str
    receipt: str | None = None
    key_id: str | None = None


class CreateOrderResponse(CamelModel):
    """Schema wrapping a created order."""

    order: OrderResponse


class PaymentVerifyRequest(CamelModel):
    """Checkout callback fields used to verify a payment."""

    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class VerifiedOrder(CamelModel):
    """Order metadata returned by a successful payment verification."""

    order_id: str
    payment_id: str
    amount: int
    currency: str
    booking: BookingCreate
