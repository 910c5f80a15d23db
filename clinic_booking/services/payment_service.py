"""Razorpay order creation and payment verification."""

import hashlib
import hmac
import time

import httpx
import structlog

from clinic_booking.config import Settings, settings
from clinic_booking.core.exceptions import (
    PaymentVerificationException,
    UnsupportedOperationException,
    ValidationException,
)
from clinic_booking.schemas.appointments import BookingCreate
from clinic_booking.schemas.payments import OrderResponse, VerifiedOrder
from clinic_booking.services.booking_service import parse_booking_request

logger = structlog.get_logger(__name__)

# Booking intent fields carried in the order notes
NOTE_FIELDS = ("date", "time", "patientName", "patientPhone", "age", "gender", "consultType")


def compute_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """HMAC-SHA256 signature Razorpay attaches to a successful checkout."""
    payload = f"{order_id}|{payment_id}".encode()
    return hmac.new(key_secret.encode(), payload, hashlib.sha256).hexdigest()


class PaymentService:
    """Talks to the Razorpay Orders API."""

    BASE_URL = "https://api.razorpay.com/v1"

    def __init__(self, config: Settings, client: httpx.AsyncClient | None = None):
        """Initialize with settings and an optional HTTP client."""
        self.config = config
        self.client = client

    def _credentials(self) -> tuple[str, str]:
        if not self.config.razorpay_key_id or not self.config.razorpay_key_secret:
            raise UnsupportedOperationException(
                "Online payments are not configured. Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET."
            )
        return self.config.razorpay_key_id, self.config.razorpay_key_secret

    async def _request(self, method: str, path: str, **kwargs) -> dict:  # noqa: ANN003
        auth = self._credentials()
        url = f"{self.BASE_URL}{path}"
        if self.client is not None:
            response = await self.client.request(method, url, auth=auth, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.request(method, url, auth=auth, **kwargs)
        response.raise_for_status()
        return response.json()

    async def create_order(
        self,
        doctor_id: str,
        booking: BookingCreate,
        normalized_date: str,
        amount_in_inr: int | None = None,
    ) -> OrderResponse:
        """
        Create a payment order carrying the booking intent in its notes.

        Args:
            doctor_id: Doctor ID
            booking: Validated booking intent
            normalized_date: Booking date as YYYY-MM-DD
            amount_in_inr: Fee override, defaults to the configured fee

        Returns:
            Created order
        """
        amount = max(1, amount_in_inr or self.config.consultation_fee_inr) * 100  # paise
        notes = {
            "doctorId": doctor_id,
            "date": normalized_date,
            "time": booking.time,
            "patientName": booking.patient_name,
            "patientPhone": booking.patient_phone,
            "age": str(booking.age),
            "gender": booking.gender,
            "consultType": booking.consult_type.value,
        }

        try:
            order = await self._request(
                "POST",
                "/orders",
                json={
                    "amount": amount,
                    "currency": "INR",
                    "receipt": f"rcpt_{int(time.time() * 1000)}",
                    "notes": notes,
                },
            )
        except httpx.HTTPError as e:
            logger.error("payment_order_failed", error=str(e))
            raise PaymentVerificationException("Failed to create order")

        logger.info("payment_order_created", order_id=order["id"], amount=order["amount"])
        return OrderResponse(
            id=order["id"],
            amount=order["amount"],
            currency=order["currency"],
            receipt=order.get("receipt"),
            key_id=self.config.razorpay_key_id,
        )

    async def verify_payment(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> VerifiedOrder:
        """
        Verify a checkout signature and recover the booking intent.

        Raises:
            PaymentVerificationException: On a bad signature, an unreachable
                provider or incomplete order notes
        """
        _, key_secret = self._credentials()
        expected = compute_signature(order_id, payment_id, key_secret)
        if not hmac.compare_digest(expected, signature):
            logger.warning("payment_signature_invalid", order_id=order_id)
            raise PaymentVerificationException("Invalid payment signature.")

        try:
            order = await self._request("GET", f"/orders/{order_id}")
        except httpx.HTTPError as e:
            logger.error("payment_order_fetch_failed", order_id=order_id, error=str(e))
            raise PaymentVerificationException("Could not fetch the payment order.")

        notes = order.get("notes") or {}
        try:
            booking = parse_booking_request(
                {**{name: notes.get(name) for name in NOTE_FIELDS}, "consultType": "online"}
            )
        except ValidationException as e:
            raise PaymentVerificationException(
                f"Order notes incomplete. Cannot finalize booking. {e.message}"
            )

        return VerifiedOrder(
            order_id=order_id,
            payment_id=payment_id,
            amount=int(order.get("amount", 0)),
            currency=order.get("currency", "INR"),
            booking=booking,
        )


def get_payment_service() -> PaymentService:
    """Dependency returning the payment service."""
    return PaymentService(settings)
