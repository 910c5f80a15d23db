"""WhatsApp notifications for booked appointments.

Delivery is best effort: backends are tried in priority order and when none
succeeds the caller gets a ``wa.me`` link the message can be shared through
by hand.
"""

import re
from contextlib import nullcontext
from typing import Protocol
from urllib.parse import quote

import httpx
import structlog

from clinic_booking.config import Settings, settings
from clinic_booking.core.clock import format_display_date, format_display_time
from clinic_booking.schemas.appointments import AppointmentResponse, NotificationResult
from clinic_booking.schemas.common import ConsultType

logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    """Fire-and-forget message delivery to a phone number."""

    async def send(self, phone: str, text: str) -> NotificationResult: ...


def normalize_phone(phone: str, country_code: str) -> str:
    """Strip separators and prefix the country code to bare national numbers."""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"{country_code}{digits}"
    return digits


def manual_whatsapp_link(phone: str, text: str) -> str:
    """Build a click-to-chat link carrying the pre-filled message."""
    return f"https://wa.me/{phone}?text={quote(text, safe='')}"


def render_patient_message(
    appointment: AppointmentResponse,
    doctor_name: str,
    clinic_name: str,
) -> str:
    """Render the booking confirmation sent to the patient."""
    lines = [
        "✅ *Appointment Confirmed*",
        "",
        f"Hello {appointment.patient_name},",
        "",
    ]
    if appointment.consult_type == ConsultType.ONLINE:
        lines.append(f"Your online consultation with *{doctor_name}* has been confirmed!")
    else:
        lines.append(f"Your clinic visit with *{doctor_name}* has been confirmed!")

    lines += [
        "",
        f"📅 *Date:* {format_display_date(appointment.date)}",
        f"🕐 *Time:* {format_display_time(appointment.time)}",
        f"📋 *Booking ID:* {appointment.booking_id}",
    ]

    if appointment.video_links:
        lines += [
            "🎥 *Meeting Type:* Online Video Consultation",
            "",
            "🔗 *Video Call Link:*",
            appointment.video_links.jitsi_url,
            "",
            "🔗 *Backup Google Meet Link:*",
            appointment.video_links.meet_url,
            "",
            "*Instructions:*",
            "- Please join the meeting 5 minutes before the scheduled time",
            "- Make sure you have a stable internet connection",
            "- Keep your medical reports ready if any",
        ]
    else:
        lines += [
            "",
            "Please arrive 10 minutes before your appointment time.",
        ]

    lines += [
        "",
        "For any queries, please contact us.",
        "",
        "Thank you!",
        f"*{clinic_name}*",
    ]
    return "\n".join(lines)


def render_doctor_message(appointment: AppointmentResponse) -> str:
    """Render the new-booking alert sent to the doctor."""
    kind = "Online" if appointment.consult_type == ConsultType.ONLINE else "Clinic"
    lines = [
        f"🔔 *New {kind} Appointment*",
        "",
        "*Patient Details:*",
        f"👤 Name: {appointment.patient_name}",
        f"📞 Phone: {appointment.patient_phone}",
        f"🎂 Age: {appointment.age} years",
        f"⚧ Gender: {appointment.gender.capitalize()}",
        "",
        f"📅 *Date:* {format_display_date(appointment.date)}",
        f"🕐 *Time:* {format_display_time(appointment.time)}",
        f"📋 *Booking ID:* {appointment.booking_id}",
    ]
    if appointment.video_links:
        lines += [
            "",
            "🔗 *Video Call Link:*",
            appointment.video_links.jitsi_url,
            "",
            "*Note:* Patient has been notified with the meeting link.",
        ]
    return "\n".join(lines)


class WhatsAppNotifier:
    """Send WhatsApp messages through CallMeBot, the Cloud API, then Twilio."""

    CLOUD_API_URL = "https://graph.facebook.com/v20.0/{phone_id}/messages"
    CALLMEBOT_URL = "https://api.callmebot.com/whatsapp.php"
    TWILIO_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

    def __init__(self, config: Settings, client: httpx.AsyncClient | None = None):
        """Initialize with settings and an optional shared HTTP client."""
        self.config = config
        self.client = client

    async def send(self, phone: str, text: str) -> NotificationResult:
        """
        Deliver a message, falling back through backends in priority order.

        Args:
            phone: Destination number, country code included
            text: Rendered message

        Returns:
            The first successful backend's result, or a manual link result
        """
        backends = (
            ("callmebot", self._send_via_callmebot),
            ("cloud_api", self._send_via_cloud_api),
            ("twilio", self._send_via_twilio),
        )

        async with self._client() as client:
            for name, backend in backends:
                try:
                    result = await backend(client, phone, text)
                except httpx.HTTPError as e:
                    result = NotificationResult(success=False, method=name, error=str(e))

                if result.success:
                    logger.info("whatsapp_sent", method=result.method, message_id=result.message_id)
                    return result

                logger.info("whatsapp_backend_unavailable", method=name, error=result.error)

        logger.warning("whatsapp_fallback_manual_link", phone=phone)
        return NotificationResult(
            success=False,
            method="manual_link",
            manual_link=manual_whatsapp_link(phone, text),
            error="All automatic methods unavailable - configuration needed",
        )

    def _client(self) -> httpx.AsyncClient:
        if self.client is not None:
            return nullcontext(self.client)  # type: ignore[return-value]
        return httpx.AsyncClient(timeout=self.config.notification_timeout_seconds)

    async def _send_via_callmebot(
        self, client: httpx.AsyncClient, phone: str, text: str
    ) -> NotificationResult:
        if not self.config.callmebot_api_key:
            return NotificationResult(success=False, method="callmebot", error="Not configured")

        response = await client.get(
            self.CALLMEBOT_URL,
            params={"phone": phone, "text": text, "apikey": self.config.callmebot_api_key},
        )
        if response.is_success or "Message queued" in response.text:
            return NotificationResult(success=True, method="callmebot")
        return NotificationResult(success=False, method="callmebot", error=response.text)

    async def _send_via_cloud_api(
        self, client: httpx.AsyncClient, phone: str, text: str
    ) -> NotificationResult:
        token = self.config.whatsapp_cloud_api_token
        phone_id = self.config.whatsapp_cloud_phone_number_id
        if not token or not phone_id:
            return NotificationResult(success=False, method="cloud_api", error="Not configured")

        response = await client.post(
            self.CLOUD_API_URL.format(phone_id=phone_id),
            headers={"Authorization": f"Bearer {token}"},
            json={
                "messaging_product": "whatsapp",
                "to": phone,
                "type": "text",
                "text": {"body": text},
            },
        )
        if not response.is_success:
            return NotificationResult(success=False, method="cloud_api", error=response.text)

        messages = response.json().get("messages") or [{}]
        return NotificationResult(
            success=True, method="cloud_api", message_id=messages[0].get("id")
        )

    async def _send_via_twilio(
        self, client: httpx.AsyncClient, phone: str, text: str
    ) -> NotificationResult:
        sid = self.config.twilio_account_sid
        token = self.config.twilio_auth_token
        if not sid or not token:
            return NotificationResult(success=False, method="twilio", error="Not configured")

        response = await client.post(
            self.TWILIO_URL.format(sid=sid),
            auth=(sid, token),
            data={
                "From": self.config.twilio_whatsapp_number,
                "To": f"whatsapp:+{phone}",
                "Body": text,
            },
        )
        if not response.is_success:
            return NotificationResult(success=False, method="twilio", error=response.text)
        return NotificationResult(
            success=True, method="twilio", message_id=response.json().get("sid")
        )


def get_notifier() -> Notifier:
    """Dependency returning the configured notifier."""
    return WhatsAppNotifier(settings)
