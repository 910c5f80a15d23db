"""Tests for WhatsApp notification delivery."""

from datetime import datetime
from uuid import uuid4

import httpx
import pytest

from clinic_booking.config import settings
from clinic_booking.schemas.appointments import AppointmentResponse, VideoLinks
from clinic_booking.services.notification_service import (
    WhatsAppNotifier,
    normalize_phone,
    render_doctor_message,
    render_patient_message,
)

PHONE = "919876543210"


def make_notifier(handler, **overrides) -> WhatsAppNotifier:
    config = settings.model_copy(
        update={
            "callmebot_api_key": None,
            "whatsapp_cloud_api_token": None,
            "whatsapp_cloud_phone_number_id": None,
            "twilio_account_sid": None,
            "twilio_auth_token": None,
            **overrides,
        }
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WhatsAppNotifier(config, client=client)


def make_appointment(**overrides) -> AppointmentResponse:
    appointment_id = uuid4()
    data = {
        "id": appointment_id,
        "booking_id": appointment_id,
        "doctor_id": "primary-doctor",
        "date": "2025-01-07",
        "time": "20:30",
        "patient_name": "Asha Rao",
        "patient_phone": "9876543210",
        "age": 34,
        "gender": "female",
        "consult_type": "online",
        "status": "booked",
        "created_at": datetime(2025, 1, 1),
        **overrides,
    }
    return AppointmentResponse.model_validate(data)


@pytest.mark.asyncio
async def test_manual_link_when_nothing_configured() -> None:
    """Without credentials no request is sent and a wa.me link is returned."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request to {request.url}")

    result = await make_notifier(handler).send(PHONE, "Hello there")
    assert result.success is False
    assert result.method == "manual_link"
    assert result.manual_link == f"https://wa.me/{PHONE}?text=Hello%20there"


@pytest.mark.asyncio
async def test_callmebot_first() -> None:
    """CallMeBot is used when configured."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="Message queued")

    result = await make_notifier(handler, callmebot_api_key="cmb-key").send(PHONE, "Hi")
    assert result.success is True
    assert result.method == "callmebot"
    assert seen[0].url.host == "api.callmebot.com"
    assert seen[0].url.params["apikey"] == "cmb-key"
    assert seen[0].url.params["phone"] == PHONE


@pytest.mark.asyncio
async def test_falls_back_to_cloud_api() -> None:
    """A failing backend hands over to the next configured one."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.callmebot.com":
            return httpx.Response(500, text="APIKey is invalid")
        assert request.headers["Authorization"] == "Bearer cloud-token"
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    notifier = make_notifier(
        handler,
        callmebot_api_key="cmb-key",
        whatsapp_cloud_api_token="cloud-token",
        whatsapp_cloud_phone_number_id="12345",
    )
    result = await notifier.send(PHONE, "Hi")
    assert result.success is True
    assert result.method == "cloud_api"
    assert result.message_id == "wamid.1"


@pytest.mark.asyncio
async def test_transport_error_falls_back_to_twilio() -> None:
    """Network errors count as backend failures."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "graph.facebook.com":
            raise httpx.ConnectError("connection refused", request=request)
        assert request.url.path.endswith("/Messages.json")
        return httpx.Response(201, json={"sid": "SM123"})

    notifier = make_notifier(
        handler,
        whatsapp_cloud_api_token="cloud-token",
        whatsapp_cloud_phone_number_id="12345",
        twilio_account_sid="AC1",
        twilio_auth_token="secret",
    )
    result = await notifier.send(PHONE, "Hi")
    assert result.success is True
    assert result.method == "twilio"
    assert result.message_id == "SM123"


@pytest.mark.asyncio
async def test_all_backends_failing_returns_manual_link() -> None:
    """When every configured backend fails the manual link is returned."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    result = await make_notifier(handler, callmebot_api_key="cmb-key").send(PHONE, "Hi")
    assert result.method == "manual_link"
    assert result.manual_link.startswith(f"https://wa.me/{PHONE}")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("9876543210", "919876543210"),
        ("98765-43210", "919876543210"),
        ("+91 98765 43210", "919876543210"),
        ("447911123456", "447911123456"),
    ],
)
def test_normalize_phone(raw: str, expected: str) -> None:
    """Bare national numbers get the default country code."""
    assert normalize_phone(raw, "91") == expected


def test_patient_message_online() -> None:
    """Online confirmations carry both meeting links."""
    appointment = make_appointment(
        video_links=VideoLinks(
            jitsi_url="https://meet.jit.si/room-abc",
            meet_url="https://meet.google.com/room-abc",
        )
    )
    text = render_patient_message(appointment, "Dr. K. Madhusudana", "The Clinic")
    assert "online consultation with *Dr. K. Madhusudana*" in text
    assert "Tuesday, 7 January 2025" in text
    assert "8:30 PM" in text
    assert "https://meet.jit.si/room-abc" in text
    assert "https://meet.google.com/room-abc" in text
    assert text.endswith("*The Clinic*")


def test_doctor_message_offline() -> None:
    """Clinic visit alerts list the patient without meeting links."""
    appointment = make_appointment(consult_type="offline", time="10:15", date="2025-01-08")
    text = render_doctor_message(appointment)
    assert text.startswith("🔔 *New Clinic Appointment*")
    assert "Name: Asha Rao" in text
    assert "Age: 34 years" in text
    assert "Gender: Female" in text
    assert "10:15 AM" in text
    assert "Video Call Link" not in text
