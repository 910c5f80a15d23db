"""Tests for booking endpoints."""

import asyncio
from datetime import UTC, datetime
from uuid import UUID

import pytest
from httpx import AsyncClient

BOOKINGS_URL = "/api/v1/bookings"
SLOTS_URL = "/api/v1/bookings/slots"


async def list_appointments(client: AsyncClient, headers: dict, **params) -> dict:
    response = await client.get(
        f"{BOOKINGS_URL}/doctor/appointments", params=params, headers=headers
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_book_offline_appointment(client: AsyncClient, booking_data: dict, notifier) -> None:
    """Booking an offered slot creates the appointment and notifies both parties."""
    response = await client.post(BOOKINGS_URL, json=booking_data)
    assert response.status_code == 201
    data = response.json()

    appointment = data["appointment"]
    assert data["message"] == "Appointment booked successfully!"
    assert appointment["date"] == "2025-01-01"
    assert appointment["time"] == "10:15"
    assert appointment["status"] == "booked"
    assert appointment["consultType"] == "offline"
    assert appointment["bookingId"] == appointment["id"]
    assert appointment["videoLinks"] is None

    assert data["notifications"]["dispatched"] is True
    phones = [phone for phone, _ in notifier.sent]
    assert phones == ["919876543210", "918762624188"]
    patient_text = notifier.sent[0][1]
    assert "Asha Rao" in patient_text
    assert "Wednesday, 1 January 2025" in patient_text
    assert "10:15 AM" in patient_text


@pytest.mark.asyncio
async def test_book_online_appointment_has_video_links(
    client: AsyncClient,
    booking_data: dict,
    notifier,
) -> None:
    """Online bookings get meeting links derived from the booking id."""
    booking = {**booking_data, "date": "2025-01-07", "time": "20:30", "consultType": "online"}
    response = await client.post(BOOKINGS_URL, json=booking)
    assert response.status_code == 201
    appointment = response.json()["appointment"]

    booking_id = UUID(appointment["bookingId"])
    links = appointment["videoLinks"]
    assert links["jitsiUrl"] == f"https://meet.jit.si/dr-madhusudhan-{booking_id.hex}"
    assert links["meetUrl"].endswith(booking_id.hex[:8])
    assert links["jitsiUrl"] in notifier.sent[0][1]
    assert "8:30 PM" in notifier.sent[1][1]


@pytest.mark.asyncio
async def test_booked_slot_leaves_availability(client: AsyncClient, booking_data: dict) -> None:
    """After booking, the slot no longer appears among available slots."""
    booking = {**booking_data, "date": "2025-01-02"}
    response = await client.post(BOOKINGS_URL, json=booking)
    assert response.status_code == 201

    response = await client.get(SLOTS_URL, params={"date": "2025-01-02", "consultType": "offline"})
    slots = response.json()["availableSlots"]
    assert "10:15" not in slots
    assert "10:30" in slots


@pytest.mark.asyncio
async def test_double_booking_conflicts(
    client: AsyncClient,
    booking_data: dict,
    admin_headers: dict,
) -> None:
    """A second booking for the same slot is rejected with 409."""
    first = await client.post(BOOKINGS_URL, json=booking_data)
    assert first.status_code == 201

    second = await client.post(BOOKINGS_URL, json={**booking_data, "patientName": "Ravi"})
    assert second.status_code == 409
    assert second.json()["error"] == "AlreadyBookedError"

    data = await list_appointments(client, admin_headers)
    assert data["total"] == 1


@pytest.mark.asyncio
async def test_concurrent_bookings_single_winner(
    client: AsyncClient,
    booking_data: dict,
    admin_headers: dict,
) -> None:
    """Of two simultaneous bookings for one slot exactly one succeeds."""
    booking = {**booking_data, "date": "2025-01-03", "time": "11:00"}
    responses = await asyncio.gather(
        client.post(BOOKINGS_URL, json=booking),
        client.post(BOOKINGS_URL, json={**booking, "patientName": "Ravi"}),
    )

    assert sorted(response.status_code for response in responses) == [201, 409]
    data = await list_appointments(client, admin_headers, startDate="2025-01-03")
    assert [(item["date"], item["time"]) for item in data["items"]] == [("2025-01-03", "11:00")]


@pytest.mark.asyncio
async def test_slot_not_offered(
    client: AsyncClient,
    booking_data: dict,
    admin_headers: dict,
) -> None:
    """Times outside the offered set are rejected and nothing is written."""
    response = await client.post(BOOKINGS_URL, json={**booking_data, "time": "10:20"})
    assert response.status_code == 400
    assert response.json()["error"] == "SlotNotOfferedError"

    data = await list_appointments(client, admin_headers)
    assert data["total"] == 0


@pytest.mark.asyncio
async def test_offline_booking_on_closed_day(client: AsyncClient, booking_data: dict) -> None:
    """Offline bookings on Sunday are not offered."""
    response = await client.post(BOOKINGS_URL, json={**booking_data, "date": "2025-01-05"})
    assert response.status_code == 400
    assert response.json()["error"] == "SlotNotOfferedError"


@pytest.mark.asyncio
async def test_booking_ignores_lead_time(
    client: AsyncClient,
    booking_data: dict,
    clock,
) -> None:
    """A slot shown moments ago stays bookable inside the lead-time window."""
    clock.now = datetime(2025, 1, 1, 4, 40, tzinfo=UTC)  # 10:10 IST
    response = await client.post(BOOKINGS_URL, json=booking_data)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_booking_accepts_iso_timestamp_date(client: AsyncClient, booking_data: dict) -> None:
    """Timestamp dates are normalized to the reference-timezone calendar date."""
    booking = {**booking_data, "date": "2025-01-01T20:00:00Z"}  # 01:30 IST on Jan 2
    response = await client.post(BOOKINGS_URL, json=booking)
    assert response.status_code == 201
    assert response.json()["appointment"]["date"] == "2025-01-02"


@pytest.mark.asyncio
async def test_booking_missing_fields(client: AsyncClient, booking_data: dict) -> None:
    """Missing fields are request validation errors."""
    booking = {key: value for key, value in booking_data.items() if key != "patientPhone"}
    response = await client.post(BOOKINGS_URL, json=booking)
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_booking_malformed_time(client: AsyncClient, booking_data: dict) -> None:
    """Times must be 24-hour HH:MM values."""
    response = await client.post(BOOKINGS_URL, json={**booking_data, "time": "10:15 AM"})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_notifier_failure_does_not_fail_booking(
    client: AsyncClient,
    booking_data: dict,
    notifier,
) -> None:
    """Notification errors are reported, never raised."""
    notifier.fail = True
    response = await client.post(BOOKINGS_URL, json=booking_data)
    assert response.status_code == 201
    notifications = response.json()["notifications"]
    assert notifications["dispatched"] is False
    assert notifications["patient"] is None


@pytest.mark.asyncio
async def test_complete_appointment_releases_slot(
    client: AsyncClient,
    booking_data: dict,
    admin_headers: dict,
) -> None:
    """Completing an appointment frees its slot for rebooking."""
    response = await client.post(BOOKINGS_URL, json=booking_data)
    booking_id = response.json()["appointment"]["bookingId"]

    response = await client.patch(f"{BOOKINGS_URL}/{booking_id}/complete", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Appointment marked as completed"
    assert data["appointment"]["status"] == "completed"
    assert data["appointment"]["completedAt"] is not None

    response = await client.get(SLOTS_URL, params={"date": "2025-01-01", "consultType": "offline"})
    assert "10:15" in response.json()["availableSlots"]

    response = await client.post(BOOKINGS_URL, json=booking_data)
    assert response.status_code == 201

    response = await client.patch(f"{BOOKINGS_URL}/{booking_id}/complete", headers=admin_headers)
    assert response.json()["message"] == "Appointment already completed"


@pytest.mark.asyncio
async def test_complete_requires_admin(client: AsyncClient, booking_data: dict) -> None:
    """Completing appointments is an admin action."""
    response = await client.post(BOOKINGS_URL, json=booking_data)
    booking_id = response.json()["appointment"]["bookingId"]

    response = await client.patch(f"{BOOKINGS_URL}/{booking_id}/complete")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


@pytest.mark.asyncio
async def test_complete_unknown_appointment(client: AsyncClient, admin_headers: dict) -> None:
    """Unknown appointments are 404."""
    response = await client.patch(
        f"{BOOKINGS_URL}/00000000-0000-0000-0000-000000000000/complete",
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"


@pytest.mark.asyncio
async def test_check_bookings_by_phone(client: AsyncClient, booking_data: dict, clock) -> None:
    """Only the patient's upcoming active appointments are listed."""
    await client.post(BOOKINGS_URL, json=booking_data)
    await client.post(BOOKINGS_URL, json={**booking_data, "date": "2025-01-08"})
    await client.post(
        BOOKINGS_URL,
        json={**booking_data, "date": "2025-01-09", "patientPhone": "9000000000"},
    )

    clock.now = datetime(2025, 1, 2, 3, 30, tzinfo=UTC)
    response = await client.get(f"{BOOKINGS_URL}/check", params={"phone": "9876543210"})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["date"] == "2025-01-08"


@pytest.mark.asyncio
async def test_get_doctor_profile(client: AsyncClient) -> None:
    """The clinic's doctor profile is public."""
    response = await client.get(f"{BOOKINGS_URL}/doctor")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "primary-doctor"
    assert data["name"] == "Dr. K. Madhusudana"
    assert data["experienceYears"] == 15


@pytest.mark.asyncio
async def test_doctor_appointments_filters(
    client: AsyncClient,
    booking_data: dict,
    admin_headers: dict,
) -> None:
    """The dashboard filters by status and date range, newest date first."""
    await client.post(BOOKINGS_URL, json=booking_data)
    await client.post(BOOKINGS_URL, json={**booking_data, "date": "2025-01-08"})
    response = await client.post(BOOKINGS_URL, json={**booking_data, "date": "2025-01-09"})
    booking_id = response.json()["appointment"]["bookingId"]
    await client.patch(f"{BOOKINGS_URL}/{booking_id}/complete", headers=admin_headers)

    data = await list_appointments(client, admin_headers)
    assert [item["date"] for item in data["items"]] == ["2025-01-09", "2025-01-08", "2025-01-01"]

    data = await list_appointments(client, admin_headers, status="booked", startDate="2025-01-02")
    assert [item["date"] for item in data["items"]] == ["2025-01-08"]

    data = await list_appointments(client, admin_headers, status="completed")
    assert data["total"] == 1

    response = await client.get(f"{BOOKINGS_URL}/doctor/appointments")
    assert response.status_code == 401
