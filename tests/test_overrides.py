"""Tests for admin schedule override endpoints."""

import pytest
from httpx import AsyncClient

OVERRIDE_URL = "/api/v1/availability/override"
SLOTS_URL = "/api/v1/bookings/slots"


@pytest.mark.asyncio
async def test_override_requires_admin_secret(client: AsyncClient) -> None:
    """Admin routes reject missing or wrong secrets."""
    params = {"date": "2025-01-08", "consultType": "offline"}
    response = await client.get(OVERRIDE_URL, params=params)
    assert response.status_code == 401

    response = await client.get(OVERRIDE_URL, params=params, headers={"X-Admin-Secret": "nope"})
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


@pytest.mark.asyncio
async def test_get_missing_override(client: AsyncClient, admin_headers: dict) -> None:
    """Dates without an override report null."""
    response = await client.get(
        OVERRIDE_URL,
        params={"date": "2025-01-08", "consultType": "offline"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"override": None}


@pytest.mark.asyncio
async def test_once_override_round_trip(client: AsyncClient, admin_headers: dict) -> None:
    """A once override is stored for its date and read back."""
    response = await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "consultType": "offline", "slots": ["11:00", "11:30"]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "once"
    assert data["override"]["slots"] == ["11:00", "11:30"]
    assert data["override"]["closed"] is False

    response = await client.get(
        OVERRIDE_URL,
        params={"date": "2025-01-08T10:00:00+05:30", "consultType": "offline"},
        headers=admin_headers,
    )
    override = response.json()["override"]
    assert override["date"] == "2025-01-08"
    assert override["consultType"] == "offline"
    assert override["slots"] == ["11:00", "11:30"]


@pytest.mark.asyncio
async def test_override_fields_merge(client: AsyncClient, admin_headers: dict) -> None:
    """Omitted fields keep their stored value; slot lists are replaced whole."""
    await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "slots": ["11:00", "11:30"]},
        headers=admin_headers,
    )
    response = await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "closed": True},
        headers=admin_headers,
    )
    override = response.json()["override"]
    assert override["closed"] is True
    assert override["slots"] == ["11:00", "11:30"]

    response = await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "closed": False, "slots": ["12:00"]},
        headers=admin_headers,
    )
    override = response.json()["override"]
    assert override["closed"] is False
    assert override["slots"] == ["12:00"]

    response = await client.get(SLOTS_URL, params={"date": "2025-01-08", "consultType": "offline"})
    assert response.json()["availableSlots"] == ["12:00"]


@pytest.mark.asyncio
async def test_online_override_is_per_type(client: AsyncClient, admin_headers: dict) -> None:
    """Online overrides leave the offline schedule alone."""
    response = await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-07", "consultType": "online", "slots": ["19:00"]},
        headers=admin_headers,
    )
    assert response.status_code == 200

    response = await client.get(SLOTS_URL, params={"date": "2025-01-07", "consultType": "online"})
    assert response.json()["availableSlots"] == ["19:00"]

    response = await client.get(SLOTS_URL, params={"date": "2025-01-07", "consultType": "offline"})
    assert "19:00" not in response.json()["availableSlots"]


@pytest.mark.asyncio
async def test_always_mode_updates_template(client: AsyncClient, admin_headers: dict) -> None:
    """An always edit replaces the weekly offline template."""
    response = await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "slots": ["09:00", "09:30"], "applyMode": "always"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "always"
    assert data["slots"] == ["09:00", "09:30"]
    assert data["override"] is None

    for day in ("2025-01-09", "2025-01-10"):
        response = await client.get(SLOTS_URL, params={"date": day, "consultType": "offline"})
        assert response.json()["availableSlots"] == ["09:00", "09:30"]

    response = await client.get(
        OVERRIDE_URL,
        params={"date": "2025-01-08", "consultType": "offline"},
        headers=admin_headers,
    )
    assert response.json()["override"] is None


@pytest.mark.asyncio
async def test_always_mode_rejected_for_online(client: AsyncClient, admin_headers: dict) -> None:
    """The online schedule cannot be changed permanently."""
    response = await client.put(
        OVERRIDE_URL,
        json={
            "date": "2025-01-07",
            "consultType": "online",
            "slots": ["19:00"],
            "applyMode": "always",
        },
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "UnsupportedOperation"


@pytest.mark.asyncio
async def test_always_mode_requires_slots(client: AsyncClient, admin_headers: dict) -> None:
    """Always edits need the new template."""
    response = await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "closed": True, "applyMode": "always"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_always_mode_rejects_empty_template(
    client: AsyncClient,
    admin_headers: dict,
    default_template: list,
) -> None:
    """An always edit cannot wipe the weekly template."""
    response = await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "slots": [], "applyMode": "always"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"

    response = await client.get(SLOTS_URL, params={"date": "2025-01-08", "consultType": "offline"})
    assert response.json()["availableSlots"] == default_template


@pytest.mark.asyncio
async def test_invalid_override_slots(client: AsyncClient, admin_headers: dict) -> None:
    """Slots must be unique HH:MM values."""
    for slots in (["9am"], ["10:00", "10:00"]):
        response = await client.put(
            OVERRIDE_URL,
            json={"date": "2025-01-08", "slots": slots},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_delete_override_restores_defaults(
    client: AsyncClient,
    admin_headers: dict,
    default_template: list,
) -> None:
    """Deleting an override restores the default schedule."""
    await client.put(
        OVERRIDE_URL,
        json={"date": "2025-01-08", "closed": True},
        headers=admin_headers,
    )
    response = await client.delete(
        OVERRIDE_URL,
        params={"date": "2025-01-08", "consultType": "offline"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["date"] == "2025-01-08"

    response = await client.get(SLOTS_URL, params={"date": "2025-01-08", "consultType": "offline"})
    assert response.json()["availableSlots"] == default_template

    response = await client.delete(
        OVERRIDE_URL,
        params={"date": "2025-01-08", "consultType": "offline"},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"
