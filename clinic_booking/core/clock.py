"""Date and time-of-day helpers for the clinic's reference timezone.

Everything here takes ``now`` and the timezone explicitly so slot derivation
stays deterministic. The only place the wall clock is read is ``utc_now``,
which the API layer injects as a dependency.
"""

import re
from datetime import UTC, date, datetime, tzinfo

from clinic_booking.core.exceptions import ValidationException

DATE_FORMAT = "%Y-%m-%d"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def utc_now() -> datetime:
    """Return the current aware UTC time."""
    return datetime.now(UTC)


def to_reference(now: datetime, tz: tzinfo) -> datetime:
    """Convert ``now`` to the reference timezone; naive values are taken as UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(tz)


def today_in(now: datetime, tz: tzinfo) -> date:
    """Calendar date of ``now`` in the reference timezone."""
    return to_reference(now, tz).date()


def minutes_since_midnight(now: datetime, tz: tzinfo) -> int:
    """Minutes elapsed since local midnight in the reference timezone."""
    local = to_reference(now, tz)
    return local.hour * 60 + local.minute


def parse_date(value: str | date, tz: tzinfo) -> date:
    """
    Parse a request date into a calendar date in the reference timezone.

    Accepts ``YYYY-MM-DD`` or a full ISO-8601 timestamp. Aware timestamps are
    converted to the reference timezone before the date is taken; naive ones
    are read as reference-local.

    Raises:
        ValidationException: If the value is not a valid date
    """
    if isinstance(value, datetime):
        return value.astimezone(tz).date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value

    raw = (value or "").strip()
    if not raw:
        raise ValidationException("Date is required.")

    try:
        if _DATE_RE.match(raw):
            return date.fromisoformat(raw)
        if not _TIMESTAMP_RE.match(raw):
            raise ValueError(raw)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationException(f"Invalid date format: {value!r}. Expected YYYY-MM-DD.")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.date()


def normalize_date(value: str | date, tz: tzinfo) -> str:
    """Normalize a request date to canonical ``YYYY-MM-DD``."""
    return parse_date(value, tz).strftime(DATE_FORMAT)


def is_valid_slot_time(value: str) -> bool:
    """Check a value is a 24-hour ``HH:MM`` time."""
    return bool(_TIME_RE.match(value or ""))


def slot_minutes(value: str) -> int:
    """Convert an ``HH:MM`` slot to minutes since midnight."""
    match = _TIME_RE.match(value or "")
    if not match:
        raise ValidationException(f"Invalid time format: {value!r}. Expected HH:MM.")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_display_date(value: str) -> str:
    """Render ``2025-01-07`` as ``Tuesday, 7 January 2025``."""
    parsed = date.fromisoformat(value)
    return f"{parsed.strftime('%A')}, {parsed.day} {parsed.strftime('%B %Y')}"


def format_display_time(value: str) -> str:
    """Render ``20:30`` as ``8:30 PM``."""
    hours, minutes = value.split(":")
    hour = int(hours)
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else 12 if hour == 0 else hour
    return f"{display_hour}:{minutes} {suffix}"
