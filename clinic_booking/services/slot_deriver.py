"""Derive the slots a date offers before bookings and the clock are considered.

Pure functions only: the caller supplies the weekly template and the override
already loaded from storage.
"""

from dataclasses import dataclass, field
from datetime import date

from clinic_booking.schemas.common import ConsultType

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)

# Weekdays on which the clinic does not see patients in person
OFFLINE_CLOSED_DAYS = frozenset({SUNDAY, MONDAY})

OFFLINE_CLOSED_REASON = (
    "Clinic is closed on Sunday and Monday. Please book a video call consultation instead."
)
OVERRIDE_CLOSED_REASON = "The doctor is not available on this date."

# Online consultations: 15 minute calls separated by 10 minute buffers on
# Sunday/Monday mornings, two evening calls Tuesday to Saturday.
ONLINE_SLOT_POLICY: tuple[tuple[frozenset[int], tuple[str, ...]], ...] = (
    (
        frozenset({SUNDAY, MONDAY}),
        ("10:00", "10:25", "10:50", "11:15", "11:40", "12:05", "12:30"),
    ),
    (
        frozenset({TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY}),
        ("20:30", "21:00"),
    ),
)


@dataclass(frozen=True)
class OfferedSlots:
    """Ordered slots a date offers, or a closure with a display reason."""

    slots: list[str] = field(default_factory=list)
    closed: bool = False
    reason: str | None = None

    def __contains__(self, time: str) -> bool:
        return not self.closed and time in self.slots


def online_slots_for(day: date) -> list[str]:
    """Look up the online policy for a weekday; unknown weekdays offer nothing."""
    weekday = day.weekday()
    for weekdays, slots in ONLINE_SLOT_POLICY:
        if weekday in weekdays:
            return list(slots)
    return []


def derive_default_slots(
    day: date,
    consult_type: ConsultType,
    template: list[str],
) -> list[str]:
    """
    Default slots for a date ignoring overrides, bookings and closed weekdays.

    Used by the admin schedule editor to prefill a date's slot list.
    """
    if consult_type == ConsultType.ONLINE:
        return online_slots_for(day)
    return list(template)


def derive_offered_slots(
    day: date,
    consult_type: ConsultType,
    template: list[str],
    override: dict | None = None,
) -> OfferedSlots:
    """
    Compute the slots offered on a date for one consultation type.

    An override for the date takes precedence: a closing override closes the
    day and a non-empty slot list is returned verbatim. Otherwise offline
    visits use the weekly template except on closed weekdays, and online
    consultations follow the weekday policy table.

    Args:
        day: Calendar date in the reference timezone
        consult_type: Online or offline
        template: Weekly offline slot template
        override: Stored override row for (day, consult_type), if any

    Returns:
        Offered slots in their configured order
    """
    if override is not None:
        if override.get("closed"):
            return OfferedSlots(closed=True, reason=OVERRIDE_CLOSED_REASON)
        # An empty list carries no schedule and falls through to the defaults
        if override.get("slots"):
            return OfferedSlots(slots=list(override["slots"]))

    if consult_type == ConsultType.OFFLINE:
        if day.weekday() in OFFLINE_CLOSED_DAYS:
            return OfferedSlots(closed=True, reason=OFFLINE_CLOSED_REASON)
        return OfferedSlots(slots=list(template))

    return OfferedSlots(slots=online_slots_for(day))
