"""Shared schema primitives."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from clinic_booking.core.clock import is_valid_slot_time


class CamelModel(BaseModel):
    """Base schema exchanged in camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ConsultType(str, Enum):
    """Consultation type enumeration."""

    ONLINE = "online"
    OFFLINE = "offline"


def validate_slot_list(slots: list[str]) -> list[str]:
    """Check every slot is ``HH:MM`` and that no slot repeats."""
    invalid = [slot for slot in slots if not is_valid_slot_time(slot)]
    if invalid:
        raise ValueError(f"Slots must be 24-hour HH:MM values, got {invalid}")
    if len(set(slots)) != len(slots):
        raise ValueError("Slots must be unique")
    return slots
