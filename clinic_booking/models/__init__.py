"""Database models."""

from sqlalchemy import MetaData

from clinic_booking.models.appointments import appointments
from clinic_booking.models.appointments import metadata as appointments_metadata
from clinic_booking.models.availability import availability, availability_overrides
from clinic_booking.models.availability import metadata as availability_metadata
from clinic_booking.models.doctors import doctors
from clinic_booking.models.doctors import metadata as doctors_metadata

# Combined metadata for create_all and Alembic
metadata = MetaData()
for _source in (doctors_metadata, availability_metadata, appointments_metadata):
    for _table in _source.tables.values():
        _table.to_metadata(metadata)

__all__ = [
    "appointments",
    "availability",
    "availability_overrides",
    "doctors",
    "metadata",
]
