"""Doctor schemas."""

from pydantic import Field

from clinic_booking.schemas.common import CamelModel


class DoctorResponse(CamelModel):
    """Public doctor profile."""

    id: str
    name: str
    specialization: str | None = None
    experience_years: int | None = Field(None, ge=0)
    clinic_name: str | None = None
    address: str | None = None
    phone_number: str | None = None
    email: str | None = None
    photo_url: str | None = None
    about: str | None = None
