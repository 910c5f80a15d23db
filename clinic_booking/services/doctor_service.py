"""Doctor profile lookup."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.exceptions import NotFoundException
from clinic_booking.core.redis_client import CacheManager
from clinic_booking.models.doctors import doctors
from clinic_booking.schemas.doctors import DoctorResponse


class DoctorService:
    """Service for the clinic's doctor profile."""

    DOCTOR_CACHE_TTL = 900  # 15 minutes

    def __init__(self, db: AsyncSession, cache_manager: CacheManager | None = None):
        """Initialize service with database session and optional cache manager."""
        self.db = db
        self.cache = cache_manager

    @staticmethod
    def _get_doctor_cache_key(doctor_id: str) -> str:
        return f"doctor:{doctor_id}"

    async def get_doctor(self, doctor_id: str) -> DoctorResponse:
        """
        Get the doctor profile.

        Args:
            doctor_id: Doctor ID

        Returns:
            Doctor profile

        Raises:
            NotFoundException: If the doctor has not been seeded
        """
        if self.cache:
            cached = self.cache.get_json(self._get_doctor_cache_key(doctor_id))
            if cached:
                return DoctorResponse.model_validate(cached)

        result = await self.db.execute(select(doctors).where(doctors.c.id == doctor_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Doctor not found")

        doctor = DoctorResponse.model_validate(dict(row))
        if self.cache:
            self.cache.set_json(
                self._get_doctor_cache_key(doctor_id),
                doctor.model_dump(),
                ttl=self.DOCTOR_CACHE_TTL,
            )
        return doctor
