"""Schedule storage: the weekly offline template and per-date overrides."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.exceptions import (
    NotFoundException,
    PersistenceException,
    UnsupportedOperationException,
)
from clinic_booking.core.redis_client import CacheManager
from clinic_booking.models.availability import availability, availability_overrides
from clinic_booking.schemas.common import ConsultType

logger = structlog.get_logger(__name__)

ONLINE_TEMPLATE_UNSUPPORTED = (
    "Online consultation schedules are fixed by day of week and cannot be permanently "
    "changed. Use a date-specific override instead."
)


class ScheduleService:
    """Service for reading and editing the doctor's schedule."""

    # The template changes only through admin edits, which invalidate the key
    TEMPLATE_CACHE_TTL = 3600

    def __init__(
        self,
        db: AsyncSession,
        doctor_id: str,
        cache_manager: CacheManager | None = None,
    ):
        """Initialize service with database session, doctor and optional cache."""
        self.db = db
        self.doctor_id = doctor_id
        self.cache = cache_manager

    def _template_cache_key(self) -> str:
        return f"schedule:template:{self.doctor_id}"

    async def get_weekly_template(self) -> list[str]:
        """
        Get the weekly offline slot template.

        Returns:
            Ordered HH:MM slots; empty when no template has been seeded
        """
        if self.cache:
            cached = self.cache.get_json(self._template_cache_key())
            if cached is not None:
                return list(cached)

        stmt = select(availability.c.day_slots).where(availability.c.doctor_id == self.doctor_id)
        result = await self.db.execute(stmt)
        day_slots = result.scalar_one_or_none()
        template = list(day_slots or [])

        if self.cache:
            self.cache.set_json(self._template_cache_key(), template, ttl=self.TEMPLATE_CACHE_TTL)

        return template

    async def set_weekly_template(
        self,
        slots: list[str],
        consult_type: ConsultType = ConsultType.OFFLINE,
    ) -> list[str]:
        """
        Replace the weekly template wholesale.

        Args:
            slots: New ordered slot list
            consult_type: Only offline templates are stored

        Returns:
            The stored template

        Raises:
            UnsupportedOperationException: For online schedules
        """
        if consult_type != ConsultType.OFFLINE:
            raise UnsupportedOperationException(ONLINE_TEMPLATE_UNSUPPORTED)

        now = datetime.now(UTC)
        try:
            exists = await self.db.execute(
                select(availability.c.doctor_id).where(availability.c.doctor_id == self.doctor_id)
            )
            if exists.first() is None:
                stmt = insert(availability).values(
                    doctor_id=self.doctor_id, day_slots=list(slots), updated_at=now
                )
            else:
                stmt = (
                    update(availability)  # type: ignore[assignment]
                    .where(availability.c.doctor_id == self.doctor_id)
                    .values(day_slots=list(slots), updated_at=now)
                )
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("weekly_template_update_failed", error=str(e))
            raise PersistenceException("Failed to update the default schedule")

        if self.cache:
            self.cache.delete(self._template_cache_key())

        logger.info("weekly_template_updated", doctor_id=self.doctor_id, slot_count=len(slots))
        return list(slots)

    async def get_override(self, date: str, consult_type: ConsultType) -> dict | None:
        """
        Get the override for a date and consultation type.

        Args:
            date: Normalized YYYY-MM-DD date
            consult_type: Online or offline

        Returns:
            Override row as a dict, or None
        """
        stmt = select(availability_overrides).where(self._override_key(date, consult_type))
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def set_override(
        self,
        date: str,
        consult_type: ConsultType,
        closed: bool | None = None,
        slots: list[str] | None = None,
    ) -> dict:
        """
        Create or merge an override for one date.

        Fields passed as None are left untouched on an existing override; a
        supplied slot list replaces the stored one entirely.

        Returns:
            The stored override
        """
        values: dict = {"updated_at": datetime.now(UTC)}
        if closed is not None:
            values["closed"] = closed
        if slots is not None:
            values["slots"] = list(slots)

        try:
            existing = await self.get_override(date, consult_type)
            if existing is None:
                values.setdefault("closed", False)
                stmt = insert(availability_overrides).values(
                    doctor_id=self.doctor_id,
                    date=date,
                    consult_type=consult_type.value,
                    **values,
                )
            else:
                stmt = (
                    update(availability_overrides)  # type: ignore[assignment]
                    .where(self._override_key(date, consult_type))
                    .values(**values)
                )
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("override_update_failed", date=date, error=str(e))
            raise PersistenceException("Failed to save the schedule override")

        override = await self.get_override(date, consult_type)
        logger.info(
            "override_saved",
            date=date,
            consult_type=consult_type.value,
            closed=override["closed"] if override else None,
        )
        return override  # type: ignore[return-value]

    async def delete_override(self, date: str, consult_type: ConsultType) -> None:
        """
        Delete the override for a date and consultation type.

        Raises:
            NotFoundException: If no override exists
        """
        try:
            result = await self.db.execute(
                delete(availability_overrides).where(self._override_key(date, consult_type))
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("override_delete_failed", date=date, error=str(e))
            raise PersistenceException("Failed to delete the schedule override")

        if result.rowcount == 0:
            raise NotFoundException("No override found for this date.")

        logger.info("override_deleted", date=date, consult_type=consult_type.value)

    def _override_key(self, date: str, consult_type: ConsultType):  # noqa: ANN202
        return and_(
            availability_overrides.c.doctor_id == self.doctor_id,
            availability_overrides.c.date == date,
            availability_overrides.c.consult_type == consult_type.value,
        )
