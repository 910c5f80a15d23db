"""Appointment persistence and the transactional slot reservation."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.exceptions import PersistenceException, SlotConflict
from clinic_booking.models.appointments import appointments
from clinic_booking.schemas.appointments import ACTIVE_STATUSES, AppointmentStatus

logger = structlog.get_logger(__name__)


class BookingStore:
    """Reads and writes appointments for the booking flow."""

    def __init__(self, db: AsyncSession):
        """Initialize store with database session."""
        self.db = db

    async def list_booked_times(self, doctor_id: str, date: str) -> set[str]:
        """
        Get the times already held on a date.

        Completed appointments do not hold their slot.

        Args:
            doctor_id: Doctor ID
            date: Normalized YYYY-MM-DD date

        Returns:
            Set of HH:MM times
        """
        stmt = select(appointments.c.time).where(
            and_(
                appointments.c.doctor_id == doctor_id,
                appointments.c.date == date,
                appointments.c.status.in_(ACTIVE_STATUSES),
            )
        )
        result = await self.db.execute(stmt)
        return set(result.scalars().all())

    async def reserve(
        self,
        doctor_id: str,
        date: str,
        time: str,
        values: dict[str, Any],
    ) -> UUID:
        """
        Atomically reserve a slot and insert the appointment.

        The slot key is re-read inside the transaction; the partial unique
        index on (doctor_id, date, time) for active statuses rejects a racing
        writer that passed the same check, so exactly one reservation commits.

        Args:
            doctor_id: Doctor ID
            date: Normalized YYYY-MM-DD date
            time: HH:MM slot
            values: Remaining appointment columns

        Returns:
            New appointment ID, also used as the booking ID

        Raises:
            SlotConflict: If the slot is already held
            PersistenceException: On any other store failure
        """
        appointment_id = values.get("id") or uuid4()
        row = {
            **values,
            "id": appointment_id,
            "doctor_id": doctor_id,
            "date": date,
            "time": time,
            "created_at": datetime.now(UTC),
        }

        try:
            existing = await self.db.execute(
                select(appointments.c.id)
                .where(
                    and_(
                        appointments.c.doctor_id == doctor_id,
                        appointments.c.date == date,
                        appointments.c.time == time,
                        appointments.c.status.in_(ACTIVE_STATUSES),
                    )
                )
                .limit(1)
            )
            if existing.first() is not None:
                await self.db.rollback()
                raise SlotConflict(f"{date} {time} is already booked")

            await self.db.execute(insert(appointments).values(**row))
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("slot_reservation_lost_race", date=date, time=time)
            raise SlotConflict(f"{date} {time} is already booked")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("slot_reservation_failed", date=date, time=time, error=str(e))
            raise PersistenceException("Failed to save the appointment")

        return appointment_id

    async def get_appointment(self, appointment_id: UUID) -> dict | None:
        """Get appointment by ID."""
        result = await self.db.execute(
            select(appointments).where(appointments.c.id == appointment_id)
        )
        row = result.mappings().first()
        return dict(row) if row else None

    async def mark_completed(self, appointment_id: UUID) -> dict | None:
        """
        Set an appointment's status to completed.

        Returns:
            Updated appointment, or None if it does not exist
        """
        try:
            await self.db.execute(
                update(appointments)
                .where(appointments.c.id == appointment_id)
                .values(
                    status=AppointmentStatus.COMPLETED.value,
                    completed_at=datetime.now(UTC),
                )
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "appointment_complete_failed",
                appointment_id=str(appointment_id),
                error=str(e),
            )
            raise PersistenceException("Failed to update the appointment")

        return await self.get_appointment(appointment_id)

    async def list_upcoming_by_phone(self, phone: str, today: str) -> list[dict]:
        """
        List a patient's active appointments from today onward.

        Args:
            phone: Patient phone number as entered at booking
            today: Reference-timezone date, YYYY-MM-DD

        Returns:
            Appointments ordered by date then time
        """
        stmt = (
            select(appointments)
            .where(
                and_(
                    appointments.c.patient_phone == phone,
                    appointments.c.status.in_(ACTIVE_STATUSES),
                    appointments.c.date >= today,
                )
            )
            .order_by(appointments.c.date, appointments.c.time)
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list_for_doctor(
        self,
        doctor_id: str,
        status: AppointmentStatus | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[dict]:
        """
        List the doctor's appointments, newest date first.

        Args:
            doctor_id: Doctor ID
            status: Optional status filter
            start_date: Optional inclusive lower date bound
            end_date: Optional inclusive upper date bound

        Returns:
            Matching appointments
        """
        conditions = [appointments.c.doctor_id == doctor_id]

        if status:
            conditions.append(appointments.c.status == status.value)

        if start_date:
            conditions.append(appointments.c.date >= start_date)

        if end_date:
            conditions.append(appointments.c.date <= end_date)

        stmt = (
            select(appointments)
            .where(and_(*conditions))
            .order_by(appointments.c.date.desc(), appointments.c.time)
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]
