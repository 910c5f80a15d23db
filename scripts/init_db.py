"""Script to initialize the database and seed the clinic's doctor and schedule."""

import asyncio

from sqlalchemy import insert, select

from clinic_booking.config import settings
from clinic_booking.database import engine
from clinic_booking.models import availability, doctors, metadata


def build_slots(start: str, end: str, step_minutes: int = 15) -> list[str]:
    """List HH:MM slots from ``start`` to ``end`` inclusive."""
    start_h, start_m = (int(part) for part in start.split(":"))
    end_h, end_m = (int(part) for part in end.split(":"))
    return [
        f"{minutes // 60:02d}:{minutes % 60:02d}"
        for minutes in range(start_h * 60 + start_m, end_h * 60 + end_m + 1, step_minutes)
    ]


# Morning and evening clinic sessions
DEFAULT_OFFLINE_SLOTS = build_slots("10:15", "13:45") + build_slots("15:15", "17:45")

DOCTOR_PROFILE = {
    "specialization": "General Physician | Cardiologist",
    "experience_years": 15,
    "address": "4th Cross Road, New Bank Colony, Konankunte, Bangalore - 560078",
    "about": (
        "General Physician and Cardiologist with over 15 years of experience, "
        "focused on preventive health, accurate diagnosis and effective treatment."
    ),
}


async def init_db() -> None:
    """Create all tables, then seed the doctor and weekly template if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

        doctor = await conn.execute(select(doctors.c.id).where(doctors.c.id == settings.doctor_id))
        if doctor.first() is None:
            await conn.execute(
                insert(doctors).values(
                    id=settings.doctor_id,
                    name=settings.doctor_name,
                    clinic_name=settings.clinic_name,
                    phone_number=settings.doctor_phone,
                    **DOCTOR_PROFILE,
                )
            )
            print(f"✓ Seeded doctor {settings.doctor_id}")

        template = await conn.execute(
            select(availability.c.doctor_id).where(availability.c.doctor_id == settings.doctor_id)
        )
        if template.first() is None:
            await conn.execute(
                insert(availability).values(
                    doctor_id=settings.doctor_id,
                    day_slots=DEFAULT_OFFLINE_SLOTS,
                )
            )
            print(f"✓ Seeded {len(DEFAULT_OFFLINE_SLOTS)} default offline slots")

    await engine.dispose()
    print("✓ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_db())
