import os
import tempfile
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

# Load environment variables from .env file, then pin the test configuration
load_dotenv()

TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="clinic_booking_tests_"))
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_DIR / 'test.db'}"

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["CACHE_ENABLED"] = "false"
os.environ["ADMIN_SECRET"] = "test-admin-secret"
os.environ["DOCTOR_ID"] = "primary-doctor"
os.environ["LOG_FORMAT"] = "console"

from clinic_booking.core.redis_client import get_cache_manager  # noqa: E402
from clinic_booking.database import build_engine, get_db  # noqa: E402
from clinic_booking.dependencies import get_now  # noqa: E402
from clinic_booking.main import app  # noqa: E402
from clinic_booking.models import availability, doctors, metadata  # noqa: E402
from clinic_booking.schemas.appointments import NotificationResult  # noqa: E402
from clinic_booking.services.notification_service import get_notifier  # noqa: E402

DOCTOR_ID = "primary-doctor"
ADMIN_HEADERS = {"X-Admin-Secret": "test-admin-secret"}

# Morning and evening clinic sessions, every 15 minutes
DEFAULT_TEMPLATE = [
    f"{minutes // 60:02d}:{minutes % 60:02d}"
    for start, end in ((10 * 60 + 15, 13 * 60 + 45), (15 * 60 + 15, 17 * 60 + 45))
    for minutes in range(start, end + 1, 15)
]

# 2025-01-01 is a Wednesday; 09:00 IST
DEFAULT_NOW = datetime(2025, 1, 1, 3, 30, tzinfo=UTC)

# NullPool gives every session its own SQLite connection, as concurrent requests would have
test_engine = build_engine(TEST_DATABASE_URL, poolclass=NullPool)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class FrozenClock:
    """Injectable clock; tests move it by assigning ``now``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeNotifier:
    """Records sent messages instead of calling WhatsApp."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    async def send(self, phone: str, text: str) -> NotificationResult:
        if self.fail:
            raise RuntimeError("notifier offline")
        self.sent.append((phone, text))
        return NotificationResult(success=True, method="fake", message_id=f"msg-{len(self.sent)}")


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh schema seeded with the doctor and default template."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)
        await conn.execute(
            insert(doctors).values(
                id=DOCTOR_ID,
                name="Dr. K. Madhusudana",
                specialization="General Physician | Cardiologist",
                experience_years=15,
                clinic_name="Dr. K. Madhusudana Clinic",
            )
        )
        await conn.execute(
            insert(availability).values(doctor_id=DOCTOR_ID, day_slots=DEFAULT_TEMPLATE)
        )

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
def clock() -> FrozenClock:
    """Clock pinned to Wednesday 2025-01-01 09:00 IST."""
    return FrozenClock(DEFAULT_NOW)


@pytest.fixture
def notifier() -> FakeNotifier:
    """Notifier double."""
    return FakeNotifier()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    clock: FrozenClock,
    notifier: FakeNotifier,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_cache_manager] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Headers for admin routes."""
    return dict(ADMIN_HEADERS)


@pytest.fixture
def booking_data() -> dict:
    """Offline booking on Wednesday 2025-01-01 at 10:15."""
    return {
        "date": "2025-01-01",
        "time": "10:15",
        "patientName": "Asha Rao",
        "patientPhone": "9876543210",
        "age": 34,
        "gender": "female",
        "consultType": "offline",
    }


@pytest.fixture
def default_template() -> list[str]:
    """Weekly offline template seeded into the test database."""
    return list(DEFAULT_TEMPLATE)
