"""Database configuration and connection management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from clinic_booking.config import settings

# Convert sync PostgreSQL URL to async
DATABASE_URL = settings.database_url.replace("postgresql://", "postgresql+asyncpg://")


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine with the pool settings suited to the backend."""
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=settings.debug, **kwargs)
        event.listen(engine.sync_engine, "connect", set_sqlite_pragma)
        return engine

    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,
        connect_args={
            "server_settings": {
                "application_name": settings.app_name,
            },
        },
        **kwargs,
    )


def set_sqlite_pragma(dbapi_conn: Any, connection_record: Any) -> None:
    """Set SQLite connection parameters."""
    cursor = dbapi_conn.cursor()
    # Concurrent writers wait on the lock instead of failing immediately
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


# Create async engine with connection pooling
engine: AsyncEngine = build_engine(DATABASE_URL)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_database_connection() -> bool:
    """Check if database connection is healthy."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
