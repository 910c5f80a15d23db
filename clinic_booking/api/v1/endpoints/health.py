"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from clinic_booking.config import settings
from clinic_booking.core.redis_client import check_redis_connection
from clinic_booking.database import check_database_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health check response including backing services."""

    database: str
    cache: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Report that the API process is up."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check() -> DetailedHealthResponse:
    """
    Report database and cache status.

    The cache is optional, so an unreachable Redis degrades the status while
    a disabled one does not.
    """
    db_healthy = await check_database_connection()

    if settings.cache_enabled:
        cache_healthy = await check_redis_connection()
        cache = "healthy" if cache_healthy else "unhealthy"
    else:
        cache_healthy = True
        cache = "disabled"

    return DetailedHealthResponse(
        status="healthy" if db_healthy and cache_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        cache=cache,
    )


@router.get("/ping", status_code=status.HTTP_200_OK, summary="Simple ping")
async def ping() -> dict[str, str]:
    """Liveness probe."""
    return {"message": "pong"}
