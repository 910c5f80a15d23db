"""Application configuration."""

from datetime import timedelta, timezone
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="Clinic Booking API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./clinic_booking.db",
        alias="DATABASE_URL",
    )

    # Redis
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_decode_responses: bool = Field(default=True, alias="REDIS_DECODE_RESPONSES")
    cache_enabled: bool = Field(default=True, alias="CACHE_ENABLED")

    # Doctor (single-doctor clinic)
    doctor_id: str = Field(default="primary-doctor", alias="DOCTOR_ID")
    doctor_name: str = Field(default="Dr. K. Madhusudana", alias="DOCTOR_NAME")
    clinic_name: str = Field(default="Dr. K. Madhusudana Clinic", alias="CLINIC_NAME")
    doctor_phone: str = Field(default="8762624188", alias="DOCTOR_PHONE")
    default_country_code: str = Field(default="91", alias="DEFAULT_COUNTRY_CODE")

    # Scheduling
    # IST is UTC+05:30
    timezone_offset_minutes: int = Field(default=330, alias="TIMEZONE_OFFSET_MINUTES")
    lead_time_minutes: int = Field(default=15, alias="LEAD_TIME_MINUTES")

    # Admin
    admin_secret: str = Field(
        default="test-admin-secret-for-development-only",
        alias="ADMIN_SECRET",
        description="Secret key for admin schedule and dashboard endpoints",
    )

    # Video consultations
    video_room_prefix: str = Field(default="dr-madhusudhan", alias="VIDEO_ROOM_PREFIX")

    # WhatsApp notifications
    notification_timeout_seconds: float = Field(
        default=10.0, alias="NOTIFICATION_TIMEOUT_SECONDS"
    )
    callmebot_api_key: str | None = Field(default=None, alias="CALLMEBOT_API_KEY")
    whatsapp_cloud_api_token: str | None = Field(default=None, alias="WHATSAPP_CLOUD_API_TOKEN")
    whatsapp_cloud_phone_number_id: str | None = Field(
        default=None, alias="WHATSAPP_CLOUD_PHONE_NUMBER_ID"
    )
    twilio_account_sid: str | None = Field(default=None, alias="TWILIO_ACCOUNT_SID")
    twilio_auth_token: str | None = Field(default=None, alias="TWILIO_AUTH_TOKEN")
    twilio_whatsapp_number: str = Field(
        default="whatsapp:+918431609250", alias="TWILIO_WHATSAPP_NUMBER"
    )

    # Payments (Razorpay)
    razorpay_key_id: str | None = Field(default=None, alias="RAZORPAY_KEY_ID")
    razorpay_key_secret: str | None = Field(default=None, alias="RAZORPAY_KEY_SECRET")
    consultation_fee_inr: int = Field(default=1, alias="CONSULTATION_FEE_INR")

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        if isinstance(self.cors_origins_str, str):
            return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]
        return [self.cors_origins_str]

    @property
    def reference_timezone(self) -> timezone:
        """Fixed local offset used for every date, weekday and clock computation."""
        return timezone(timedelta(minutes=self.timezone_offset_minutes))

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
