"""
Application Configuration

Uses Pydantic Settings for environment variable management with validation.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str
    DATABASE_SSL: bool = False

    # Security
    SECRET_KEY: str = Field(..., min_length=32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # OTP
    OTP_EXPIRY_MINUTES: int = 5

    # SMS gateway (all four of secret/sender/tempid/base url are needed to send)
    SMS_BASE_URL: str = ""
    SMS_SECRET: str = ""
    SMS_SENDER: str = ""
    SMS_TEMPID: str = ""
    SMS_ROUTE: str = "TA"
    SMS_MSGTYPE: str = "1"
    SMS_TIMEOUT_SECONDS: float = 10.0
    SMS_MAX_RETRIES: int = 1

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    SEND_OTP_RATE_PER_MINUTE: int = 3
    VERIFY_OTP_RATE_PER_MINUTE: int = 5
    # Peers allowed to set X-Forwarded-For (comma-separated IPs)
    TRUSTED_PROXIES: str = ""

    # Privileged accounts created on startup when configured
    SEED_SUPERADMIN_PHONE: str = ""
    SEED_SUPERADMIN_EMAIL: str = ""
    SEED_ADMIN_PHONE: str = ""
    SEED_ADMIN_EMAIL: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def trusted_proxies_list(self) -> List[str]:
        """Parse trusted proxy addresses from comma-separated string."""
        return [ip.strip() for ip in self.TRUSTED_PROXIES.split(",") if ip.strip()]

    @property
    def sms_configured(self) -> bool:
        """True when every field the SMS gateway needs is present."""
        return all((self.SMS_SECRET, self.SMS_SENDER, self.SMS_TEMPID, self.SMS_BASE_URL))


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are only loaded once. A missing or short
    SECRET_KEY raises here, so the process fails at startup.
    """
    return Settings()


# Global settings instance
settings = get_settings()
