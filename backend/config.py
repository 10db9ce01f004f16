"""Application configuration using pydantic-settings."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./prices.db"

    # Quote provider (Morningstar quote header pages)
    QUOTE_BASE_URL: str = "http://quotes.morningstar.com"
    QUOTE_PATH: str = "/stockq/c-header"
    QUOTE_FETCH_TIMEOUT_SECONDS: float = 30.0

    # The provider reports as-of times in US Eastern wall-clock time.
    QUOTE_SOURCE_TIMEZONE: str = "America/New_York"
    QUOTE_TARGET_TIMEZONE: str = "Europe/Vienna"

    @field_validator("QUOTE_SOURCE_TIMEZONE", "QUOTE_TARGET_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject time zone names that are not in the IANA database."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone {v!r}")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
