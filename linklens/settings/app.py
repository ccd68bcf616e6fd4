"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Read once at process start; treated as read-only afterwards.
    """

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    max_retries: int = Field(default=3, ge=1, le=10, validation_alias="MAX_RETRIES")
    request_timeout_ms: int = Field(
        default=30000, ge=1000, le=300000, validation_alias="REQUEST_TIMEOUT"
    )
    quality_attempts: int = Field(
        default=3, ge=1, le=10, validation_alias="QUALITY_ATTEMPTS"
    )
    platform_timeout_ms: int = Field(
        default=8000, ge=1000, le=60000, validation_alias="PLATFORM_TIMEOUT"
    )
    browser_fetch_enabled: bool = Field(
        default=True, validation_alias="BROWSER_FETCH_ENABLED"
    )
    json_logs: bool = Field(default=True, validation_alias="LOG_JSON")


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
