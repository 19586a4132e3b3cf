"""Ledger configuration from environment variables and .env file."""

import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class LedgerSettings(BaseSettings):
    """Ledger settings loaded from environment variables.

    Pydantic automatically loads values from:
    1. OS environment variables (at instantiation time)
    2. .env file (if present)
    """

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./syndic.db",
        description="Async SQLAlchemy connection string",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")
    sqlite_busy_timeout: float = Field(
        default=30.0,
        description="Seconds a SQLite file connection waits for the write lock",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/ledger.log", description="Path to ledger log file")

    # Billing calendar
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used for billing periods and operation dates",
    )

    # Apartments
    join_code_length: int = Field(default=6, description="Length of apartment join codes")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        if value.upper() == "UTC":
            return value
        try:
            ZoneInfo(value)
        except (ValueError, ZoneInfoNotFoundError) as e:
            raise ValueError(f"Unknown timezone '{value}'") from e
        return value

    @field_validator("join_code_length")
    @classmethod
    def _check_join_code_length(cls, value: int) -> int:
        if value < 4:
            raise ValueError("join_code_length must be at least 4")
        return value


_settings_instance: Optional[LedgerSettings] = None


def get_settings() -> LedgerSettings:
    """Get or create the settings instance.

    Lazy so that tests and scripts can set environment variables first.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = LedgerSettings()
        logger.debug("Loaded ledger settings (database_url=%s)", _settings_instance.database_url)
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None


__all__ = ["LedgerSettings", "get_settings", "reset_settings"]
