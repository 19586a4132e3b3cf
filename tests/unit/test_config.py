"""Unit tests for ledger settings loading."""

import pytest
from pydantic import ValidationError

from syndic.config import LedgerSettings, get_settings, reset_settings


class TestLedgerSettings:
    """Tests for LedgerSettings."""

    def test_defaults(self, monkeypatch, tmp_path):
        """Test defaults apply when nothing is configured."""
        monkeypatch.chdir(tmp_path)
        for name in ("DATABASE_URL", "LOG_LEVEL", "LOG_FILE", "TIMEZONE", "JOIN_CODE_LENGTH"):
            monkeypatch.delenv(name, raising=False)

        settings = LedgerSettings()

        assert settings.database_url == "sqlite+aiosqlite:///./syndic.db"
        assert settings.database_echo is False
        assert settings.log_level == "INFO"
        assert settings.log_file == "logs/ledger.log"
        assert settings.timezone == "UTC"
        assert settings.join_code_length == 6
        assert settings.sqlite_busy_timeout == 30.0

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("JOIN_CODE_LENGTH", "8")

        settings = LedgerSettings()

        assert settings.database_url == "sqlite+aiosqlite:///:memory:"
        assert settings.log_level == "DEBUG"
        assert settings.join_code_length == 8

    def test_env_file(self, monkeypatch, tmp_path):
        """Test values are read from .env in the working directory."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TIMEZONE", raising=False)
        (tmp_path / ".env").write_text("TIMEZONE=Africa/Casablanca\n")

        settings = LedgerSettings()

        assert settings.timezone == "Africa/Casablanca"

    def test_named_timezone(self, monkeypatch):
        monkeypatch.setenv("TIMEZONE", "Asia/Tokyo")

        assert LedgerSettings().timezone == "Asia/Tokyo"

    def test_unknown_timezone_rejected(self, monkeypatch):
        monkeypatch.setenv("TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ValidationError, match="Unknown timezone 'Mars/Olympus_Mons'"):
            LedgerSettings()

    def test_join_code_length_too_short(self, monkeypatch):
        monkeypatch.setenv("JOIN_CODE_LENGTH", "3")

        with pytest.raises(ValidationError, match="join_code_length must be at least 4"):
            LedgerSettings()


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reset_settings_rereads_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        first = get_settings()

        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        reset_settings()
        second = get_settings()

        assert first.log_level == "WARNING"
        assert second.log_level == "ERROR"
