"""Clock and billing-period helpers shared by the ledger services."""

from datetime import date, datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo

from syndic.config import get_settings
from syndic.services.parsers import format_operation_date, period_of


class Clock(Protocol):
    """Source of the current time for period keys and audit timestamps."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in a configured timezone."""

    def __init__(self, tz_name: str = "UTC") -> None:
        self.tz = timezone.utc if tz_name.upper() == "UTC" else ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)


def default_clock() -> SystemClock:
    """Wall clock in the configured billing timezone."""
    return SystemClock(get_settings().timezone)


def today(clock: Clock) -> date:
    return clock.now().date()


def current_period(clock: Clock) -> str:
    """Current billing period as MM-YYYY."""
    return period_of(today(clock))


def current_operation_date(clock: Clock) -> str:
    """Current date as DD-MM-YYYY, the format used in operation logs."""
    return format_operation_date(today(clock))


__all__ = ["Clock", "SystemClock", "default_clock", "today", "current_period", "current_operation_date"]
