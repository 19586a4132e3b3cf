"""Tests for LedgerService wiring."""

from zoneinfo import ZoneInfo

from syndic.services.auth_service import StaticActorProvider
from syndic.services.ledger_service import LedgerService


async def test_default_clock_follows_configured_timezone(async_db_session, monkeypatch):
    """Billing periods are computed in TIMEZONE when no clock is injected."""
    monkeypatch.setenv("TIMEZONE", "Asia/Tokyo")

    ledger = LedgerService(async_db_session, StaticActorProvider("syndic-uid"))

    assert ledger.clock.tz == ZoneInfo("Asia/Tokyo")
    assert ledger.bills.clock is ledger.clock
    assert ledger.remaining_payments.clock is ledger.clock


async def test_injected_clock_is_shared(async_db_session, clock):
    ledger = LedgerService(async_db_session, StaticActorProvider("syndic-uid"), clock)

    assert ledger.clock is clock
    assert ledger.bills.clock is clock
    assert ledger.remaining_payments.clock is clock
