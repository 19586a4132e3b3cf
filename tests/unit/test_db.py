"""Tests for engine and session helpers."""

from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from syndic.config import LedgerSettings
from syndic.services.db import (
    create_engine_from_settings,
    create_session_factory,
    get_async_session,
    init_models,
)


def test_plain_sqlite_url_uses_aiosqlite():
    engine = create_engine_from_settings(LedgerSettings(database_url="sqlite:///./ledger.db"))

    assert engine.url.drivername == "sqlite+aiosqlite"


def test_memory_database_shares_one_connection():
    engine = create_engine_from_settings(LedgerSettings(database_url="sqlite+aiosqlite:///:memory:"))

    assert isinstance(engine.pool, StaticPool)


def test_file_database_uses_connection_pool(tmp_path):
    """A file database is not pinned to one shared connection."""
    engine = create_engine_from_settings(
        LedgerSettings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    )

    assert not isinstance(engine.pool, StaticPool)


async def test_init_models_creates_tables():
    engine = create_engine_from_settings(LedgerSettings(database_url="sqlite+aiosqlite:///:memory:"))
    await init_models(engine)

    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert {
        "apartments",
        "residents",
        "payment_ledgers",
        "bills",
        "bill_operations",
        "remaining_payments",
        "audit_logs",
    } <= set(tables)
    await engine.dispose()


async def test_get_async_session_yields_session():
    engine = create_engine_from_settings(LedgerSettings(database_url="sqlite+aiosqlite:///:memory:"))
    factory = create_session_factory(engine)

    sessions = get_async_session(factory)
    session = await anext(sessions)
    assert session.bind is engine
    await sessions.aclose()
    await engine.dispose()
