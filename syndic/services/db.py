"""Database engine and async session management."""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from syndic.config import LedgerSettings, get_settings
from syndic.models import Base


def _is_memory_database(database: str | None) -> bool:
    return not database or database == ":memory:" or database.startswith("file::memory:")


def _serialize_sqlite_writers(engine: AsyncEngine) -> None:
    """Start every transaction with BEGIN IMMEDIATE.

    SQLite ignores SELECT ... FOR UPDATE, so the write lock is taken when
    the transaction begins and ledger operations on a file database run one
    at a time across connections.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_from_settings(settings: LedgerSettings | None = None) -> AsyncEngine:
    """Create the async engine described by settings.

    An in-memory SQLite database uses StaticPool so every session sees the
    same database. A SQLite file gets one connection per session, and its
    transactions wait up to sqlite_busy_timeout seconds for the write lock.
    """
    settings = settings or get_settings()
    database_url = settings.database_url
    if database_url.startswith("sqlite:///"):
        database_url = database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

    if not database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=settings.database_echo, pool_pre_ping=True)

    if _is_memory_database(make_url(database_url).database):
        return create_async_engine(
            database_url,
            echo=settings.database_echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    engine = create_async_engine(
        database_url,
        echo=settings.database_echo,
        connect_args={"timeout": settings.sqlite_busy_timeout},
    )
    _serialize_sqlite_writers(engine)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory bound to engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables (development and tests; production uses Alembic)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    async with session_factory() as session:
        yield session


__all__ = [
    "create_engine_from_settings",
    "create_session_factory",
    "init_models",
    "get_async_session",
]
