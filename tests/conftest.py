"""Shared fixtures: in-memory database, fixed clock, actors and a sample apartment."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from syndic.config import reset_settings
from syndic.models import Base
from syndic.services.apartment_service import ApartmentService, ResidentInfo
from syndic.services.auth_service import StaticActorProvider
from syndic.services.ledger_service import LedgerService

SYNDIC_ID = "syndic-uid"
RESIDENT_USER_ID = "resident-uid"


class FixedClock:
    """Clock frozen at a given moment, movable by tests."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def set(self, moment: datetime) -> None:
        self.moment = moment


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are re-read from the environment in every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
async def async_db_session():
    """Create async test database session."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def clock():
    """Clock set to 15 March 2025."""
    return FixedClock(datetime(2025, 3, 15, 10, 30, tzinfo=timezone.utc))


@pytest.fixture
def syndic_actor():
    return StaticActorProvider(SYNDIC_ID)


@pytest.fixture
def resident_actor():
    return StaticActorProvider(RESIDENT_USER_ID)


@pytest.fixture
def anonymous_actor():
    return StaticActorProvider(None)


@pytest.fixture
async def apartment(async_db_session):
    """Apartment with two residents: r1 pays 500/month, r2 pays 300/month."""
    service = ApartmentService(async_db_session)
    return await service.create_apartment(
        "Residence Atlas",
        SYNDIC_ID,
        [
            ResidentInfo(name="Amina", monthly_fee=Decimal("500"), remaining_amount=Decimal("1000")),
            ResidentInfo(name="Youssef", monthly_fee=Decimal("300"), remaining_amount=Decimal("500")),
        ],
        actual_balance=Decimal("0"),
    )


@pytest.fixture
def apartment_id(apartment):
    return apartment.id


@pytest.fixture
def resident_ids(apartment):
    """Ids of the apartment's residents in creation order.

    Plain ints stay usable after a failed operation rolls the session back.
    """
    return [resident.id for resident in apartment.residents]


@pytest.fixture
def reload(async_db_session):
    """Load a fresh copy of a row, bypassing stale identity-map state."""

    async def _reload(model, pk):
        return await async_db_session.get(model, pk, populate_existing=True)

    return _reload


@pytest.fixture
def ledger(async_db_session, syndic_actor, clock):
    """Ledger service acting as the syndic."""
    return LedgerService(async_db_session, syndic_actor, clock)


@pytest.fixture
def resident_ledger(async_db_session, resident_actor, clock):
    """Ledger service acting as a resident."""
    return LedgerService(async_db_session, resident_actor, clock)
