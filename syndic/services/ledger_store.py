"""Access to the per-apartment payment ledger row shared by bills and remaining payments."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syndic.models.apartment import Apartment
from syndic.models.payment_ledger import PaymentLedger
from syndic.services.errors import NotFoundError

logger = logging.getLogger(__name__)

LEDGER_NOT_FOUND_MESSAGE = "Payment document not found"


class LedgerStore:
    """Load, lock and lazily create PaymentLedger rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, apartment_id: int, *, lock: bool = False) -> PaymentLedger | None:
        """Get the apartment's ledger, optionally locking it for the transaction.

        Locking serializes ledger mutations of one apartment on backends with
        row locks; SQLite file engines start every transaction with BEGIN IMMEDIATE.
        """
        stmt = select(PaymentLedger).where(PaymentLedger.apartment_id == apartment_id)
        if lock:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, apartment_id: int, *, lock: bool = False) -> PaymentLedger:
        """Get the apartment's ledger.

        Raises:
            NotFoundError: If nothing was ever written to the apartment's ledger
        """
        ledger = await self.find(apartment_id, lock=lock)
        if not ledger:
            raise NotFoundError(LEDGER_NOT_FOUND_MESSAGE)
        return ledger

    async def get_or_create(self, apartment_id: int, now: datetime) -> PaymentLedger:
        """Get the apartment's ledger (locked), creating it on first write.

        Raises:
            NotFoundError: If the apartment does not exist
        """
        ledger = await self.find(apartment_id, lock=True)
        if ledger:
            return ledger

        apartment = await self.session.get(Apartment, apartment_id)
        if not apartment:
            raise NotFoundError("Apartment not found")

        ledger = PaymentLedger(apartment_id=apartment_id, created_at=now, updated_at=now)
        self.session.add(ledger)
        await self.session.flush()
        logger.info("Created payment ledger %d for apartment %d", ledger.id, apartment_id)
        return ledger

    @staticmethod
    def touch(ledger: PaymentLedger, now: datetime) -> None:
        ledger.updated_at = now


__all__ = ["LedgerStore", "LEDGER_NOT_FOUND_MESSAGE"]
