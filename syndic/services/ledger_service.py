"""Ledger service: the entry point screens and handlers call.

Composes the bill and remaining-payment services over one session, actor
provider and clock. Every operation returns a LedgerResult and never raises
for expected failures.

Example:
    ```python
    async with session_factory() as session:
        ledger = LedgerService(session, StaticActorProvider(user_id))
        result = await ledger.request_payment(apartment_id, resident_id, "03-2025")
        if not result.success:
            show_error(result.error)
    ```
"""

import logging
from decimal import Decimal
from typing import Any, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from syndic.models.bill import BillStatus
from syndic.services.auth_service import ActorProvider
from syndic.services.balance_service import BalanceService
from syndic.services.bills_service import BillsService, ResidentFee
from syndic.services.period_service import Clock, default_clock
from syndic.services.remaining_payment_service import RemainingPaymentService
from syndic.services.results import LedgerResult, ledger_operation

logger = logging.getLogger(__name__)


class LedgerService:
    """Billing and remaining-payment ledger of apartments."""

    def __init__(
        self,
        session: AsyncSession,
        actor_provider: ActorProvider,
        clock: Clock | None = None,
    ):
        self.session = session
        self.actor_provider = actor_provider
        self.clock = clock or default_clock()
        self.bills = BillsService(session, actor_provider, self.clock)
        self.remaining_payments = RemainingPaymentService(session, actor_provider, self.clock)
        self.balances = BalanceService(session)

    # Bills

    async def create_monthly_bills(
        self,
        apartment_id: int,
        residents: Sequence[ResidentFee | Mapping[str, Any]] | None = None,
        syndic_id: str | None = None,
        *,
        period: str | None = None,
    ) -> LedgerResult:
        return await self.bills.create_monthly_bills(apartment_id, residents, syndic_id, period=period)

    async def request_payment(self, apartment_id: int, resident_id: int, bill_date: str) -> LedgerResult:
        return await self.bills.request_payment(apartment_id, resident_id, bill_date)

    async def update_bill_status(
        self,
        apartment_id: int,
        resident_id: int,
        bill_date: str,
        new_status: BillStatus | str,
    ) -> LedgerResult:
        return await self.bills.update_bill_status(apartment_id, resident_id, bill_date, new_status)

    async def get_apartment_bills(
        self,
        apartment_id: int,
        *,
        period: str | None = None,
        resident_id: int | None = None,
    ) -> LedgerResult:
        return await self.bills.get_apartment_bills(apartment_id, period=period, resident_id=resident_id)

    async def get_period_summary(self, apartment_id: int, period: str | None = None) -> LedgerResult:
        return await self.bills.get_period_summary(apartment_id, period)

    # Remaining payments

    async def create_remaining_payment(
        self,
        apartment_id: int,
        resident_id: int,
        resident_name: str,
        amount: Decimal | int | float | str,
    ) -> LedgerResult:
        return await self.remaining_payments.create_remaining_payment(
            apartment_id, resident_id, resident_name, amount
        )

    async def create_remaining_payment_by_syndic(
        self,
        apartment_id: int,
        resident_id: int,
        resident_name: str,
        amount: Decimal | int | float | str,
    ) -> LedgerResult:
        return await self.remaining_payments.create_remaining_payment_by_syndic(
            apartment_id, resident_id, resident_name, amount
        )

    async def validate_remaining_payment(self, apartment_id: int, payment_id: int) -> LedgerResult:
        return await self.remaining_payments.validate_remaining_payment(apartment_id, payment_id)

    async def get_apartment_remaining_payments(self, apartment_id: int) -> LedgerResult:
        return await self.remaining_payments.get_apartment_remaining_payments(apartment_id)

    async def get_resident_remaining_payments(self, apartment_id: int, resident_id: int) -> LedgerResult:
        return await self.remaining_payments.get_resident_remaining_payments(apartment_id, resident_id)

    # Balance

    @ledger_operation("reconcile_balance")
    async def reconcile_balance(self, apartment_id: int) -> LedgerResult:
        """Compare the stored apartment balance with the balance replayed from the ledger."""
        reconciliation = await self.balances.reconcile(apartment_id)
        if reconciliation.drift != 0:
            logger.warning(
                "Apartment %d balance drift %s (stored %s, replayed %s)",
                apartment_id,
                reconciliation.drift,
                reconciliation.actual_balance,
                reconciliation.expected_balance,
            )
        return LedgerResult.ok(**reconciliation.to_dict())


__all__ = ["LedgerService"]
