"""Balance propagation for the ledger.

Two stored figures are affected by ledger operations:
- Apartment.actual_balance: incremented when a bill or a remaining payment becomes PAID
- Resident.remaining_amount: decremented when a remaining payment is created

Both are changed with single-statement atomic updates inside the caller's
transaction, so concurrent operations never overwrite each other's effect.
The collected total can also be replayed from the ledger for reconciliation.
"""

import logging
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from syndic.models.apartment import Apartment
from syndic.models.bill import Bill, BillOperationType, BillStatus
from syndic.models.remaining_payment import RemainingPayment, RemainingPaymentStatus
from syndic.models.resident import Resident
from syndic.services.audit_service import AuditService
from syndic.services.errors import LedgerValidationError, NotFoundError

logger = logging.getLogger(__name__)

INSUFFICIENT_REMAINING_MESSAGE = "Payment amount cannot exceed remaining balance"

# Status a bill is in right after each kind of operation
OPERATION_STATUSES = {
    BillOperationType.CREATION: BillStatus.UNPAID,
    BillOperationType.REQUEST_PAYMENT: BillStatus.PENDING,
    BillOperationType.PAYMENT_DONE: BillStatus.PAID,
    BillOperationType.PAYMENT_REJECTED: BillStatus.UNPAID,
}


class BalanceReconciliation(NamedTuple):
    """Stored apartment balance compared with the balance replayed from the ledger."""

    apartment_id: int
    opening_balance: Decimal
    collected_from_bills: Decimal
    collected_from_remaining_payments: Decimal
    expected_balance: Decimal
    actual_balance: Decimal

    @property
    def drift(self) -> Decimal:
        return self.actual_balance - self.expected_balance

    def to_dict(self) -> dict:
        return {
            "apartmentId": self.apartment_id,
            "openingBalance": float(self.opening_balance),
            "collectedFromBills": float(self.collected_from_bills),
            "collectedFromRemainingPayments": float(self.collected_from_remaining_payments),
            "expectedBalance": float(self.expected_balance),
            "actualBalance": float(self.actual_balance),
            "drift": float(self.drift),
        }


class BalanceService:
    """Apply and replay balance effects of ledger operations."""

    def __init__(self, session: AsyncSession):
        """Initialize with async database session."""
        self.session = session

    async def credit_apartment(
        self,
        apartment_id: int,
        amount: Decimal,
        *,
        actor_id: str | None = None,
        source: str,
        source_id: int,
    ) -> None:
        """Add collected funds to the apartment balance.

        Args:
            apartment_id: Apartment to credit
            amount: Positive amount received
            actor_id: User who confirmed the money (for audit)
            source: "bill" or "remaining_payment"
            source_id: Primary key of the bill or payment

        Raises:
            NotFoundError: If the apartment does not exist
        """
        if amount <= 0:
            return

        result = await self.session.execute(
            update(Apartment)
            .where(Apartment.id == apartment_id)
            .values(actual_balance=Apartment.actual_balance + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError("Apartment not found")

        await AuditService.log(
            session=self.session,
            entity_type="apartment",
            entity_id=apartment_id,
            action="balance_credit",
            actor_id=actor_id,
            changes={"amount": float(amount), "source": source, "source_id": source_id},
        )
        logger.info(
            "Credited apartment %d with %s from %s %d",
            apartment_id,
            amount,
            source,
            source_id,
        )

    async def reserve_remaining_amount(self, resident_id: int, amount: Decimal) -> None:
        """Deduct amount from the resident's remaining amount.

        The update only applies while the remaining amount covers it, so the
        figure can never go negative, even under concurrent requests.

        Raises:
            LedgerValidationError: If the remaining amount is lower than amount
        """
        result = await self.session.execute(
            update(Resident)
            .where(Resident.id == resident_id, Resident.remaining_amount >= amount)
            .values(remaining_amount=Resident.remaining_amount - amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise LedgerValidationError(INSUFFICIENT_REMAINING_MESSAGE)

        logger.debug("Reserved %s from remaining amount of resident %d", amount, resident_id)

    async def collected_from_bills(self, apartment_id: int) -> Decimal:
        """Replay every bill's operation log and sum the amounts credited.

        A bill credits its amount each time it enters PAID from another status,
        so a paid, rejected and paid again bill counts twice.
        """
        result = await self.session.execute(
            select(Bill)
            .where(Bill.apartment_id == apartment_id)
            .order_by(Bill.id)
            .execution_options(populate_existing=True)
        )
        total = Decimal("0")
        for bill in result.scalars().all():
            status = None
            for entry in bill.operations:
                next_status = OPERATION_STATUSES[entry.operation]
                if next_status is BillStatus.PAID and status is not BillStatus.PAID:
                    total += Decimal(bill.amount)
                status = next_status
        return total

    async def collected_from_remaining_payments(self, apartment_id: int) -> Decimal:
        result = await self.session.execute(
            select(func.coalesce(func.sum(RemainingPayment.amount), 0)).where(
                RemainingPayment.apartment_id == apartment_id,
                RemainingPayment.status == RemainingPaymentStatus.PAID,
            )
        )
        return Decimal(str(result.scalar() or 0))

    async def reconcile(self, apartment_id: int) -> BalanceReconciliation:
        """Replay collected funds from the ledger and compare with the stored balance.

        Expected balance = opening balance + bill amounts credited on entering PAID
        + paid remaining payments.

        Raises:
            NotFoundError: If the apartment does not exist
        """
        apartment = await self.session.get(Apartment, apartment_id, populate_existing=True)
        if not apartment:
            raise NotFoundError("Apartment not found")

        from_bills = await self.collected_from_bills(apartment_id)
        from_payments = await self.collected_from_remaining_payments(apartment_id)
        opening = Decimal(apartment.opening_balance)

        return BalanceReconciliation(
            apartment_id=apartment_id,
            opening_balance=opening,
            collected_from_bills=from_bills,
            collected_from_remaining_payments=from_payments,
            expected_balance=opening + from_bills + from_payments,
            actual_balance=Decimal(apartment.actual_balance),
        )


__all__ = ["BalanceService", "BalanceReconciliation", "INSUFFICIENT_REMAINING_MESSAGE"]
