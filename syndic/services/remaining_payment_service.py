"""Remaining-payment lifecycle: ad-hoc payments against residents' outstanding balances.

A resident-created payment starts PENDING and needs the syndic's validation
to count in the apartment balance; a syndic-created payment is PAID at once.
Either way the amount leaves the resident's remaining amount at creation.
"""

import logging
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from syndic.models.remaining_payment import RemainingPayment, RemainingPaymentStatus
from syndic.models.resident import Resident
from syndic.services.auth_service import ActorProvider, require_actor
from syndic.services.audit_service import AuditService
from syndic.services.balance_service import INSUFFICIENT_REMAINING_MESSAGE, BalanceService
from syndic.services.errors import LedgerValidationError, NotFoundError
from syndic.services.ledger_store import LedgerStore
from syndic.services.parsers import parse_amount
from syndic.services.period_service import Clock, default_clock
from syndic.services.results import LedgerResult, ledger_operation

logger = logging.getLogger(__name__)


class RemainingPaymentService:
    """Async service for remaining payments of an apartment."""

    def __init__(
        self,
        session: AsyncSession,
        actor_provider: ActorProvider,
        clock: Clock | None = None,
    ):
        """Initialize with async database session, actor identity and clock."""
        self.session = session
        self.actor_provider = actor_provider
        self.clock = clock or default_clock()
        self.ledgers = LedgerStore(session)
        self.balances = BalanceService(session)

    @ledger_operation("create_remaining_payment")
    async def create_remaining_payment(
        self,
        apartment_id: int,
        resident_id: int,
        resident_name: str,
        amount: Decimal | int | float | str,
    ) -> LedgerResult:
        """Resident pays part of their remaining amount; the payment waits for validation.

        Returns:
            LedgerResult with paymentId
        """
        return await self._create(
            apartment_id,
            resident_id,
            resident_name,
            amount,
            status=RemainingPaymentStatus.PENDING,
        )

    @ledger_operation("create_remaining_payment_by_syndic")
    async def create_remaining_payment_by_syndic(
        self,
        apartment_id: int,
        resident_id: int,
        resident_name: str,
        amount: Decimal | int | float | str,
    ) -> LedgerResult:
        """Syndic records money received: the payment is PAID and credited immediately.

        Returns:
            LedgerResult with paymentId
        """
        return await self._create(
            apartment_id,
            resident_id,
            resident_name,
            amount,
            status=RemainingPaymentStatus.PAID,
        )

    @ledger_operation("validate_remaining_payment")
    async def validate_remaining_payment(self, apartment_id: int, payment_id: int) -> LedgerResult:
        """Syndic confirms a PENDING payment: it becomes PAID and is credited.

        Validating an already paid payment fails without touching the balance.
        """
        actor_id = require_actor(self.actor_provider)
        now = self.clock.now()
        ledger = await self.ledgers.get(apartment_id, lock=True)

        payment = await self.session.get(RemainingPayment, payment_id, populate_existing=True)
        if not payment or payment.ledger_id != ledger.id:
            raise NotFoundError("Payment not found")
        if payment.status is RemainingPaymentStatus.PAID:
            raise LedgerValidationError("Payment is already paid")

        # Conditional on PENDING so two validations cannot both credit
        result = await self.session.execute(
            update(RemainingPayment)
            .where(
                RemainingPayment.id == payment.id,
                RemainingPayment.status == RemainingPaymentStatus.PENDING,
            )
            .values(status=RemainingPaymentStatus.PAID, paid_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise LedgerValidationError("Payment is already paid")

        amount = Decimal(payment.amount)
        await self.balances.credit_apartment(
            apartment_id,
            amount,
            actor_id=actor_id,
            source="remaining_payment",
            source_id=payment.id,
        )
        await AuditService.log(
            session=self.session,
            entity_type="remaining_payment",
            entity_id=payment.id,
            action="validate",
            actor_id=actor_id,
            changes={"status": RemainingPaymentStatus.PAID.value, "amount": float(amount)},
        )
        LedgerStore.touch(ledger, now)
        await self.session.commit()
        await self.session.refresh(payment)

        logger.info(
            "Validated remaining payment %d of resident %d (%s) for apartment %d",
            payment.id,
            payment.resident_id,
            amount,
            apartment_id,
        )
        return LedgerResult.ok(paymentId=payment.id, status=payment.status.value)

    @ledger_operation("get_apartment_remaining_payments")
    async def get_apartment_remaining_payments(self, apartment_id: int) -> LedgerResult:
        """All remaining payments of the apartment, oldest first."""
        payments = await self._list(apartment_id)
        return LedgerResult.ok(payments=[payment.to_dict() for payment in payments])

    @ledger_operation("get_resident_remaining_payments")
    async def get_resident_remaining_payments(self, apartment_id: int, resident_id: int) -> LedgerResult:
        """Remaining payments of one resident, filtered from the apartment's list."""
        payments = await self._list(apartment_id)
        return LedgerResult.ok(
            payments=[payment.to_dict() for payment in payments if payment.resident_id == resident_id]
        )

    async def _create(
        self,
        apartment_id: int,
        resident_id: int,
        resident_name: str,
        amount: Decimal | int | float | str,
        *,
        status: RemainingPaymentStatus,
    ) -> LedgerResult:
        actor_id = require_actor(self.actor_provider)
        try:
            amount = parse_amount(amount)
        except ValueError as e:
            raise LedgerValidationError("Amount must be a number") from e
        if amount <= 0:
            raise LedgerValidationError("Amount must be greater than 0")

        resident = await self.session.get(Resident, resident_id, populate_existing=True)
        if not resident or resident.apartment_id != apartment_id:
            raise NotFoundError("Resident not found")
        if amount > Decimal(resident.remaining_amount):
            raise LedgerValidationError(INSUFFICIENT_REMAINING_MESSAGE)

        now = self.clock.now()
        ledger = await self.ledgers.get_or_create(apartment_id, now)

        # Reserved now, whatever the payment status
        await self.balances.reserve_remaining_amount(resident_id, amount)

        payment = RemainingPayment(
            ledger_id=ledger.id,
            apartment_id=apartment_id,
            resident_id=resident_id,
            resident_name=(resident_name or resident.name).strip(),
            amount=amount,
            status=status,
            created_by=actor_id,
            created_at=now,
            updated_at=now,
            paid_at=now if status is RemainingPaymentStatus.PAID else None,
        )
        self.session.add(payment)
        await self.session.flush()

        if status is RemainingPaymentStatus.PAID:
            await self.balances.credit_apartment(
                apartment_id,
                amount,
                actor_id=actor_id,
                source="remaining_payment",
                source_id=payment.id,
            )

        await AuditService.log(
            session=self.session,
            entity_type="remaining_payment",
            entity_id=payment.id,
            action="create",
            actor_id=actor_id,
            changes={
                "resident_id": resident_id,
                "amount": float(amount),
                "status": status.value,
            },
        )
        LedgerStore.touch(ledger, now)
        await self.session.commit()

        logger.info(
            "Created %s remaining payment %d of %s for resident %d (apartment %d)",
            status.value,
            payment.id,
            amount,
            resident_id,
            apartment_id,
        )
        return LedgerResult.ok(paymentId=payment.id, status=status.value)

    async def _list(self, apartment_id: int) -> list[RemainingPayment]:
        ledger = await self.ledgers.find(apartment_id)
        if not ledger:
            return []
        result = await self.session.execute(
            select(RemainingPayment)
            .where(RemainingPayment.ledger_id == ledger.id)
            .order_by(RemainingPayment.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())


__all__ = ["RemainingPaymentService"]
