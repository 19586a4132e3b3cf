"""Bill lifecycle: monthly bill batches, payment requests and status changes."""

import logging
from decimal import Decimal
from typing import Any, Mapping, NamedTuple, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syndic.models.bill import Bill, BillOperation, BillOperationType, BillStatus
from syndic.models.resident import Resident
from syndic.services.auth_service import ActorProvider, require_actor
from syndic.services.audit_service import AuditService
from syndic.services.balance_service import BalanceService
from syndic.services.errors import LedgerValidationError, NotFoundError
from syndic.services.ledger_store import LedgerStore
from syndic.services.parsers import parse_amount, parse_period
from syndic.services.period_service import Clock, current_period, default_clock, today
from syndic.services.results import LedgerResult, ledger_operation

logger = logging.getLogger(__name__)


class ResidentFee(NamedTuple):
    """Resident to bill and the amount of their monthly bill."""

    resident_id: int
    monthly_fee: Decimal | int | float | str


def _fee_pair(entry: "ResidentFee | Mapping[str, Any]") -> tuple[int, Any]:
    """Accept ResidentFee tuples or {"id", "monthlyFee"} mappings from UI callers."""
    if isinstance(entry, Mapping):
        return entry["id"], entry["monthlyFee"]
    resident_id, monthly_fee = entry
    return resident_id, monthly_fee


class BillsService:
    """Async service for the bill ledger of an apartment.

    Each public method is one transaction and returns a LedgerResult.
    """

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

    @ledger_operation("create_monthly_bills")
    async def create_monthly_bills(
        self,
        apartment_id: int,
        residents: Sequence[ResidentFee | Mapping[str, Any]] | None = None,
        syndic_id: str | None = None,
        *,
        period: str | None = None,
    ) -> LedgerResult:
        """Create one UNPAID bill per resident for the billing period.

        The duplicate guard is month-wide: if any bill of the period exists
        for the apartment, nothing is created.

        Args:
            apartment_id: Apartment to bill
            residents: (resident_id, monthly_fee) pairs; defaults to every resident
                of the apartment with their current fee
            syndic_id: Responsible syndic; defaults to the current actor
            period: MM-YYYY period; defaults to the current month

        Returns:
            LedgerResult with billsCreated and period
        """
        actor_id = require_actor(self.actor_provider)
        now = self.clock.now()
        if period is None:
            period = current_period(self.clock)
        else:
            try:
                parse_period(period)
            except ValueError as e:
                raise LedgerValidationError(str(e)) from e

        ledger = await self.ledgers.get_or_create(apartment_id, now)

        existing = await self.session.execute(
            select(Bill.id).where(Bill.ledger_id == ledger.id, Bill.period == period).limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            raise LedgerValidationError("Bills for this month already exist")

        fees = await self._resolve_fees(apartment_id, residents)
        responsible = syndic_id or actor_id
        operation_date = today(self.clock)

        bills = []
        for resident_id, amount in fees:
            bill = Bill(
                ledger_id=ledger.id,
                apartment_id=apartment_id,
                owner_of_bill=resident_id,
                responsible=responsible,
                status=BillStatus.UNPAID,
                amount=amount,
                period=period,
                created_at=now,
                updated_at=now,
            )
            bill.operations.append(
                BillOperation(
                    sequence=1,
                    operation=BillOperationType.CREATION,
                    operation_date=operation_date,
                    actor_id=actor_id,
                )
            )
            self.session.add(bill)
            bills.append(bill)

        await self.session.flush()
        for bill in bills:
            await AuditService.log(
                session=self.session,
                entity_type="bill",
                entity_id=bill.id,
                action="create",
                actor_id=actor_id,
                changes={
                    "owner_of_bill": bill.owner_of_bill,
                    "period": period,
                    "amount": float(bill.amount),
                },
            )

        LedgerStore.touch(ledger, now)
        await self.session.commit()

        logger.info(
            "Created %d bills for apartment %d, period %s (actor_id=%s)",
            len(bills),
            apartment_id,
            period,
            actor_id,
        )
        return LedgerResult.ok(billsCreated=len(bills), period=period)

    @ledger_operation("request_payment")
    async def request_payment(self, apartment_id: int, resident_id: int, bill_date: str) -> LedgerResult:
        """Resident declares a bill paid: UNPAID -> PENDING.

        Only UNPAID bills can be requested; a pending or paid bill is rejected
        so repeated taps cannot pile up request entries.
        """
        actor_id = require_actor(self.actor_provider)
        now = self.clock.now()
        ledger = await self.ledgers.get(apartment_id, lock=True)
        bill = await self._get_bill(ledger.id, resident_id, bill_date)

        if bill.status is BillStatus.PENDING:
            raise LedgerValidationError("Payment already requested for this bill")
        if bill.status is BillStatus.PAID:
            raise LedgerValidationError("Bill is already paid")

        self._append_operation(bill, BillStatus.PENDING, actor_id)
        bill.updated_at = now
        LedgerStore.touch(ledger, now)
        await self.session.commit()

        logger.info(
            "Payment requested for bill %d (resident %d, period %s)",
            bill.id,
            resident_id,
            bill_date,
        )
        return LedgerResult.ok(status=bill.status.value)

    @ledger_operation("update_bill_status")
    async def update_bill_status(
        self,
        apartment_id: int,
        resident_id: int,
        bill_date: str,
        new_status: "BillStatus | str",
    ) -> LedgerResult:
        """Syndic sets a bill's status.

        Appends the matching operation (pending -> request_payment,
        paid -> payment_done, unpaid -> payment_rejected). The apartment
        balance is credited with the bill amount only when the bill enters
        PAID from another status; confirming an already paid bill again
        changes nothing but the log.

        Returns:
            LedgerResult with status and balanceCredited
        """
        actor_id = require_actor(self.actor_provider)
        try:
            status = BillStatus.parse(new_status)
        except ValueError as e:
            raise LedgerValidationError(str(e)) from e

        now = self.clock.now()
        ledger = await self.ledgers.get(apartment_id, lock=True)
        bill = await self._get_bill(ledger.id, resident_id, bill_date)

        previous = bill.status
        self._append_operation(bill, status, actor_id)
        bill.updated_at = now
        await self.session.flush()

        credited = status is BillStatus.PAID and previous is not BillStatus.PAID
        if credited:
            await self.balances.credit_apartment(
                apartment_id,
                Decimal(bill.amount),
                actor_id=actor_id,
                source="bill",
                source_id=bill.id,
            )

        LedgerStore.touch(ledger, now)
        await self.session.commit()

        logger.info(
            "Bill %d status %s -> %s (resident %d, period %s, credited=%s)",
            bill.id,
            previous.value,
            status.value,
            resident_id,
            bill_date,
            credited,
        )
        return LedgerResult.ok(status=status.value, balanceCredited=credited)

    @ledger_operation("get_apartment_bills")
    async def get_apartment_bills(
        self,
        apartment_id: int,
        *,
        period: str | None = None,
        resident_id: int | None = None,
    ) -> LedgerResult:
        """All bills of the apartment (empty list when nothing was billed yet).

        Optional filters narrow the list to one period and/or one resident.
        """
        ledger = await self.ledgers.find(apartment_id)
        if not ledger:
            return LedgerResult.ok(bills=[])

        bills = await self._list_bills(ledger.id, period=period, resident_id=resident_id)
        return LedgerResult.ok(bills=[bill.to_dict() for bill in bills])

    @ledger_operation("get_period_summary")
    async def get_period_summary(self, apartment_id: int, period: str | None = None) -> LedgerResult:
        """Collection figures of one billing period for the syndic dashboard.

        totalExpected is the sum of the residents' current monthly fees; the
        other totals come from the period's bills by status.
        """
        if period is None:
            period = current_period(self.clock)
        else:
            try:
                parse_period(period)
            except ValueError as e:
                raise LedgerValidationError(str(e)) from e

        fees = await self.session.execute(
            select(Resident.monthly_fee).where(Resident.apartment_id == apartment_id)
        )
        total_expected = sum((Decimal(fee) for fee in fees.scalars().all()), Decimal("0"))

        totals = {status: Decimal("0") for status in BillStatus}
        counts = {status: 0 for status in BillStatus}
        ledger = await self.ledgers.find(apartment_id)
        if ledger:
            for bill in await self._list_bills(ledger.id, period=period):
                totals[bill.status] += Decimal(bill.amount)
                counts[bill.status] += 1

        collected = totals[BillStatus.PAID]
        rate = (collected / total_expected * 100) if total_expected > 0 else Decimal("0")

        return LedgerResult.ok(
            period=period,
            totalExpected=float(total_expected),
            totalCollected=float(collected),
            totalPending=float(totals[BillStatus.PENDING]),
            totalUnpaid=float(totals[BillStatus.UNPAID]),
            collectionRate=float(round(rate, 2)),
            billCounts={status.value: counts[status] for status in BillStatus},
        )

    async def _resolve_fees(
        self,
        apartment_id: int,
        residents: Sequence[ResidentFee | Mapping[str, Any]] | None,
    ) -> list[tuple[int, Decimal]]:
        """Validate the residents to bill and normalize their fees."""
        result = await self.session.execute(
            select(Resident.id, Resident.monthly_fee)
            .where(Resident.apartment_id == apartment_id)
            .order_by(Resident.id)
        )
        known = {resident_id: Decimal(fee) for resident_id, fee in result.all()}

        if residents is None:
            return list(known.items())

        fees = []
        seen: set[int] = set()
        for entry in residents:
            resident_id, monthly_fee = _fee_pair(entry)
            if resident_id not in known:
                raise NotFoundError("Resident not found")
            if resident_id in seen:
                raise LedgerValidationError("A resident can only be billed once per month")
            seen.add(resident_id)
            try:
                amount = parse_amount(monthly_fee)
            except ValueError as e:
                raise LedgerValidationError("Monthly fee must be a number") from e
            if amount < 0:
                raise LedgerValidationError("Monthly fee cannot be negative")
            fees.append((resident_id, amount))
        return fees

    async def _get_bill(self, ledger_id: int, resident_id: int, bill_date: str) -> Bill:
        result = await self.session.execute(
            select(Bill)
            .where(
                Bill.ledger_id == ledger_id,
                Bill.owner_of_bill == resident_id,
                Bill.period == bill_date,
            )
            .execution_options(populate_existing=True)
        )
        bill = result.scalars().first()
        if not bill:
            raise NotFoundError("Bill not found")
        return bill

    async def _list_bills(
        self,
        ledger_id: int,
        *,
        period: str | None = None,
        resident_id: int | None = None,
    ) -> list[Bill]:
        stmt = select(Bill).where(Bill.ledger_id == ledger_id)
        if period is not None:
            stmt = stmt.where(Bill.period == period)
        if resident_id is not None:
            stmt = stmt.where(Bill.owner_of_bill == resident_id)
        stmt = stmt.order_by(Bill.id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    def _append_operation(self, bill: Bill, status: BillStatus, actor_id: str) -> None:
        """Move the bill into status and log it as the next operation entry."""
        bill.status = status
        bill.operations.append(
            BillOperation(
                sequence=len(bill.operations) + 1,
                operation=BillOperationType.for_status(status),
                operation_date=today(self.clock),
                actor_id=actor_id,
            )
        )


__all__ = ["BillsService", "ResidentFee"]
