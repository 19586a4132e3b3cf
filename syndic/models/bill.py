"""Bill ORM models: monthly bills and their append-only operation log."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from syndic.models import Base, BaseModel, enum_column_type
from syndic.services.parsers import format_operation_date


class BillStatus(str, Enum):
    """Canonical bill statuses."""

    UNPAID = "unpaid"
    """Bill issued, nothing received yet"""

    PENDING = "pending"
    """Resident declared the payment, waiting for the syndic"""

    PAID = "paid"
    """Payment confirmed by the syndic"""

    @classmethod
    def parse(cls, value: "str | BillStatus") -> "BillStatus":
        """Parse a status, accepting the legacy not_paid/payment_requested vocabulary."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = LEGACY_BILL_STATUSES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError as e:
            raise ValueError(f"Unknown bill status '{value}'") from e


LEGACY_BILL_STATUSES = {
    "not_paid": BillStatus.UNPAID.value,
    "payment_requested": BillStatus.PENDING.value,
}


class BillOperationType(str, Enum):
    """Audit entries recorded in a bill's operation log."""

    CREATION = "creation"
    REQUEST_PAYMENT = "request_payment"
    PAYMENT_DONE = "payment_done"
    PAYMENT_REJECTED = "payment_rejected"

    @classmethod
    def for_status(cls, status: BillStatus) -> "BillOperationType":
        """Operation label recorded when a bill is moved into `status`."""
        return STATUS_OPERATIONS[status]


STATUS_OPERATIONS = {
    BillStatus.PENDING: BillOperationType.REQUEST_PAYMENT,
    BillStatus.PAID: BillOperationType.PAYMENT_DONE,
    BillStatus.UNPAID: BillOperationType.PAYMENT_REJECTED,
}


class Bill(Base, BaseModel):
    """One resident's obligation for one billing period.

    Identified within an apartment by (owner_of_bill, period). Status changes
    never rewrite history: each one appends a BillOperation.
    """

    __tablename__ = "bills"

    ledger_id: Mapped[int] = mapped_column(
        ForeignKey("payment_ledgers.id"),
        nullable=False,
        index=True,
        comment="Owning per-apartment ledger",
    )
    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"),
        nullable=False,
        index=True,
        comment="Apartment the bill belongs to",
    )
    owner_of_bill: Mapped[int] = mapped_column(
        ForeignKey("residents.id"),
        nullable=False,
        index=True,
        comment="Resident who owes the bill",
    )
    responsible: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Syndic who issued the bill",
    )
    status: Mapped[BillStatus] = mapped_column(
        enum_column_type(BillStatus),
        nullable=False,
        default=BillStatus.UNPAID,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Billed amount",
    )
    period: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="Billing period, MM-YYYY",
    )

    operations: Mapped[list["BillOperation"]] = relationship(
        "BillOperation",
        back_populates="bill",
        order_by="BillOperation.sequence",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("ledger_id", "owner_of_bill", "period", name="uq_bill_owner_period"),
        Index("idx_bill_apartment_period", "apartment_id", "period"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ownerOfBill": self.owner_of_bill,
            "responsible": self.responsible,
            "status": self.status.value,
            "amount": float(self.amount),
            "date": self.period,
            "listOfOperation": [operation.to_dict() for operation in self.operations],
        }

    def __repr__(self) -> str:
        return (
            f"<Bill(id={self.id}, owner_of_bill={self.owner_of_bill}, period={self.period}, "
            f"status={self.status}, amount={self.amount})>"
        )


class BillOperation(Base, BaseModel):
    """Immutable entry of a bill's operation log."""

    __tablename__ = "bill_operations"

    bill_id: Mapped[int] = mapped_column(
        ForeignKey("bills.id"),
        nullable=False,
        index=True,
    )
    sequence: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="1-based position in the bill's log",
    )
    operation: Mapped[BillOperationType] = mapped_column(
        enum_column_type(BillOperationType),
        nullable=False,
    )
    operation_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Calendar date of the operation",
    )
    actor_id: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
        comment="User who performed the operation",
    )

    bill: Mapped["Bill"] = relationship("Bill", back_populates="operations")

    __table_args__ = (UniqueConstraint("bill_id", "sequence", name="uq_bill_operation_sequence"),)

    def to_dict(self) -> dict:
        return {
            "date": format_operation_date(self.operation_date),
            "operation": self.operation.value,
        }

    def __repr__(self) -> str:
        return (
            f"<BillOperation(bill_id={self.bill_id}, sequence={self.sequence}, "
            f"operation={self.operation}, operation_date={self.operation_date})>"
        )


__all__ = ["Bill", "BillOperation", "BillOperationType", "BillStatus", "LEGACY_BILL_STATUSES"]
