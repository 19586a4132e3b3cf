"""Remaining payment ORM model: ad-hoc payments against a resident's outstanding balance."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from syndic.models import Base, BaseModel, enum_column_type


class RemainingPaymentStatus(str, Enum):
    """Remaining payments move from PENDING to PAID once and never back."""

    PENDING = "pending"
    PAID = "paid"


class RemainingPayment(Base, BaseModel):
    """Model representing a partial or extra payment of a resident's remaining amount.

    The amount is reserved (deducted from the resident's remaining amount)
    when the payment is created, whatever its status. It counts towards the
    apartment balance once PAID.
    """

    __tablename__ = "remaining_payments"

    ledger_id: Mapped[int] = mapped_column(
        ForeignKey("payment_ledgers.id"),
        nullable=False,
        index=True,
    )
    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"),
        nullable=False,
        index=True,
    )
    resident_id: Mapped[int] = mapped_column(
        ForeignKey("residents.id"),
        nullable=False,
        index=True,
    )
    resident_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Resident name at creation time",
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[RemainingPaymentStatus] = mapped_column(
        enum_column_type(RemainingPaymentStatus),
        nullable=False,
        default=RemainingPaymentStatus.PENDING,
        index=True,
    )
    created_by: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="User who created the payment",
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (Index("idx_remaining_payment_apartment_resident", "apartment_id", "resident_id"),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "apartmentId": self.apartment_id,
            "residentId": self.resident_id,
            "residentName": self.resident_name,
            "amount": float(self.amount),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "createdBy": self.created_by,
            "paidAt": self.paid_at.isoformat() if self.paid_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"<RemainingPayment(id={self.id}, resident_id={self.resident_id}, "
            f"amount={self.amount}, status={self.status})>"
        )


__all__ = ["RemainingPayment", "RemainingPaymentStatus"]
