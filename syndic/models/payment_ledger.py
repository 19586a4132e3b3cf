"""Per-apartment payment ledger owning bills and remaining payments."""

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from syndic.models import Base, BaseModel


class PaymentLedger(Base, BaseModel):
    """One row per apartment, created lazily by the first ledger write.

    Bills and remaining payments reference it individually, and ledger
    mutations lock this row to serialize writers of the same apartment.
    """

    __tablename__ = "payment_ledgers"

    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"),
        nullable=False,
        unique=True,
        comment="Apartment owning this ledger",
    )

    def __repr__(self) -> str:
        return f"<PaymentLedger(id={self.id}, apartment_id={self.apartment_id})>"


__all__ = ["PaymentLedger"]
