"""Resident ORM model with monthly fee and outstanding balance."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from syndic.models import Base, BaseModel


class Resident(Base, BaseModel):
    """Model representing a person living in an apartment.

    `remaining_amount` is the outstanding balance owed beyond regular
    monthly bills. It only decreases through remaining payments and never
    goes below zero.
    """

    __tablename__ = "residents"

    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"),
        nullable=False,
        index=True,
        comment="Apartment this resident belongs to",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Full name")
    monthly_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Amount billed every month",
    )
    remaining_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Outstanding balance beyond monthly bills",
    )
    is_syndic: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, comment="Resident is also the syndic"
    )
    is_linked_with_user: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, comment="Linked to an authenticated user"
    )
    linked_user_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True, comment="Authenticated user id, when linked"
    )

    apartment: Mapped["Apartment"] = relationship(  # noqa: F821
        "Apartment",
        back_populates="residents",
        foreign_keys=[apartment_id],
    )

    __table_args__ = (
        CheckConstraint("monthly_fee >= 0", name="ck_resident_monthly_fee_non_negative"),
        CheckConstraint("remaining_amount >= 0", name="ck_resident_remaining_non_negative"),
        Index("idx_resident_apartment_name", "apartment_id", "name"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "apartmentId": self.apartment_id,
            "name": self.name,
            "monthlyFee": float(self.monthly_fee),
            "remainingAmount": float(self.remaining_amount),
            "isSyndic": self.is_syndic,
            "isLinkedWithUser": self.is_linked_with_user,
            "linkedUserId": self.linked_user_id,
        }

    def __repr__(self) -> str:
        return (
            f"<Resident(id={self.id}, apartment_id={self.apartment_id}, name={self.name!r}, "
            f"monthly_fee={self.monthly_fee}, remaining_amount={self.remaining_amount})>"
        )


__all__ = ["Resident"]
