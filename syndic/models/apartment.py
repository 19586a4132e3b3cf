"""Apartment ORM model holding the collected-funds balance."""

from decimal import Decimal

from sqlalchemy import Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from syndic.models import Base, BaseModel


class Apartment(Base, BaseModel):
    """Model representing an apartment building administered by a syndic.

    `actual_balance` is the running total of collected funds. Ledger
    operations only ever add to it; `opening_balance` keeps the figure
    entered at onboarding so the balance can be replayed from the ledger.
    """

    __tablename__ = "apartments"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Apartment (building) display name",
    )
    number_of_residents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Declared number of residents",
    )
    actual_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Signed running total of collected funds",
    )
    opening_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Balance entered when the apartment was created",
    )
    join_code: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        unique=True,
        comment="Code residents use to join this apartment",
    )
    syndic_id: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
        comment="Authenticated user id of the syndic",
    )

    # Relationships
    residents: Mapped[list["Resident"]] = relationship(  # noqa: F821
        "Resident",
        back_populates="apartment",
        order_by="Resident.id",
        lazy="selectin",
    )

    __table_args__ = (Index("idx_apartment_join_code", "join_code", unique=True),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "numberOfResidents": self.number_of_residents,
            "actualBalance": float(self.actual_balance),
            "joinCode": self.join_code,
            "syndicId": self.syndic_id,
            "residents": [resident.id for resident in self.residents],
        }

    def __repr__(self) -> str:
        return (
            f"<Apartment(id={self.id}, name={self.name!r}, "
            f"actual_balance={self.actual_balance}, join_code={self.join_code})>"
        )


__all__ = ["Apartment"]
