"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


def enum_column_type(enum_cls: type[Enum]) -> SAEnum:
    """Store a str Enum by value (e.g. "unpaid"), not by member name."""
    return SAEnum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=30,
        validate_strings=True,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from syndic.models.apartment import Apartment  # noqa: E402
from syndic.models.audit_log import AuditLog  # noqa: E402
from syndic.models.bill import Bill, BillOperation, BillOperationType, BillStatus  # noqa: E402
from syndic.models.payment_ledger import PaymentLedger  # noqa: E402
from syndic.models.remaining_payment import (  # noqa: E402
    RemainingPayment,
    RemainingPaymentStatus,
)
from syndic.models.resident import Resident  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "enum_column_type",
    "Apartment",
    "AuditLog",
    "Bill",
    "BillOperation",
    "BillOperationType",
    "BillStatus",
    "PaymentLedger",
    "RemainingPayment",
    "RemainingPaymentStatus",
    "Resident",
]
