"""Apartment and resident records consumed by the ledger.

Creates apartments with their residents and a join code, reads resident
lists and fees for billing, and edits resident records. Unlike the ledger
operations, these methods raise domain errors instead of returning results.
"""

import logging
import re
import secrets
import string
from decimal import Decimal
from typing import NamedTuple, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syndic.config import get_settings
from syndic.models.apartment import Apartment
from syndic.models.resident import Resident
from syndic.services.audit_service import AuditService
from syndic.services.errors import LedgerValidationError, NotFoundError
from syndic.services.parsers import parse_amount

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
JOIN_CODE_ATTEMPTS = 10


class ResidentInfo(NamedTuple):
    """Resident entered while setting up an apartment."""

    name: str
    monthly_fee: Decimal | int | float | str
    remaining_amount: Decimal | int | float | str = 0
    is_syndic: bool = False


def generate_join_code(length: int = 6) -> str:
    """Random code of uppercase letters and digits."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def _non_negative(value: Decimal | int | float | str, field_name: str) -> Decimal:
    try:
        amount = parse_amount(value)
    except ValueError as e:
        raise LedgerValidationError(f"{field_name} must be a number") from e
    if amount < 0:
        raise LedgerValidationError(f"{field_name} cannot be negative")
    return amount


class ApartmentService:
    """Service for apartment and resident records."""

    def __init__(self, session: AsyncSession, join_code_length: int | None = None):
        """Initialize with async database session.

        Join codes default to the configured join_code_length.
        """
        self.session = session
        self.join_code_length = join_code_length or get_settings().join_code_length
        self.join_code_pattern = re.compile(rf"^[A-Z0-9]{{{self.join_code_length}}}$")

    async def create_apartment(
        self,
        name: str,
        syndic_id: str,
        residents: Sequence[ResidentInfo] = (),
        *,
        number_of_residents: int | None = None,
        actual_balance: Decimal | int | float | str = 0,
    ) -> Apartment:
        """Create an apartment, its residents and a unique join code.

        Args:
            name: Apartment display name
            syndic_id: Authenticated user id of the syndic
            residents: Residents to create (a resident flagged is_syndic is linked to syndic_id)
            number_of_residents: Declared resident count (defaults to len(residents))
            actual_balance: Funds already collected at onboarding

        Returns:
            Created Apartment with residents loaded

        Raises:
            LedgerValidationError: If name is empty or an amount is invalid
        """
        name = (name or "").strip()
        if not name:
            raise LedgerValidationError("Apartment name is required")

        opening_balance = _non_negative(actual_balance, "Actual balance")
        declared = number_of_residents if number_of_residents is not None else len(residents)
        if declared < 0:
            raise LedgerValidationError("Number of residents cannot be negative")

        apartment = Apartment(
            name=name,
            number_of_residents=declared,
            actual_balance=opening_balance,
            opening_balance=opening_balance,
            join_code=await self._unique_join_code(),
            syndic_id=syndic_id,
        )
        for info in residents:
            self._build_resident(apartment, info)

        self.session.add(apartment)
        await self.session.flush()
        await AuditService.log(
            session=self.session,
            entity_type="apartment",
            entity_id=apartment.id,
            action="create",
            actor_id=apartment.syndic_id,
            changes={
                "name": name,
                "number_of_residents": declared,
                "actual_balance": float(opening_balance),
            },
        )
        await self.session.commit()
        await self.session.refresh(apartment, attribute_names=["residents"])

        logger.info(
            "Created apartment %d (%s) with %d residents, join code %s",
            apartment.id,
            name,
            len(residents),
            apartment.join_code,
        )
        return apartment

    async def get_apartment(self, apartment_id: int) -> Apartment:
        """Get apartment by ID.

        Raises:
            NotFoundError: If apartment does not exist
        """
        apartment = await self.session.get(Apartment, apartment_id, populate_existing=True)
        if not apartment:
            raise NotFoundError("Apartment not found")
        return apartment

    async def get_residents(self, apartment_id: int) -> list[Resident]:
        """List residents of an apartment ordered by creation."""
        result = await self.session.execute(
            select(Resident)
            .where(Resident.apartment_id == apartment_id)
            .order_by(Resident.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_resident(self, apartment_id: int, resident_id: int) -> Resident:
        """Get a resident of the apartment.

        Raises:
            NotFoundError: If the resident does not exist or lives elsewhere
        """
        resident = await self.session.get(Resident, resident_id, populate_existing=True)
        if not resident or resident.apartment_id != apartment_id:
            raise NotFoundError("Resident not found")
        return resident

    async def find_by_join_code(self, join_code: str) -> Apartment:
        """Find the apartment a resident wants to join.

        Raises:
            LedgerValidationError: If the code format is invalid
            NotFoundError: If no apartment has this code
        """
        code = (join_code or "").strip().upper()
        if not self.join_code_pattern.match(code):
            raise LedgerValidationError("Invalid join code format")

        result = await self.session.execute(select(Apartment).where(Apartment.join_code == code))
        apartment = result.scalar_one_or_none()
        if not apartment:
            raise NotFoundError("Invalid join code. Please check and try again")
        return apartment

    async def add_resident(self, apartment_id: int, info: ResidentInfo) -> Resident:
        """Add a resident to an existing apartment."""
        apartment = await self.get_apartment(apartment_id)
        resident = self._build_resident(apartment, info)
        self.session.add(resident)
        await self.session.commit()
        logger.info("Added resident %d (%s) to apartment %d", resident.id, resident.name, apartment_id)
        return resident

    async def update_resident(
        self,
        apartment_id: int,
        resident_id: int,
        *,
        name: str | None = None,
        monthly_fee: Decimal | int | float | str | None = None,
        remaining_amount: Decimal | int | float | str | None = None,
        actor_id: str | None = None,
    ) -> Resident:
        """Edit a resident's name, monthly fee or remaining amount.

        Raises:
            NotFoundError: If the resident does not belong to the apartment
            LedgerValidationError: If a value is empty or negative
        """
        resident = await self.get_resident(apartment_id, resident_id)
        changes = {}

        if name is not None:
            name = name.strip()
            if not name:
                raise LedgerValidationError("Resident name is required")
            changes["name"] = {"old": resident.name, "new": name}
            resident.name = name

        if monthly_fee is not None:
            fee = _non_negative(monthly_fee, "Monthly fee")
            changes["monthly_fee"] = {"old": float(resident.monthly_fee), "new": float(fee)}
            resident.monthly_fee = fee

        if remaining_amount is not None:
            remaining = _non_negative(remaining_amount, "Remaining amount")
            changes["remaining_amount"] = {
                "old": float(resident.remaining_amount),
                "new": float(remaining),
            }
            resident.remaining_amount = remaining

        if changes:
            await AuditService.log(
                session=self.session,
                entity_type="resident",
                entity_id=resident.id,
                action="update",
                actor_id=actor_id,
                changes=changes,
            )
            await self.session.commit()
            logger.info("Updated resident %d: %s", resident.id, ", ".join(changes))

        return resident

    async def link_user(self, apartment_id: int, resident_id: int, user_id: str) -> Resident:
        """Link a resident record to an authenticated user.

        Raises:
            LedgerValidationError: If the resident is already linked to another user
        """
        resident = await self.get_resident(apartment_id, resident_id)
        if resident.is_linked_with_user and resident.linked_user_id != user_id:
            raise LedgerValidationError("Resident is already linked to another user")

        resident.is_linked_with_user = True
        resident.linked_user_id = user_id
        await self.session.commit()
        logger.info("Linked resident %d to user %s", resident.id, user_id)
        return resident

    def _build_resident(self, apartment: Apartment, info: ResidentInfo) -> Resident:
        name = (info.name or "").strip()
        if not name:
            raise LedgerValidationError("Resident name is required")
        return Resident(
            apartment=apartment,
            name=name,
            monthly_fee=_non_negative(info.monthly_fee, "Monthly fee"),
            remaining_amount=_non_negative(info.remaining_amount, "Remaining amount"),
            is_syndic=info.is_syndic,
            is_linked_with_user=info.is_syndic and apartment.syndic_id is not None,
            linked_user_id=apartment.syndic_id if info.is_syndic else None,
        )

    async def _unique_join_code(self) -> str:
        for _ in range(JOIN_CODE_ATTEMPTS):
            code = generate_join_code(self.join_code_length)
            result = await self.session.execute(select(Apartment.id).where(Apartment.join_code == code))
            if result.scalar_one_or_none() is None:
                return code
        raise LedgerValidationError("Could not generate a unique join code")


__all__ = ["ApartmentService", "ResidentInfo", "generate_join_code"]
