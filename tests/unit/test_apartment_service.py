"""Unit tests for apartment_service.py."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from syndic.models.apartment import Apartment
from syndic.models.audit_log import AuditLog
from syndic.services.apartment_service import ApartmentService, ResidentInfo, generate_join_code
from syndic.services.errors import LedgerValidationError, NotFoundError


class TestCreateApartment:
    """Tests for ApartmentService.create_apartment."""

    async def test_creates_apartment_with_residents(self, apartment):
        assert apartment.id is not None
        assert apartment.name == "Residence Atlas"
        assert apartment.number_of_residents == 2
        assert apartment.syndic_id == "syndic-uid"
        assert len(apartment.join_code) == 6
        assert [resident.name for resident in apartment.residents] == ["Amina", "Youssef"]
        assert apartment.residents[0].monthly_fee == Decimal("500")
        assert apartment.residents[1].remaining_amount == Decimal("500")

    async def test_opening_balance_recorded(self, async_db_session):
        apartment = await ApartmentService(async_db_session).create_apartment(
            "Residence Nour", "syndic-uid", actual_balance="1500.75"
        )

        assert apartment.actual_balance == Decimal("1500.75")
        assert apartment.opening_balance == Decimal("1500.75")

    async def test_syndic_resident_is_linked(self, async_db_session):
        apartment = await ApartmentService(async_db_session).create_apartment(
            "Residence Nour",
            "syndic-uid",
            [ResidentInfo(name="Salma", monthly_fee=400, is_syndic=True)],
        )

        resident = apartment.residents[0]
        assert resident.is_syndic
        assert resident.is_linked_with_user
        assert resident.linked_user_id == "syndic-uid"

    async def test_declared_resident_count(self, async_db_session):
        apartment = await ApartmentService(async_db_session).create_apartment(
            "Residence Nour", "syndic-uid", number_of_residents=12
        )

        assert apartment.number_of_residents == 12
        assert apartment.residents == []

    async def test_writes_audit_entry(self, async_db_session, apartment_id):
        result = await async_db_session.execute(
            select(AuditLog).where(AuditLog.entity_type == "apartment", AuditLog.action == "create")
        )
        entry = result.scalar_one()
        assert entry.entity_id == apartment_id
        assert entry.changes["name"] == "Residence Atlas"

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"name": "  "}, "Apartment name is required"),
            ({"actual_balance": -1}, "Actual balance cannot be negative"),
            ({"residents": [ResidentInfo(name="", monthly_fee=100)]}, "Resident name is required"),
            ({"residents": [ResidentInfo(name="Omar", monthly_fee="x")]}, "Monthly fee must be a number"),
            (
                {"residents": [ResidentInfo(name="Omar", monthly_fee=100, remaining_amount=-5)]},
                "Remaining amount cannot be negative",
            ),
        ],
    )
    async def test_invalid_input_creates_nothing(self, async_db_session, kwargs, message):
        arguments = {"name": "Residence Nour", "syndic_id": "syndic-uid", **kwargs}

        with pytest.raises(LedgerValidationError, match=message):
            await ApartmentService(async_db_session).create_apartment(**arguments)

        await async_db_session.rollback()
        count = await async_db_session.execute(select(func.count(Apartment.id)))
        assert count.scalar() == 0


class TestLookups:
    """Tests for apartment and resident reads."""

    async def test_get_apartment(self, async_db_session, apartment_id):
        apartment = await ApartmentService(async_db_session).get_apartment(apartment_id)

        assert apartment.name == "Residence Atlas"

    async def test_get_apartment_not_found(self, async_db_session):
        with pytest.raises(NotFoundError, match="Apartment not found"):
            await ApartmentService(async_db_session).get_apartment(999)

    async def test_get_residents(self, async_db_session, apartment_id, resident_ids):
        residents = await ApartmentService(async_db_session).get_residents(apartment_id)

        assert [resident.id for resident in residents] == resident_ids

    async def test_get_resident_of_other_apartment(self, async_db_session, apartment_id):
        service = ApartmentService(async_db_session)
        other = await service.create_apartment(
            "Residence Oasis", "other-syndic", [ResidentInfo(name="Karim", monthly_fee=200)]
        )

        with pytest.raises(NotFoundError, match="Resident not found"):
            await service.get_resident(apartment_id, other.residents[0].id)

    async def test_find_by_join_code(self, async_db_session, apartment):
        service = ApartmentService(async_db_session)

        found = await service.find_by_join_code(f" {apartment.join_code.lower()} ")

        assert found.id == apartment.id

    @pytest.mark.parametrize("code", ["", "ABC", "ABC-12", "ABCDEFG"])
    async def test_find_by_join_code_bad_format(self, async_db_session, code):
        with pytest.raises(LedgerValidationError, match="Invalid join code format"):
            await ApartmentService(async_db_session).find_by_join_code(code)

    async def test_find_by_join_code_unknown(self, async_db_session, apartment):
        unknown = "ZZZZZZ" if apartment.join_code != "ZZZZZZ" else "YYYYYY"

        with pytest.raises(NotFoundError, match="Invalid join code"):
            await ApartmentService(async_db_session).find_by_join_code(unknown)


class TestResidentChanges:
    """Tests for resident edits."""

    async def test_add_resident(self, async_db_session, apartment_id):
        service = ApartmentService(async_db_session)

        resident = await service.add_resident(apartment_id, ResidentInfo(name="Omar", monthly_fee=250))

        assert resident.id is not None
        assert resident.apartment_id == apartment_id
        residents = await service.get_residents(apartment_id)
        assert [r.name for r in residents] == ["Amina", "Youssef", "Omar"]

    async def test_update_resident(self, async_db_session, apartment_id, resident_ids):
        service = ApartmentService(async_db_session)

        resident = await service.update_resident(
            apartment_id,
            resident_ids[0],
            monthly_fee="550",
            remaining_amount=0,
            actor_id="syndic-uid",
        )

        assert resident.monthly_fee == Decimal("550")
        assert resident.remaining_amount == Decimal("0")
        result = await async_db_session.execute(
            select(AuditLog).where(AuditLog.entity_type == "resident", AuditLog.action == "update")
        )
        entry = result.scalar_one()
        assert entry.changes["monthly_fee"] == {"old": 500.0, "new": 550.0}

    async def test_update_resident_rejects_negative_fee(self, async_db_session, apartment_id, resident_ids):
        with pytest.raises(LedgerValidationError, match="Monthly fee cannot be negative"):
            await ApartmentService(async_db_session).update_resident(
                apartment_id, resident_ids[0], monthly_fee=-1
            )

    async def test_link_user(self, async_db_session, apartment_id, resident_ids):
        service = ApartmentService(async_db_session)

        resident = await service.link_user(apartment_id, resident_ids[1], "resident-uid")
        again = await service.link_user(apartment_id, resident_ids[1], "resident-uid")

        assert resident.is_linked_with_user
        assert again.linked_user_id == "resident-uid"

    async def test_link_user_already_linked(self, async_db_session, apartment_id, resident_ids):
        service = ApartmentService(async_db_session)
        await service.link_user(apartment_id, resident_ids[1], "resident-uid")

        with pytest.raises(LedgerValidationError, match="already linked"):
            await service.link_user(apartment_id, resident_ids[1], "someone-else")


def test_generate_join_code():
    code = generate_join_code(8)

    assert len(code) == 8
    assert code.isalnum()
    assert code == code.upper()


async def test_join_code_length_from_settings(async_db_session, monkeypatch):
    monkeypatch.setenv("JOIN_CODE_LENGTH", "8")
    service = ApartmentService(async_db_session)

    apartment = await service.create_apartment("Residence Nour", "syndic-uid")

    assert len(apartment.join_code) == 8
    assert (await service.find_by_join_code(apartment.join_code)).id == apartment.id
