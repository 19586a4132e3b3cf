"""Tests for LedgerResult and the ledger_operation decorator."""

import logging

from syndic.services.errors import GENERIC_ERROR_MESSAGE, AuthenticationError, NotFoundError
from syndic.services.results import LedgerResult, ledger_operation


class _Session:
    def __init__(self):
        self.rollbacks = 0

    async def rollback(self):
        self.rollbacks += 1


class _Service:
    def __init__(self):
        self.session = _Session()

    @ledger_operation("succeed")
    async def succeed(self, value):
        return LedgerResult.ok(value=value)

    @ledger_operation("missing")
    async def missing(self):
        raise NotFoundError("Bill not found")

    @ledger_operation("anonymous")
    async def anonymous(self):
        raise AuthenticationError()

    @ledger_operation("crash")
    async def crash(self):
        raise RuntimeError("disk full")


def test_ok_and_fail():
    ok = LedgerResult.ok(billsCreated=2)
    fail = LedgerResult.fail("Bill not found")

    assert ok.as_dict() == {"success": True, "error": None, "billsCreated": 2}
    assert fail.as_dict() == {"success": False, "error": "Bill not found"}
    assert ok.get("billsCreated") == 2
    assert fail.get("billsCreated", 0) == 0


async def test_success_passes_through():
    service = _Service()

    result = await service.succeed(5)

    assert result.success
    assert result.get("value") == 5
    assert service.session.rollbacks == 0


async def test_ledger_error_becomes_failed_result(caplog):
    service = _Service()

    with caplog.at_level(logging.WARNING):
        result = await service.missing()

    assert not result.success
    assert result.error == "Bill not found"
    assert service.session.rollbacks == 1
    assert "missing rejected: Bill not found" in caplog.text


async def test_authentication_error_message():
    result = await _Service().anonymous()

    assert result.error == "User not authenticated"


async def test_unexpected_error_is_generic(caplog):
    service = _Service()

    with caplog.at_level(logging.ERROR):
        result = await service.crash()

    assert not result.success
    assert result.error == GENERIC_ERROR_MESSAGE
    assert "disk full" not in result.error
    assert service.session.rollbacks == 1
    assert "Error during crash" in caplog.text


def test_wrapper_keeps_name():
    assert _Service.succeed.__name__ == "succeed"
