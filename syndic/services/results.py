"""Uniform result shape returned by public ledger operations."""

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from syndic.services.errors import GENERIC_ERROR_MESSAGE, LedgerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of a ledger operation.

    Expected failures (not authenticated, not found, validation) are
    reported with success=False and a user-facing error message.
    """

    success: bool
    error: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **payload: Any) -> "LedgerResult":
        return cls(success=True, error=None, payload=payload)

    @classmethod
    def fail(cls, error: str) -> "LedgerResult":
        return cls(success=False, error=error)

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def as_dict(self) -> dict[str, Any]:
        return {"success": self.success, "error": self.error, **self.payload}


def ledger_operation(action: str) -> Callable:
    """Turn a service coroutine into a never-raising ledger operation.

    The wrapped method runs inside the service session's transaction. A
    LedgerError rolls back and becomes a failed result with its message; any
    other exception is logged, rolled back and reported with the generic
    message.
    """

    def decorator(func: Callable[..., Awaitable[LedgerResult]]) -> Callable[..., Awaitable[LedgerResult]]:
        @functools.wraps(func)
        async def wrapper(self, *args: Any, **kwargs: Any) -> LedgerResult:
            try:
                return await func(self, *args, **kwargs)
            except LedgerError as e:
                logger.warning("%s rejected: %s", action, e)
                await self.session.rollback()
                return LedgerResult.fail(str(e))
            except Exception as e:
                logger.error("Error during %s: %s", action, e, exc_info=True)
                await self.session.rollback()
                return LedgerResult.fail(GENERIC_ERROR_MESSAGE)

        return wrapper

    return decorator


__all__ = ["LedgerResult", "ledger_operation"]
