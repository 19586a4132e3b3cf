"""Domain exceptions raised inside the ledger services.

Public ledger operations turn these into failed LedgerResult values; the
message of each exception is what the caller shows to the user.
"""

GENERIC_ERROR_MESSAGE = "An error occurred, please try again"


class LedgerError(Exception):
    """Base exception for expected ledger failures."""

    pass


class AuthenticationError(LedgerError):
    """No authenticated actor for an operation that needs one."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message)


class NotFoundError(LedgerError):
    """Apartment, resident, ledger, bill or payment does not exist."""

    pass


class LedgerValidationError(LedgerError):
    """Rejected input or forbidden state transition."""

    pass


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "LedgerError",
    "AuthenticationError",
    "NotFoundError",
    "LedgerValidationError",
]
