"""Parsing and formatting of ledger dates, billing periods and amounts.

Formats:
- Billing period: MM-YYYY (e.g. "03-2025")
- Operation date: DD-MM-YYYY (e.g. "07-03-2025")
- Display date: DD/MM/YYYY (e.g. "07/03/2025")

Example:
    >>> parse_period("03-2025")
    (2025, 3)

    >>> format_operation_date(date(2025, 3, 7))
    '07-03-2025'

    >>> parse_amount("400")
    Decimal('400')
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

PERIOD_PATTERN = re.compile(r"^(0[1-9]|1[0-2])-(\d{4})$")


def format_period(year: int, month: int) -> str:
    """
    Build a billing period key.

    Args:
        year: Four-digit year
        month: Month number 1-12

    Returns:
        Period string "MM-YYYY"

    Raises:
        ValueError: If month is out of range
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return f"{month:02d}-{year:04d}"


def parse_period(value: str) -> tuple[int, int]:
    """
    Parse a billing period key.

    Args:
        value: Period string "MM-YYYY"

    Returns:
        (year, month) tuple

    Raises:
        ValueError: If value is not a valid MM-YYYY period

    Examples:
        >>> parse_period("12-2024")
        (2024, 12)
        >>> parse_period("13-2024")
        Traceback (most recent call last):
        ValueError: Invalid billing period '13-2024', expected MM-YYYY
    """
    match = PERIOD_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid billing period '{value}', expected MM-YYYY")
    return int(match.group(2)), int(match.group(1))


def period_of(day: date) -> str:
    """Billing period containing the given date."""
    return format_period(day.year, day.month)


def shift_period(value: str, months: int) -> str:
    """Move a billing period forward (or backward, for negative months)."""
    year, month = parse_period(value)
    index = year * 12 + (month - 1) + months
    return format_period(index // 12, index % 12 + 1)


def format_operation_date(day: date) -> str:
    """Format a date as DD-MM-YYYY for operation log entries."""
    return day.strftime("%d-%m-%Y")


def parse_operation_date(value: str) -> date:
    """
    Parse a DD-MM-YYYY operation date.

    Raises:
        ValueError: If value is not a valid date in that format
    """
    try:
        return datetime.strptime(value.strip(), "%d-%m-%Y").date()
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid operation date '{value}', expected DD-MM-YYYY") from e


def format_display_date(day: date) -> str:
    """Format a date as DD/MM/YYYY for display."""
    return day.strftime("%d/%m/%Y")


def parse_amount(value: Decimal | int | float | str) -> Decimal:
    """
    Convert a user-supplied amount to Decimal.

    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.

    Raises:
        ValueError: If value is not a finite number

    Examples:
        >>> parse_amount(250)
        Decimal('250')
        >>> parse_amount(" 12.50 ")
        Decimal('12.50')
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount '{value}'")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid amount '{value}'") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount '{value}'")
    return amount


__all__ = [
    "PERIOD_PATTERN",
    "format_period",
    "parse_period",
    "period_of",
    "shift_period",
    "format_operation_date",
    "parse_operation_date",
    "format_display_date",
    "parse_amount",
]
