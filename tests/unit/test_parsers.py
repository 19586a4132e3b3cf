"""Unit tests for parsers module."""

from datetime import date
from decimal import Decimal

import pytest

from syndic.services.parsers import (
    format_display_date,
    format_operation_date,
    format_period,
    parse_amount,
    parse_operation_date,
    parse_period,
    period_of,
    shift_period,
)


class TestPeriods:
    """Tests for MM-YYYY billing period helpers."""

    def test_format_period(self):
        """Test month is zero-padded."""
        assert format_period(2025, 3) == "03-2025"
        assert format_period(2024, 12) == "12-2024"

    def test_format_period_invalid_month(self):
        with pytest.raises(ValueError, match="Month must be between 1 and 12"):
            format_period(2025, 13)

    def test_parse_period(self):
        assert parse_period("03-2025") == (2025, 3)
        assert parse_period(" 12-2024 ") == (2024, 12)

    @pytest.mark.parametrize("value", ["3-2025", "13-2025", "00-2025", "2025-03", "", "03/2025", None])
    def test_parse_period_invalid(self, value):
        with pytest.raises(ValueError, match="expected MM-YYYY"):
            parse_period(value)

    def test_period_of(self):
        assert period_of(date(2025, 1, 31)) == "01-2025"

    def test_shift_period_across_years(self):
        """Test shifting wraps December and January correctly."""
        assert shift_period("12-2024", 1) == "01-2025"
        assert shift_period("01-2025", -1) == "12-2024"
        assert shift_period("03-2025", 12) == "03-2026"
        assert shift_period("03-2025", 0) == "03-2025"


class TestDates:
    """Tests for operation and display date formats."""

    def test_format_operation_date(self):
        assert format_operation_date(date(2025, 3, 7)) == "07-03-2025"

    def test_parse_operation_date(self):
        assert parse_operation_date("07-03-2025") == date(2025, 3, 7)

    def test_parse_operation_date_invalid(self):
        with pytest.raises(ValueError, match="expected DD-MM-YYYY"):
            parse_operation_date("2025-03-07")

    def test_parse_operation_date_impossible_day(self):
        with pytest.raises(ValueError, match="Invalid operation date"):
            parse_operation_date("31-02-2025")

    def test_format_display_date(self):
        assert format_display_date(date(2025, 3, 7)) == "07/03/2025"


class TestParseAmount:
    """Tests for parse_amount function."""

    def test_parse_int(self):
        assert parse_amount(250) == Decimal("250")

    def test_parse_string_with_spaces(self):
        assert parse_amount(" 12.50 ") == Decimal("12.50")

    def test_parse_float_keeps_decimal_digits(self):
        """Test floats are converted through their string form."""
        assert parse_amount(0.1) == Decimal("0.1")

    def test_parse_decimal_passthrough(self):
        value = Decimal("99.99")
        assert parse_amount(value) is value

    def test_parse_negative(self):
        assert parse_amount("-5") == Decimal("-5")

    @pytest.mark.parametrize("value", ["abc", "", None, True, "inf", Decimal("NaN")])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError, match="Invalid amount"):
            parse_amount(value)
