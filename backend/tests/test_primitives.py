"""Tests for field-extraction primitives."""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from txnflow.parsers.primitives import (
    clean_capture,
    clean_text,
    looks_like_account_number,
    normalize_amount,
    resolve_date,
    translate_numerals,
)


class TestNormalizeAmount:
    """Test amount normalization across separator conventions."""

    @pytest.mark.parametrize("raw,expected", [
        ("1,500.00", Decimal("1500.00")),
        ("1.500,00", Decimal("1500.00")),
        ("45,000.00", Decimal("45000.00")),
        ("99.99", Decimal("99.99")),
        ("12,5", Decimal("12.5")),
        ("1,000", Decimal("1000")),
        ("1.000.000", Decimal("1000000")),
        ("ETB 250", Decimal("250")),
        ("250 Birr", Decimal("250")),
    ])
    def test_separators(self, raw, expected):
        """Thousands and decimal separators in both conventions."""
        assert normalize_amount(raw) == expected

    def test_ethiopic_numerals(self):
        """Ethiopic numeral symbols map to digits."""
        assert normalize_amount("፭") == Decimal("5")
        assert normalize_amount("፲") == Decimal("10")

    def test_numeric_input(self):
        """Numbers pass through as Decimals."""
        assert normalize_amount(150) == Decimal("150")
        assert normalize_amount(Decimal("1.5")) == Decimal("1.5")

    def test_sign_is_kept(self):
        """Negative values are returned, callers decide what to reject."""
        assert normalize_amount("-20") == Decimal("-20")

    @pytest.mark.parametrize("raw", [None, "", "abc", "ETB", True])
    def test_unparseable(self, raw):
        """Garbage yields None."""
        assert normalize_amount(raw) is None


class TestResolveDate:
    """Test date resolution."""

    def test_iso(self):
        assert resolve_date("2025-12-12") == datetime(2025, 12, 12)

    def test_message_format(self):
        """Day-month-year formats used in bank messages."""
        assert resolve_date("12-Dec-2025") == datetime(2025, 12, 12)
        assert resolve_date("12/11/2025") == datetime(2025, 11, 12)

    def test_date_object(self):
        assert resolve_date(date(2024, 2, 29)) == datetime(2024, 2, 29)

    def test_utc_designator(self):
        """A trailing Z resolves to naive UTC."""
        assert resolve_date("2026-01-01T00:00:00Z") == datetime(2026, 1, 1)

    def test_offset_converted_to_utc(self):
        assert resolve_date("2025-12-12T10:00:00+03:00") == datetime(2025, 12, 12, 7, 0)
        aware = datetime(2025, 12, 12, 10, 0, tzinfo=timezone(timedelta(hours=3)))
        assert resolve_date(aware) == datetime(2025, 12, 12, 7, 0)
        assert resolve_date(aware).tzinfo is None

    def test_invalid_calendar_date(self):
        """Feb 30 is not a date."""
        assert resolve_date("2025-02-30") is None

    @pytest.mark.parametrize("value", [None, "", "yesterday", 42])
    def test_unresolvable(self, value):
        assert resolve_date(value) is None


class TestTextCleanup:
    """Test text cleanup helpers."""

    def test_collapses_whitespace(self):
        assert clean_text("  Debit:\n ETB\t500  ") == "Debit: ETB 500"

    def test_removes_zero_width(self):
        assert clean_text("ETB\u200b 500") == "ETB 500"

    def test_translate_numerals(self):
        assert translate_numerals("ብር ፫") == "ብር 3"

    def test_clean_capture(self):
        """Trailing punctuation is stripped from captures."""
        assert clean_capture(" Shoa Supermarket, ") == "Shoa Supermarket"
        assert clean_capture("  ") is None

    def test_masked_accounts(self):
        assert looks_like_account_number("A/C ****1234")
        assert looks_like_account_number("1000123456789")
        assert not looks_like_account_number("Tomoca Coffee")
