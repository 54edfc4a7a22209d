"""Tests for statement date parsing."""

from datetime import date

from finsync.utils.date_parser import parse_statement_date


def test_parse_iso_date():
    """Test parsing ISO dates."""
    assert parse_statement_date("2025-01-05") == date(2025, 1, 5)


def test_parse_iso_datetime_keeps_calendar_date():
    """Test that the written date is kept regardless of the offset."""
    assert parse_statement_date("2025-01-05T23:30:00-03:00") == date(2025, 1, 5)


def test_parse_day_first_slash_date():
    """Test parsing DD/MM/YYYY."""
    assert parse_statement_date("05/01/2025") == date(2025, 1, 5)
    assert parse_statement_date("31/12/2024") == date(2024, 12, 31)


def test_parse_compact_ofx_date():
    """Test parsing OFX compact dates with time and zone suffix."""
    assert parse_statement_date("20250105") == date(2025, 1, 5)
    assert parse_statement_date("20250105120000[-3:BRT]") == date(2025, 1, 5)


def test_parse_generic_fallback():
    """Test that other readable dates fall through to the generic parser."""
    assert parse_statement_date("Jan 5 2025") == date(2025, 1, 5)


def test_parse_invalid_calendar_date():
    """Test that impossible dates yield None."""
    assert parse_statement_date("31/02/2025") is None
    assert parse_statement_date("20251399") is None


def test_parse_garbage_and_empty():
    """Test that unparseable input yields None instead of raising."""
    assert parse_statement_date("not a date") is None
    assert parse_statement_date("") is None
    assert parse_statement_date("   ") is None
    assert parse_statement_date(None) is None
