"""Tests for money parsing."""

from decimal import Decimal

import pytest

from finsync.utils.amount_parser import parse_money


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1.234,56", Decimal("1234.56")),
        ("1234.56", Decimal("1234.56")),
        ("R$ 50,00", Decimal("50.00")),
        ("50,00", Decimal("50.00")),
        ("-450.00", Decimal("-450.00")),
        (" 1 234,56 ", Decimal("1234.56")),
        ("6566.16", Decimal("6566.16")),
    ],
)
def test_parse_money_formats(raw, expected):
    """Test the supported money notations."""
    assert parse_money(raw) == expected


def test_parse_money_keeps_sign_with_thousands():
    """Test negative Brazilian-notation amounts."""
    assert parse_money("-1.234,56") == Decimal("-1234.56")


@pytest.mark.parametrize("raw", ["", "   ", "abc", "R$", "-", None])
def test_parse_money_unparseable(raw):
    """Test that nothing numeric left means None, not an exception."""
    assert parse_money(raw) is None
