"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from haulbook.utils.amount_parser import parse_amount, to_money


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1234.5", Decimal("1234.50")),
        ("₹1,234.50", Decimal("1234.50")),
        ("Rs. 1,23,456", Decimal("123456.00")),
        ("rs 500", Decimal("500.00")),
        ("INR 75", Decimal("75.00")),
        (" 0 ", Decimal("0.00")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12..5"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_amount_rejects_negative():
    with pytest.raises(ValueError, match="must not be negative"):
        parse_amount("-100")


def test_to_money_rounds_half_up():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(2.675) == Decimal("2.68")
    assert to_money(None) == Decimal("0.00")
    assert to_money("") == Decimal("0.00")
    assert to_money(Decimal("7")) == Decimal("7.00")
