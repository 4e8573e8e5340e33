"""
Tests for validation and money helpers
"""
from datetime import date, datetime

import pytest

from app.utils.money import format_money
from app.utils.validation import (
    is_minor_amount, is_valid_month, is_valid_currency, parse_date, month_bounds, blank_to_none,
)


def test_is_minor_amount():
    assert is_minor_amount(1500)
    assert is_minor_amount(-10)
    assert not is_minor_amount(15.5)
    assert not is_minor_amount("15")
    assert not is_minor_amount(True)
    assert is_minor_amount(2**63 - 1)
    assert not is_minor_amount(2**63)
    assert not is_minor_amount(-(2**63) - 1)


def test_is_valid_month():
    assert is_valid_month("2024-03")
    assert not is_valid_month("2024-13")
    assert not is_valid_month("2024-3")
    assert not is_valid_month(None)


def test_is_valid_currency():
    assert is_valid_currency("IDR")
    assert not is_valid_currency("idr")
    assert not is_valid_currency("RUPIAH")


def test_parse_date_variants():
    assert parse_date("2024-03-15") == date(2024, 3, 15)
    assert parse_date("2024-03-15T10:30:00") == date(2024, 3, 15)
    assert parse_date("2024-03-15T10:30:00Z") == date(2024, 3, 15)
    assert parse_date(datetime(2024, 3, 15, 23, 59)) == date(2024, 3, 15)
    assert parse_date(date(2024, 3, 15)) == date(2024, 3, 15)


@pytest.mark.parametrize("value", ["", "15/03/2024", None, 20240315])
def test_parse_date_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_date(value)


def test_month_bounds_december_rolls_over():
    assert month_bounds("2024-12") == (date(2024, 12, 1), date(2025, 1, 1))
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 3, 1))


def test_blank_to_none():
    assert blank_to_none("  ") is None
    assert blank_to_none("x") == "x"
    assert blank_to_none(None) is None


def test_format_money():
    assert format_money(1500000, "IDR") == "1 500 000 IDR"
    assert format_money(120050, "USD") == "1 200.50 USD"
    assert format_money(-2500, "EUR") == "-25.00 EUR"
    assert format_money(10000, "RUB") == "100.00 руб."
