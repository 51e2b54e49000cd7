"""Tests for currency formatting rules."""

from decimal import Decimal

import pytest

from solvix.services.currency import CURRENCIES, format_currency, get_currency, list_currencies


FORMATTED = [
    ("EUR", "1 234 567,89 €"),
    ("USD", "$1,234,567.89"),
    ("XAF", "1 234 568 FCFA"),
    ("GBP", "£1,234,567.89"),
    ("CHF", "1 234 567.89 CHF"),
    ("CAD", "CAD1,234,567.89"),
    ("JPY", "¥1,234,568"),
    ("CNY", "¥1,234,567.89"),
    ("MAD", "1 234 567,89 MAD"),
    ("TND", "1 234 567,891 TND"),
]


@pytest.mark.parametrize("code,expected", FORMATTED)
def test_format_each_supported_currency(code, expected):
    assert format_currency(1234567.891, code) == expected


def test_every_supported_currency_is_covered():
    assert {code for code, _ in FORMATTED} == set(CURRENCIES)


@pytest.mark.parametrize("code", sorted(CURRENCIES))
def test_symbol_side_and_decimal_count(code):
    """Symbol on the configured side, configured number of decimals."""
    c = CURRENCIES[code]
    text = format_currency(1000, code)
    if c.position == "before":
        assert text.startswith(c.symbol)
        number = text[len(c.symbol):]
    else:
        assert text.endswith(" " + c.symbol)
        number = text[: -len(c.symbol) - 1]
    if c.decimals:
        integer, decimals = number.rsplit(c.decimal_separator, 1)
        assert decimals == "0" * c.decimals
        assert integer == f"1{c.thousands_separator}000"
    else:
        assert number == f"1{c.thousands_separator}000"


@pytest.mark.parametrize("amount,expected", [
    (0, "0,00 €"),
    (5, "5,00 €"),
    (999, "999,00 €"),
    (1000, "1 000,00 €"),
    (2.675, "2,68 €"),
    (999.995, "1 000,00 €"),
    (Decimal("0.005"), "0,01 €"),
    ("42.1", "42,10 €"),
])
def test_eur_rounding_half_up(amount, expected):
    assert format_currency(amount, "EUR") == expected


def test_zero_decimal_currency_rounds_half_up():
    assert format_currency(0.5, "XAF") == "1 FCFA"
    assert format_currency(1499.49, "JPY") == "¥1,499"


def test_negative_amounts_keep_sign_before_number():
    assert format_currency(-1234.5, "EUR") == "-1 234,50 €"
    assert format_currency(-12, "USD") == "-$12.00"


def test_negative_zero_is_not_signed():
    assert format_currency(-0.001, "EUR") == "0,00 €"


def test_unknown_code_returns_plain_amount():
    assert format_currency(12.5, "XYZ") == "12.5"
    assert format_currency(3, "") == "3"


def test_code_lookup_is_case_insensitive():
    assert format_currency(10, "usd") == "$10.00"
    assert get_currency("eur").symbol == "€"


def test_get_currency_unknown():
    assert get_currency("BTC") is None
    assert get_currency(None) is None


def test_list_currencies_order():
    codes = [c.code for c in list_currencies()]
    assert codes[0] == "EUR"
    assert len(codes) == 10


def test_unknown_code_drops_trailing_zeros():
    assert format_currency(Decimal("295.000"), "XYZ") == "295"
    assert format_currency(100.0, "XYZ") == "100"
    assert format_currency(Decimal("1E+3"), "XYZ") == "1000"


@pytest.mark.parametrize("code,expected", [
    ("EUR", "1 000 000 000 000 000 000 000 000 000,00 €"),
    ("USD", "$1,000,000,000,000,000,000,000,000,000.00"),
    ("TND", "1 000 000 000 000 000 000 000 000 000,000 TND"),
])
def test_very_large_amounts(code, expected):
    assert format_currency(1e27, code) == expected


def test_very_large_amount_keeps_every_digit():
    amount = Decimal("123456789012345678901234567.895")
    assert format_currency(amount, "EUR") == "123 456 789 012 345 678 901 234 567,90 €"


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), Decimal("-Infinity")])
def test_non_finite_amount_is_rejected(amount):
    with pytest.raises(ValueError):
        format_currency(amount, "EUR")
