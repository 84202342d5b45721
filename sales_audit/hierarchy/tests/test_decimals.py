from decimal import Decimal

import pytest

from sales_audit.hierarchy.decimals import normalize_decimal
from sales_audit.hierarchy.decimals import parse_decimal
from sales_audit.hierarchy.decimals import to_money


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("1,234,567", Decimal("1234567")),
        ("1.234.567,8", Decimal("1234567.8")),
        ("  42.5 ", Decimal("42.5")),
        ("-15", Decimal("-15")),
    ],
)
def test_separator_heuristic(raw, expected):
    assert normalize_decimal(raw) == expected


def test_us_and_european_notation_agree():
    assert normalize_decimal("1,234.56") == normalize_decimal("1.234,56")


def test_empty_and_none_are_zero():
    assert normalize_decimal("") == 0
    assert normalize_decimal("   ") == 0
    assert normalize_decimal(None) == 0


def test_garbage_is_zero_and_logged(caplog):
    with caplog.at_level("WARNING"):
        assert normalize_decimal("abc") == 0
    assert "abc" in caplog.text


def test_parse_reports_failure_without_raising():
    assert parse_decimal("abc").ok is False
    assert parse_decimal("NaN").ok is False
    assert parse_decimal("").ok is True


def test_numbers_pass_through():
    assert normalize_decimal(12) == Decimal("12")
    assert normalize_decimal(Decimal("3.30")) == Decimal("3.30")
    assert normalize_decimal(0.1) == Decimal("0.1")


def test_to_money_rounds_to_cents():
    assert to_money("10,5") == Decimal("105.00")
    assert to_money("10.005") == Decimal("10.00")
