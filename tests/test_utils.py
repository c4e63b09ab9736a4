"""Tests for helper functions."""

from datetime import date, datetime

import pytest

from wealthsim.config import update_config
from wealthsim.schemas import ValidationError
from wealthsim.utils import (
    add_months,
    format_currency,
    format_percentage,
    month_label,
    months_between,
    parse_date,
    safe_divide,
    to_number,
    validate_horizon,
)


@pytest.mark.parametrize(
    "raw, expected",
    [(12, 12.0), ("3.5", 3.5), (None, 0.0), ("", 0.0), ("abc", 0.0), (float("nan"), 0.0), (float("inf"), 0.0)],
)
def test_to_number(raw, expected):
    assert to_number(raw) == expected


def test_to_number_custom_default():
    assert to_number(None, default=1) == 1


def test_parse_date():
    assert parse_date("2025-03-10") == date(2025, 3, 10)
    assert parse_date(datetime(2025, 3, 10, 14, 30)) == date(2025, 3, 10)
    assert parse_date(date(2025, 3, 10)) == date(2025, 3, 10)
    assert parse_date("2025-03-10T08:00:00.000Z") == date(2025, 3, 10)
    assert parse_date("garbage") is None
    assert parse_date(None) is None


def test_months_between():
    assert months_between(date(2025, 1, 31), date(2025, 2, 1)) == 1
    assert months_between(date(2025, 5, 1), date(2024, 5, 31)) == -12


def test_add_months_clamps_day():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)


def test_month_label():
    assert month_label(date(2025, 12, 31), 0) == "Dec 25"
    assert month_label(date(2025, 12, 31), 1) == "Jan 26"


def test_safe_divide():
    assert safe_divide(10, 4) == 2.5
    assert safe_divide(10, 0) == 0.0
    assert safe_divide(10, 0, default=-1) == -1


def test_validate_horizon():
    assert validate_horizon(24, 600) == 24
    assert validate_horizon(0, 600) == 0
    for bad in (-1, 601, 2.5, "12", None, True):
        with pytest.raises(ValidationError):
            validate_horizon(bad, 600)


def test_formatting():
    assert format_currency(1234567) == "1.2M€"
    assert format_currency(-2500) == "-2.5K€"
    assert format_currency(42.4) == "42€"
    assert format_percentage(25) == "25.0%"


def test_format_currency_uses_configured_symbol():
    update_config(currency="$")

    assert format_currency(1500) == "1.5K$"
    assert format_currency(1500, currency="£") == "1.5K£"
