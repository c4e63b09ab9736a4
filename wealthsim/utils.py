"""Utility functions for the wealth projection engine.

This module provides helper functions used throughout the engine:
- Lenient numeric coercion of user-entered values
- Date parsing and calendar month arithmetic
- Guarded division and horizon validation
- Currency and percentage formatting

Key features:
- Malformed numbers degrade to 0 instead of propagating NaN
- Invalid dates degrade to None instead of raising
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from .config import get_config
from .schemas import ValidationError

logger = logging.getLogger(__name__)


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a raw value to a finite float, falling back to ``default``."""
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def parse_date(value: Any) -> Optional[date]:
    """Parse a date-like value, returning None when it is missing or invalid."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError):
        parsed = None
    if parsed is None or pd.isna(parsed):
        logger.warning("Unparseable date %r ignored", value)
        return None
    return parsed.date()


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (may be negative)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(value: date, months: int) -> date:
    """Shift a date by calendar months, clamping the day to the month's end."""
    return (pd.Timestamp(value) + pd.DateOffset(months=months)).date()


def month_start(today: date, offset: int) -> date:
    """First day of the month ``offset`` months after ``today``."""
    return add_months(date(today.year, today.month, 1), offset)


def month_label(today: date, offset: int, fmt: str = "%b %y") -> str:
    """Display label of the month ``offset`` months after ``today``."""
    return month_start(today, offset).strftime(fmt)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers, returning default if denominator is zero."""
    return numerator / denominator if denominator != 0 else default


def validate_horizon(months: Any, max_months: int) -> int:
    """Validate a projection horizon in months."""
    if isinstance(months, bool):
        raise ValidationError("Projection horizon must be a whole number of months")
    try:
        horizon = int(months)
    except (TypeError, ValueError):
        raise ValidationError("Projection horizon must be a whole number of months")
    if horizon != months:
        raise ValidationError("Projection horizon must be a whole number of months")
    if horizon < 0:
        raise ValidationError("Projection horizon must be non-negative")
    if horizon > max_months:
        raise ValidationError(
            f"Projection horizon must not exceed {max_months} months, got {horizon}"
        )
    return horizon


def format_currency(amount: float, currency: Optional[str] = None) -> str:
    """Format currency amount for display, with the configured symbol by default."""
    if currency is None:
        currency = get_config().currency
    abs_amount = abs(amount)
    sign = "-" if amount < 0 else ""

    if abs_amount >= 1e6:
        return f"{sign}{abs_amount/1e6:.1f}M{currency}"
    elif abs_amount >= 1e3:
        return f"{sign}{abs_amount/1e3:.1f}K{currency}"
    else:
        return f"{sign}{abs_amount:.0f}{currency}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format a percent value (already scaled to 0-100) for display."""
    return f"{value:.{decimals}f}%"
