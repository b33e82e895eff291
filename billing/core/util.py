"""Helper functions for billing engine."""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def to_decimal(value) -> Decimal:
    """
    Convert a numeric value to Decimal safely.

    Notes:
        Uses str(x) to avoid embedding binary-float artefacts into Decimal.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def is_valid_month(value) -> bool:
    """Whether value is a 'YYYY-MM' month string."""
    return isinstance(value, str) and MONTH_PATTERN.match(value) is not None


def month_of(day: date) -> str:
    """Format the calendar month containing day as 'YYYY-MM'."""
    return f"{day:%Y-%m}"


def compact_month(month: str) -> str:
    """Strip separators from a 'YYYY-MM' month ('2024-01' -> '202401')."""
    return month.replace("-", "")


def to_id(value) -> int:
    """
    Convert a primary key given as an int or a digit string.

    Raises:
        ValueError: If the value is not a positive integer
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an id: {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.strip().isdigit():
        result = int(value.strip())
    else:
        raise ValueError(f"Not an id: {value!r}")
    if result < 1:
        raise ValueError(f"Not an id: {value!r}")
    return result
