"""
Human-readable document numbers.

Numbers carry a random suffix and are NOT unique by construction. Callers
insert inside a savepoint and draw a new number when the unique constraint
rejects one (see billing.services and billing.payments).
"""

import secrets
from datetime import date, datetime

from .util import compact_month


def _random_digits(width: int) -> str:
    low = 10 ** (width - 1)
    return str(low + secrets.randbelow(9 * low))


def bill_number(prefix: str, bill_month: str) -> str:
    """INV-YYYYMM-NNNN"""
    return f"{prefix}-{compact_month(bill_month)}-{_random_digits(4)}"


def payment_number(prefix: str, moment: datetime) -> str:
    """PAY-YYYYMMDDHHMMSS-NNN"""
    return f"{prefix}-{moment:%Y%m%d%H%M%S}-{_random_digits(3)}"


def customer_number(prefix: str, day: date) -> str:
    """PLNYYYYMMDDNNNN"""
    return f"{prefix}{day:%Y%m%d}{_random_digits(4)}"
