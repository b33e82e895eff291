"""
Tests for document number formats.
"""

import re
from datetime import date, datetime

from billing.core import numbering


def test_bill_number_format():
    assert re.fullmatch(r"INV-202401-\d{4}", numbering.bill_number("INV", "2024-01"))


def test_payment_number_format():
    number = numbering.payment_number("PAY", datetime(2024, 2, 3, 4, 5, 6))

    assert re.fullmatch(r"PAY-20240203040506-\d{3}", number)


def test_customer_number_format():
    assert re.fullmatch(r"PLN20240115\d{4}", numbering.customer_number("PLN", date(2024, 1, 15)))


def test_random_suffix_keeps_width():
    suffixes = {numbering.bill_number("INV", "2024-01")[-4:] for _ in range(200)}

    assert all(len(suffix) == 4 and not suffix.startswith("0") for suffix in suffixes)
