"""
Define lightweight dataclasses to use for bill calculations.

Adapters to convert between Django ORM and these classes are in billing.adapters.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Role of an already-authenticated caller."""

    ADMIN = "admin"
    CUSTOMER = "customer"


class DisplayStatus(str, Enum):
    """Bill status as shown to users; OVERDUE is never persisted."""

    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"


@dataclass(frozen=True, slots=True)
class Actor:
    """
    Resolved caller identity.

    The id is the auth user's primary key. Authentication and role checks
    happen before the billing services are called; the services only use the
    role to decide ownership checks.
    """

    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True, slots=True)
class TariffRates:
    """
    Snapshot of the tariff values a bill is computed from.

    Notes:
        - admin_fee and tax_percentage may be None on legacy rows; the
          calculator treats None as zero.
    """

    rate_per_kwh: Decimal
    admin_fee: Optional[Decimal] = None
    tax_percentage: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if self.rate_per_kwh < 0:
            raise ValueError("rate_per_kwh must not be negative")


@dataclass(frozen=True, slots=True)
class ChargeBreakdown:
    """
    Charges for one bill, quantized to the currency unit.

    total_amount is always the sum of the three components.
    """

    electricity_charge: Decimal
    admin_fee: Decimal
    tax_amount: Decimal
    total_amount: Decimal
