"""
Core bill calculator.

Pure functions only: no database access, no clock. Given the same usage and
rates the result is always the same.
"""

from decimal import ROUND_HALF_UP, Decimal

from .types import ChargeBreakdown, TariffRates
from .util import to_decimal

DEFAULT_QUANTUM = Decimal("0.01")


def quantize_amount(value: Decimal, quantum: Decimal = DEFAULT_QUANTUM) -> Decimal:
    """Round a monetary amount half-up to the smallest currency unit."""
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def calculate(
    usage_kwh,
    rates: TariffRates,
    quantum: Decimal = DEFAULT_QUANTUM,
) -> ChargeBreakdown:
    """
    Calculate the charge breakdown for a metered usage.

    electricity_charge = usage * rate
    tax_amount = electricity_charge * tax_percentage / 100
    total_amount = electricity_charge + admin_fee + tax_amount

    Each component is rounded to ``quantum`` and the total is the sum of the
    rounded components, so a printed breakdown always adds up.

    Args:
        usage_kwh: Metered usage in kWh (Decimal, int, float or numeric string)
        rates: Tariff values to apply
        quantum: Smallest currency unit, e.g. Decimal("0.01")

    Returns:
        ChargeBreakdown with quantized components

    Raises:
        ValueError: If usage is negative
    """
    usage = to_decimal(usage_kwh)
    if usage < 0:
        raise ValueError(f"usage_kwh must not be negative (got {usage})")

    admin_fee = to_decimal(rates.admin_fee) if rates.admin_fee is not None else Decimal("0")
    tax_percentage = (
        to_decimal(rates.tax_percentage) if rates.tax_percentage is not None else Decimal("0")
    )

    raw_electricity = usage * to_decimal(rates.rate_per_kwh)
    electricity_charge = quantize_amount(raw_electricity, quantum)
    # Tax is computed on the unrounded energy charge
    tax_amount = quantize_amount(raw_electricity * tax_percentage / Decimal("100"), quantum)
    admin_fee = quantize_amount(admin_fee, quantum)

    return ChargeBreakdown(
        electricity_charge=electricity_charge,
        admin_fee=admin_fee,
        tax_amount=tax_amount,
        total_amount=electricity_charge + admin_fee + tax_amount,
    )
