"""
Adapters for converting Django ORM models to billing DTOs.

This module provides lightweight mappings from the tariffs and billing apps'
Django models to the immutable dataclasses used by the billing core.
"""

from billing.core.types import Actor, ChargeBreakdown, Role, TariffRates
from tariffs.models import Tariff


def tariff_to_rates(tariff: Tariff) -> TariffRates:
    """
    Convert a Tariff model instance to the calculator's TariffRates.

    Args:
        tariff: Tariff model instance

    Returns:
        TariffRates carrying the values a bill snapshots
    """
    return TariffRates(
        rate_per_kwh=tariff.rate_per_kwh,
        admin_fee=tariff.admin_fee,
        tax_percentage=tariff.tax_percentage,
    )


def bill_snapshot_fields(usage_kwh, rates: TariffRates, charges: ChargeBreakdown) -> dict:
    """
    Field values a Bill copies at generation time.

    Returns:
        Dictionary of Bill model field names to values
    """
    return {
        "usage_kwh": usage_kwh,
        "rate_per_kwh": rates.rate_per_kwh,
        "tax_percentage": rates.tax_percentage or 0,
        "electricity_charge": charges.electricity_charge,
        "admin_fee": charges.admin_fee,
        "tax_amount": charges.tax_amount,
        "total_amount": charges.total_amount,
    }


def actor_for_user(user) -> Actor:
    """
    Build an Actor from a Django auth user.

    Staff users act as admins; everybody else acts as a customer.
    """
    role = Role.ADMIN if user.is_staff else Role.CUSTOMER
    return Actor(id=user.pk, role=role)
