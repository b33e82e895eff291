"""
Unit tests for billing adapters.

Tests conversion from Django ORM models to billing DTOs.
"""

from datetime import date
from decimal import Decimal

import pytest

from billing.adapters import actor_for_user, bill_snapshot_fields, tariff_to_rates
from billing.core.calculator import calculate
from billing.core.types import Role, TariffRates
from tariffs.models import Tariff


def test_tariff_to_rates_copies_values():
    tariff = Tariff(
        power_capacity=1300,
        rate_per_kwh=Decimal("1444.70"),
        admin_fee=Decimal("3000"),
        tax_percentage=Decimal("11"),
        effective_date=date(2024, 1, 1),
    )

    rates = tariff_to_rates(tariff)

    assert rates == TariffRates(
        rate_per_kwh=Decimal("1444.70"),
        admin_fee=Decimal("3000"),
        tax_percentage=Decimal("11"),
    )


def test_bill_snapshot_fields():
    rates = TariffRates(rate_per_kwh=Decimal("1444"), admin_fee=Decimal("2500"))
    charges = calculate(Decimal("100"), rates)

    fields = bill_snapshot_fields(Decimal("100"), rates, charges)

    assert fields == {
        "usage_kwh": Decimal("100"),
        "rate_per_kwh": Decimal("1444"),
        "tax_percentage": 0,
        "electricity_charge": Decimal("144400.00"),
        "admin_fee": Decimal("2500.00"),
        "tax_amount": Decimal("0.00"),
        "total_amount": Decimal("146900.00"),
    }


@pytest.mark.django_db
def test_actor_for_staff_user_is_admin(admin_user):
    actor = actor_for_user(admin_user)

    assert actor.id == admin_user.pk
    assert actor.role == Role.ADMIN
    assert actor.is_admin


@pytest.mark.django_db
def test_actor_for_regular_user_is_customer(customer_user):
    actor = actor_for_user(customer_user)

    assert actor.role == Role.CUSTOMER
    assert not actor.is_admin
