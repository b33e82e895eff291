"""
Shared fixtures for billing tests.

Consolidates the Django model fixtures used across billing test files: a
900VA customer with a login account, its tariff and one month of readings.
"""

from datetime import date
from decimal import Decimal

import pytest

from billing.core.types import Actor, Role
from customers.models import Customer, PowerCapacity
from readings.models import MeterReading
from tariffs.models import Tariff

TODAY = date(2024, 2, 1)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        username="admin@example.com", email="admin@example.com", password="pw", is_staff=True
    )


@pytest.fixture
def customer_user(django_user_model):
    return django_user_model.objects.create_user(
        username="budi@example.com", email="budi@example.com", password="pw"
    )


@pytest.fixture
def admin_actor(admin_user):
    return Actor(id=admin_user.pk, role=Role.ADMIN)


@pytest.fixture
def customer_actor(customer_user):
    return Actor(id=customer_user.pk, role=Role.CUSTOMER)


@pytest.fixture
def customer_factory(db):
    """Factory fixture creating customers with unique numbers."""
    counter = iter(range(1, 10000))

    def _create_customer(
        full_name: str = "Budi Santoso",
        power_capacity: int = PowerCapacity.VA_900,
        status: str = Customer.Status.ACTIVE,
        user=None,
    ) -> Customer:
        return Customer.objects.create(
            customer_number=f"PLN20240101{next(counter):04d}",
            full_name=full_name,
            address="Jl. Merdeka 1, Jakarta",
            power_capacity=power_capacity,
            status=status,
            user=user,
        )

    return _create_customer


@pytest.fixture
def customer(customer_factory, customer_user):
    return customer_factory(user=customer_user)


@pytest.fixture
def tariff(db):
    """900VA tariff: 1444/kWh, 2500 admin fee, 10% tax."""
    return Tariff.objects.create(
        power_capacity=PowerCapacity.VA_900,
        rate_per_kwh=Decimal("1444"),
        admin_fee=Decimal("2500"),
        tax_percentage=Decimal("10"),
        effective_date=date(2024, 1, 1),
    )


@pytest.fixture
def reading_factory(db):
    def _create_reading(
        customer: Customer,
        reading_month: str = "2024-01",
        current_meter: str = "100",
        previous_meter: str = "0",
    ) -> MeterReading:
        return MeterReading.objects.create(
            customer=customer,
            reading_month=reading_month,
            previous_meter=Decimal(previous_meter),
            current_meter=Decimal(current_meter),
            reading_date=date(2024, 1, 31),
        )

    return _create_reading


@pytest.fixture
def reading(reading_factory, customer):
    """100 kWh in 2024-01."""
    return reading_factory(customer)
