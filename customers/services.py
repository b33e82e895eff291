"""
Customer onboarding service.

Creates a customer with a generated customer number and, when credentials are
given, the login account the customer uses to view and pay bills.
"""

from __future__ import annotations

import logging
from datetime import date

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from billing.conf import get_setting
from billing.core import numbering
from billing.exceptions import InvalidInputError
from billing.services import save_with_unique_number
from customers.models import Customer, PowerCapacity

logger = logging.getLogger(__name__)


def create_customer(
    full_name: str,
    address: str,
    power_capacity: int,
    *,
    phone: str | None = None,
    status: str = Customer.Status.ACTIVE,
    email: str | None = None,
    password: str | None = None,
    today: date | None = None,
) -> Customer:
    """
    Register a customer, optionally provisioning a login account.

    The account and the customer row are created in one transaction. An
    inactive customer gets an inactive account.

    Args:
        full_name: Customer name
        address: Service address
        power_capacity: Power capacity class in VA
        phone: Optional phone number
        status: 'active' or 'inactive'
        email: Login email; an account is created when given with password
        password: Login password
        today: Registration date used in the customer number

    Returns:
        The saved Customer

    Raises:
        InvalidInputError: If a required field is missing, the capacity or
            status is unknown, or the email is already registered
    """
    errors = []
    if not (full_name or "").strip():
        errors.append("full_name is required")
    if not (address or "").strip():
        errors.append("address is required")
    if power_capacity not in PowerCapacity.values:
        errors.append(f"power_capacity must be one of {PowerCapacity.values} (got {power_capacity!r})")
    if status not in Customer.Status.values:
        errors.append(f"status must be one of {Customer.Status.values} (got {status!r})")
    if bool(email) != bool(password):
        errors.append("email and password must be given together")
    if errors:
        raise InvalidInputError("; ".join(errors))

    today = today or timezone.localdate()
    User = get_user_model()

    with transaction.atomic():
        user = None
        if email:
            if User.objects.filter(email__iexact=email).exists():
                raise InvalidInputError(f"Email {email} is already registered", field="email")
            user = User.objects.create_user(username=email, email=email, password=password)
            if status == Customer.Status.INACTIVE:
                user.is_active = False
                user.save(update_fields=["is_active"])

        customer = Customer(
            user=user,
            full_name=full_name.strip(),
            address=address.strip(),
            phone=(phone or "").strip(),
            power_capacity=power_capacity,
            status=status,
        )
        prefix = get_setting("CUSTOMER_NUMBER_PREFIX")
        save_with_unique_number(
            customer, "customer_number", lambda: numbering.customer_number(prefix, today)
        )

    logger.info("Registered customer %s (%sVA)", customer.customer_number, power_capacity)
    return customer
