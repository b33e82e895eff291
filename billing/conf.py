"""Access to the POWER_BILLING settings dict with defaults."""

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "BILL_NUMBER_PREFIX": "INV",
    "PAYMENT_NUMBER_PREFIX": "PAY",
    "CUSTOMER_NUMBER_PREFIX": "PLN",
    "DUE_DAYS": 20,
    "NUMBER_MAX_ATTEMPTS": 5,
    "CURRENCY_QUANTUM": "0.01",
}


def get_setting(name: str) -> Any:
    """Return a billing setting, falling back to the built-in default."""
    overrides = getattr(settings, "POWER_BILLING", {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
