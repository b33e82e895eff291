"""
Tariff lookup for bill generation.
"""

from datetime import date

from billing.exceptions import TariffNotFoundError
from tariffs.models import Tariff


def resolve_tariff(power_capacity: int, as_of: date) -> Tariff:
    """
    Find the tariff in force for a power capacity on a date.

    Args:
        power_capacity: Power capacity class in VA
        as_of: Date the tariff must be effective on

    Returns:
        The most recently dated active tariff with effective_date <= as_of.
        When two tariffs share that date, the latest inserted one wins.

    Raises:
        TariffNotFoundError: If no active tariff is effective on that date
    """
    tariff = Tariff.objects.effective(power_capacity, as_of).first()
    if tariff is None:
        raise TariffNotFoundError(power_capacity, as_of)
    return tariff
