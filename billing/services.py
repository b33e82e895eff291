"""
Billing service layer.

Orchestrates turning meter readings into bills: resolving the reading and the
tariff in force, calculating charges with the core calculator, and persisting
an immutable bill with a generated number and due date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable

from django.db import DatabaseError, IntegrityError, models, transaction
from django.utils import timezone

from billing.adapters import bill_snapshot_fields, tariff_to_rates
from billing.conf import get_setting
from billing.core import numbering
from billing.core.calculator import calculate
from billing.core.util import is_valid_month, month_of
from billing.exceptions import (
    BillAlreadyExistsError,
    BillHasPaymentsError,
    BillingServiceError,
    BillNotFoundError,
    InvalidInputError,
    NoReadingsToGenerateError,
    NumberGenerationError,
    ReadingNotFoundError,
)
from billing.inputs import parse_id
from billing.models import Bill
from customers.models import Customer
from readings.models import MeterReading
from tariffs.resolver import resolve_tariff

logger = logging.getLogger(__name__)


@dataclass
class BulkGenerationResult:
    """Outcome of generating bills for a whole month."""

    month: str
    total_readings: int
    bills: list[Bill] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)  # [(customer, reason), ...]

    @property
    def success_count(self) -> int:
        return len(self.bills)

    @property
    def failed_count(self) -> int:
        return len(self.errors)


def save_with_unique_number(
    instance: models.Model,
    number_field: str,
    next_number: Callable[[], str],
    on_conflict: Callable[[], None] | None = None,
) -> models.Model:
    """
    Insert ``instance`` with a freshly drawn number, retrying on collisions.

    Each attempt runs in its own savepoint so a rejected insert leaves the
    surrounding transaction usable.

    Args:
        instance: Unsaved model instance
        number_field: Name of the unique number field
        next_number: Callable drawing a candidate number
        on_conflict: Called after an IntegrityError, before the collision is
            checked; raise from it to report a different conflict

    Raises:
        NumberGenerationError: If every attempt collided
        IntegrityError: If the insert failed for another reason
    """
    model = type(instance)
    attempts = get_setting("NUMBER_MAX_ATTEMPTS")

    for attempt in range(1, attempts + 1):
        number = next_number()
        setattr(instance, number_field, number)
        try:
            with transaction.atomic():
                instance.save(force_insert=True)
            return instance
        except IntegrityError:
            if on_conflict is not None:
                on_conflict()
            if not model.objects.filter(**{number_field: number}).exists():
                raise
            logger.warning(
                "%s %s %s is taken (attempt %d of %d)",
                model.__name__,
                number_field,
                number,
                attempt,
                attempts,
            )

    raise NumberGenerationError(
        f"Could not allocate a unique {model.__name__} {number_field} after {attempts} attempts"
    )


def _lock_reading(**lookup) -> MeterReading | None:
    return MeterReading.objects.select_for_update().select_related("customer").filter(**lookup).first()


def _create_bill(reading: MeterReading, today: date) -> Bill:
    """
    Generate and insert the bill for a locked reading.

    Must run inside a transaction; any exception leaves no bill behind once
    the caller's atomic block unwinds.
    """
    if Bill.objects.filter(meter_reading=reading).exists():
        raise BillAlreadyExistsError(reading)

    customer = reading.customer
    tariff = resolve_tariff(customer.power_capacity, today)
    rates = tariff_to_rates(tariff)
    usage = reading.usage_kwh
    charges = calculate(usage, rates, Decimal(get_setting("CURRENCY_QUANTUM")))

    bill = Bill(
        customer=customer,
        meter_reading=reading,
        tariff=tariff,
        bill_month=reading.reading_month,
        due_date=today + timedelta(days=get_setting("DUE_DAYS")),
        status=Bill.Status.UNPAID,
        **bill_snapshot_fields(usage, rates, charges),
    )

    def reading_already_billed():
        if Bill.objects.filter(meter_reading_id=reading.pk).exists():
            raise BillAlreadyExistsError(reading)

    prefix = get_setting("BILL_NUMBER_PREFIX")
    save_with_unique_number(
        bill,
        "bill_number",
        lambda: numbering.bill_number(prefix, reading.reading_month),
        on_conflict=reading_already_billed,
    )

    logger.info(
        "Generated bill %s for customer %s (%s kWh, total %s)",
        bill.bill_number,
        customer.customer_number,
        usage,
        bill.total_amount,
    )
    return bill


def generate_bill(
    meter_reading_id=None,
    *,
    customer_id=None,
    bill_month: str | None = None,
    today: date | None = None,
) -> Bill:
    """
    Generate the bill for one meter reading.

    The reading is selected either by its id or by customer and month.

    Args:
        meter_reading_id: Primary key of the reading
        customer_id: Customer to bill (with bill_month)
        bill_month: Month of the reading, 'YYYY-MM' (with customer_id)
        today: Generation date; defaults to the current local date

    Returns:
        The new Bill

    Raises:
        InvalidInputError: If no usable selector is given
        ReadingNotFoundError: If the reading does not exist
        BillAlreadyExistsError: If the reading already has a bill
        TariffNotFoundError: If no tariff is in force for the customer's capacity
    """
    if meter_reading_id:
        meter_reading_id = parse_id(meter_reading_id, "meter_reading_id")
        lookup = {"pk": meter_reading_id}
        missing = f"Meter reading {meter_reading_id} not found"
    elif customer_id and bill_month:
        if not is_valid_month(bill_month):
            raise InvalidInputError(
                f"bill_month must use the YYYY-MM format (got {bill_month!r})", field="bill_month"
            )
        customer_id = parse_id(customer_id, "customer_id")
        lookup = {"customer_id": customer_id, "reading_month": bill_month}
        missing = f"No meter reading for customer {customer_id} in {bill_month}"
    else:
        raise InvalidInputError("Either meter_reading_id or customer_id and bill_month is required")

    today = today or timezone.localdate()

    with transaction.atomic():
        reading = _lock_reading(**lookup)
        if reading is None:
            raise ReadingNotFoundError(missing)
        return _create_bill(reading, today)


def unbilled_readings(bill_month: str):
    """Readings of active customers for a month that have no bill yet."""
    return (
        MeterReading.objects.filter(
            reading_month=bill_month,
            customer__status=Customer.Status.ACTIVE,
            bill__isnull=True,
        )
        .select_related("customer")
        .order_by("customer__customer_number")
    )


def generate_bulk_bills(bill_month: str | None = None, *, today: date | None = None) -> BulkGenerationResult:
    """
    Generate bills for every unbilled reading of active customers in a month.

    Each reading is billed in its own transaction: a failure (for example a
    missing tariff) is recorded against the customer and the remaining
    readings are still processed. Bills that succeed stay committed.

    Args:
        bill_month: Month to bill, 'YYYY-MM'; defaults to the month of ``today``
        today: Generation date; defaults to the current local date

    Returns:
        BulkGenerationResult with created bills and per-customer failures

    Raises:
        InvalidInputError: If bill_month is malformed
        NoReadingsToGenerateError: If there is nothing to bill
    """
    today = today or timezone.localdate()
    month = bill_month or month_of(today)
    if not is_valid_month(month):
        raise InvalidInputError(
            f"bill_month must use the YYYY-MM format (got {month!r})", field="bill_month"
        )

    candidates = list(unbilled_readings(month))
    if not candidates:
        raise NoReadingsToGenerateError(month)

    result = BulkGenerationResult(month=month, total_readings=len(candidates))

    for candidate in candidates:
        customer = candidate.customer
        label = f"{customer.full_name} ({customer.customer_number})"
        try:
            with transaction.atomic():
                reading = _lock_reading(pk=candidate.pk)
                if reading is None:
                    raise ReadingNotFoundError(f"Meter reading {candidate.pk} was removed")
                bill = _create_bill(reading, today)
        except BillingServiceError as e:
            logger.warning("Bulk billing %s skipped %s: %s", month, label, e.message)
            result.errors.append((label, e.message))
            continue
        except DatabaseError as e:
            logger.exception("Bulk billing %s failed for %s", month, label)
            result.errors.append((label, str(e)))
            continue
        result.bills.append(bill)

    logger.info(
        "Bulk billing %s: %d readings, %d bills generated, %d failed",
        month,
        result.total_readings,
        result.success_count,
        result.failed_count,
    )
    return result


def delete_bill(bill_id) -> None:
    """
    Delete a bill that has no payments.

    Raises:
        InvalidInputError: If bill_id is not a valid id
        BillNotFoundError: If the bill does not exist
        BillHasPaymentsError: If any payment references the bill
    """
    bill_id = parse_id(bill_id, "bill_id")
    with transaction.atomic():
        bill = Bill.objects.select_for_update().filter(pk=bill_id).first()
        if bill is None:
            raise BillNotFoundError(bill_id)
        if bill.payments.exists():
            raise BillHasPaymentsError(bill)
        bill.delete()
    logger.info("Deleted bill %s", bill.bill_number)
