"""
Meter reading service layer.

Records monthly meter readings and keeps meter values monotonic per customer.
Bill generation consumes the readings recorded here (see billing.services).
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from billing.core.util import is_valid_month, to_decimal
from billing.exceptions import (
    CustomerNotFoundError,
    DuplicateReadingError,
    InvalidInputError,
    NonMonotonicReadingError,
    ReadingHasBillError,
    ReadingNotFoundError,
)
from billing.inputs import parse_id
from customers.models import Customer
from readings.models import MeterReading

logger = logging.getLogger(__name__)


def _parse_meter(value, field: str = "current_meter") -> Decimal:
    if value is None or value == "":
        raise InvalidInputError(f"{field} is required", field=field)
    try:
        meter = to_decimal(value)
    except ValueError:
        raise InvalidInputError(f"{field} must be a number (got {value!r})", field=field)
    if meter < 0:
        raise InvalidInputError(f"{field} cannot be negative (got {meter})", field=field)
    return meter


def _parse_reading_date(value, field: str = "reading_date") -> date:
    if isinstance(value, date):
        return value
    if not value:
        raise InvalidInputError(f"{field} is required", field=field)
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidInputError(f"{field} must be an ISO date (got {value!r})", field=field)


def _validation_messages(error: ValidationError) -> str:
    if hasattr(error, "message_dict"):
        return "; ".join(
            f"{field}: {message}"
            for field, messages in error.message_dict.items()
            for message in messages
        )
    return "; ".join(error.messages)


def derive_previous_meter(customer: Customer, reading_month: str) -> Decimal:
    """
    Meter value a new reading for ``reading_month`` starts from.

    Returns the current_meter of the latest reading with an earlier month,
    or 0 when the customer has none.
    """
    previous = (
        MeterReading.objects.filter(customer=customer, reading_month__lt=reading_month)
        .order_by("-reading_month")
        .values_list("current_meter", flat=True)
        .first()
    )
    return previous if previous is not None else Decimal("0")


def get_last_reading(customer_id) -> MeterReading | None:
    """
    Return the customer's most recent reading, or None if there is none.

    Raises:
        InvalidInputError: If customer_id is not a valid id
        CustomerNotFoundError: If the customer does not exist
    """
    customer_id = parse_id(customer_id, "customer_id")
    if not Customer.objects.filter(pk=customer_id).exists():
        raise CustomerNotFoundError(customer_id)
    return (
        MeterReading.objects.filter(customer_id=customer_id).order_by("-reading_month").first()
    )


def record_reading(
    customer_id,
    reading_month: str,
    current_meter,
    reading_date,
    *,
    notes: str | None = None,
    recorded_by=None,
) -> MeterReading:
    """
    Record a monthly meter reading.

    Args:
        customer_id: Primary key of the customer
        reading_month: Month being read, 'YYYY-MM'
        current_meter: Meter value read on reading_date
        reading_date: Date the meter was read (date or ISO string)
        notes: Optional free text
        recorded_by: Optional user who captured the reading

    Returns:
        The saved MeterReading; ``usage_kwh`` gives the derived usage

    Raises:
        InvalidInputError: If an argument is missing or malformed
        CustomerNotFoundError: If the customer does not exist
        DuplicateReadingError: If the customer already has a reading for the month
        NonMonotonicReadingError: If current_meter is below the previous meter value
    """
    customer_id = parse_id(customer_id, "customer_id")
    if not is_valid_month(reading_month):
        raise InvalidInputError(
            f"reading_month must use the YYYY-MM format (got {reading_month!r})",
            field="reading_month",
        )
    meter = _parse_meter(current_meter)
    read_on = _parse_reading_date(reading_date)

    try:
        with transaction.atomic():
            # Serialize readings per customer so previous_meter is derived
            # from a stable history
            customer = Customer.objects.select_for_update().filter(pk=customer_id).first()
            if customer is None:
                raise CustomerNotFoundError(customer_id)

            if MeterReading.objects.filter(customer=customer, reading_month=reading_month).exists():
                raise DuplicateReadingError(customer_id, reading_month)

            previous_meter = derive_previous_meter(customer, reading_month)
            if meter < previous_meter:
                raise NonMonotonicReadingError(meter, previous_meter)

            reading = MeterReading(
                customer=customer,
                reading_month=reading_month,
                previous_meter=previous_meter,
                current_meter=meter,
                reading_date=read_on,
                recorded_by=recorded_by,
                notes=notes or "",
            )
            try:
                reading.full_clean(validate_unique=False, validate_constraints=False)
            except ValidationError as e:
                raise InvalidInputError(_validation_messages(e))
            reading.save(force_insert=True)
    except IntegrityError:
        # A concurrent call inserted the same customer/month first
        if MeterReading.objects.filter(customer_id=customer_id, reading_month=reading_month).exists():
            raise DuplicateReadingError(customer_id, reading_month)
        raise

    logger.info(
        "Recorded meter reading %s for customer %s (%s, %s kWh)",
        reading.pk,
        customer.customer_number,
        reading_month,
        reading.usage_kwh,
    )
    return reading


def update_reading(
    reading_id,
    current_meter,
    *,
    reading_date=None,
    notes: str | None = None,
) -> MeterReading:
    """
    Correct the current meter value of an existing reading.

    previous_meter is never re-derived; the new value is checked against the
    stored one. Bills already generated keep their own usage snapshot.

    Raises:
        InvalidInputError: If current_meter or reading_date is malformed
        ReadingNotFoundError: If the reading does not exist
        NonMonotonicReadingError: If current_meter is below the stored previous_meter
    """
    reading_id = parse_id(reading_id, "reading_id")
    meter = _parse_meter(current_meter)
    read_on = _parse_reading_date(reading_date) if reading_date is not None else None

    with transaction.atomic():
        reading = MeterReading.objects.select_for_update().filter(pk=reading_id).first()
        if reading is None:
            raise ReadingNotFoundError(f"Meter reading {reading_id} not found")

        if meter < reading.previous_meter:
            raise NonMonotonicReadingError(meter, reading.previous_meter)

        reading.current_meter = meter
        if read_on is not None:
            reading.reading_date = read_on
        if notes is not None:
            reading.notes = notes
        try:
            reading.full_clean(validate_unique=False, validate_constraints=False)
        except ValidationError as e:
            raise InvalidInputError(_validation_messages(e))
        reading.save()

    return reading


def delete_reading(reading_id) -> None:
    """
    Delete a reading that has not been billed yet.

    Raises:
        InvalidInputError: If reading_id is not a valid id
        ReadingNotFoundError: If the reading does not exist
        ReadingHasBillError: If a bill references the reading
    """
    reading_id = parse_id(reading_id, "reading_id")
    with transaction.atomic():
        reading = MeterReading.objects.select_for_update().filter(pk=reading_id).first()
        if reading is None:
            raise ReadingNotFoundError(f"Meter reading {reading_id} not found")
        if hasattr(reading, "bill"):
            raise ReadingHasBillError(reading)
        reading.delete()
