"""Custom exceptions for billing services.

Every failure raised by the reading, bill and payment services carries a
stable ``kind`` string so callers (the HTTP layer, admin actions) can map it
to a status code without parsing messages.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from billing.models import Bill, Payment
    from readings.models import MeterReading


class BillingServiceError(Exception):
    """Base exception for billing service errors."""

    kind = "billing_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(BillingServiceError):
    """Raised when input is missing or malformed."""

    kind = "invalid_input"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class ConflictError(BillingServiceError):
    """Raised when a request conflicts with the current state."""

    kind = "conflict"


class NotFoundError(BillingServiceError):
    """Raised when a referenced record does not exist."""

    kind = "not_found"


class ForbiddenError(BillingServiceError):
    """Raised when the caller may not act on a record."""

    kind = "forbidden"


class CustomerNotFoundError(NotFoundError):
    kind = "customer_not_found"

    def __init__(self, customer_id):
        self.customer_id = customer_id
        super().__init__(f"Customer {customer_id} not found")


class DuplicateReadingError(ConflictError):
    """Raised when a reading already exists for the customer and month."""

    kind = "duplicate_reading"

    def __init__(self, customer_id, reading_month: str):
        self.customer_id = customer_id
        self.reading_month = reading_month
        super().__init__(
            f"A meter reading for customer {customer_id} in {reading_month} already exists"
        )


class NonMonotonicReadingError(ConflictError):
    """Raised when the current meter value is below the previous one."""

    kind = "non_monotonic_reading"

    def __init__(self, current_meter: Decimal, previous_meter: Decimal):
        self.current_meter = current_meter
        self.previous_meter = previous_meter
        super().__init__(
            f"Current meter ({current_meter}) cannot be less than "
            f"previous meter ({previous_meter})"
        )


class ReadingNotFoundError(NotFoundError):
    kind = "reading_not_found"

    def __init__(self, message: str = "Meter reading not found"):
        super().__init__(message)


class ReadingHasBillError(ConflictError):
    """Raised when deleting a reading that has already been billed."""

    kind = "reading_has_bill"

    def __init__(self, reading: MeterReading):
        self.reading = reading
        super().__init__(f"Meter reading {reading.pk} already has a bill and cannot be deleted")


class BillAlreadyExistsError(ConflictError):
    """Raised when a bill already references the meter reading."""

    kind = "bill_already_exists"

    def __init__(self, reading: MeterReading):
        self.reading = reading
        super().__init__(f"A bill for meter reading {reading.pk} has already been generated")


class TariffNotFoundError(NotFoundError):
    """Raised when no active tariff is effective for a power capacity."""

    kind = "tariff_not_found"

    def __init__(self, power_capacity: int, as_of):
        self.power_capacity = power_capacity
        self.as_of = as_of
        super().__init__(f"No active tariff found for {power_capacity}VA as of {as_of}")


class NoReadingsToGenerateError(NotFoundError):
    """Raised when bulk generation finds no unbilled readings."""

    kind = "no_readings_to_generate"

    def __init__(self, bill_month: str):
        self.bill_month = bill_month
        super().__init__(f"No unbilled meter readings found for {bill_month}")


class NumberGenerationError(BillingServiceError):
    """Raised when a unique document number could not be allocated."""

    kind = "number_generation_failed"


class BillNotFoundError(NotFoundError):
    kind = "bill_not_found"

    def __init__(self, bill_id):
        self.bill_id = bill_id
        super().__init__(f"Bill {bill_id} not found")


class BillHasPaymentsError(ConflictError):
    kind = "bill_has_payments"

    def __init__(self, bill: Bill):
        self.bill = bill
        super().__init__(f"Bill {bill.bill_number} has payments and cannot be deleted")


class ForbiddenBillAccessError(ForbiddenError):
    kind = "forbidden_bill_access"

    def __init__(self, bill: Bill):
        self.bill = bill
        super().__init__("You do not have access to this bill")


class BillAlreadyPaidError(ConflictError):
    kind = "bill_already_paid"

    def __init__(self, bill: Bill):
        self.bill = bill
        super().__init__(f"Bill {bill.bill_number} has already been paid")


class AmountMismatchError(ConflictError):
    """Raised when a payment amount differs from the bill total."""

    kind = "amount_mismatch"

    def __init__(self, amount: Decimal, expected: Decimal):
        self.amount = amount
        self.expected = expected
        super().__init__(f"Payment amount must equal the bill total ({expected}), got {amount}")


class PaymentNotFoundError(NotFoundError):
    kind = "payment_not_found"

    def __init__(self, payment_id):
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} not found")


class PaymentAlreadyDecidedError(ConflictError):
    kind = "payment_already_decided"

    def __init__(self, payment: Payment):
        self.payment = payment
        super().__init__(
            f"Payment {payment.payment_number} has already been {payment.status}"
        )


class InvalidDecisionError(InvalidInputError):
    kind = "invalid_decision"

    def __init__(self, decision):
        self.decision = decision
        super().__init__(
            f"Decision must be 'verified' or 'rejected', got {decision!r}", field="decision"
        )
