"""
Payment verification service.

Customers (or admins on their behalf) submit a payment attesting the full bill
amount; an admin then verifies or rejects it. Verification marks the bill
paid in the same transaction. Payment status moves only from pending to
verified or rejected.
"""

from __future__ import annotations

import logging
from datetime import datetime

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from billing.conf import get_setting
from billing.core import numbering
from billing.core.types import Actor
from billing.core.util import is_valid_month, to_decimal
from billing.exceptions import (
    AmountMismatchError,
    BillAlreadyPaidError,
    BillNotFoundError,
    ForbiddenBillAccessError,
    InvalidDecisionError,
    InvalidInputError,
    PaymentAlreadyDecidedError,
    PaymentNotFoundError,
)
from billing.inputs import parse_id
from billing.models import Bill, Payment
from billing.services import save_with_unique_number

logger = logging.getLogger(__name__)

DECISIONS = (Payment.Status.VERIFIED, Payment.Status.REJECTED)


def _owns_bill(actor: Actor, bill: Bill) -> bool:
    return bill.customer.user_id is not None and bill.customer.user_id == actor.id


def submit_payment(
    bill_id,
    payment_method: str,
    amount,
    actor: Actor,
    *,
    notes: str | None = None,
    now: datetime | None = None,
) -> Payment:
    """
    Submit a payment for a bill; it stays pending until an admin decides.

    The amount must equal the bill total exactly: partial payments and
    overpayments are both refused.

    Args:
        bill_id: Primary key of the bill
        payment_method: One of Payment.Method values
        amount: Amount paid (Decimal, int or numeric string)
        actor: Caller identity; customers may only pay their own bills
        notes: Optional free text
        now: Submission time; defaults to the current time

    Returns:
        The new pending Payment

    Raises:
        InvalidInputError: If an argument is missing or malformed
        BillNotFoundError: If the bill does not exist
        ForbiddenBillAccessError: If a customer pays someone else's bill
        BillAlreadyPaidError: If the bill is already paid
        AmountMismatchError: If the amount differs from the bill total
    """
    bill_id = parse_id(bill_id, "bill_id")
    if payment_method not in Payment.Method.values:
        raise InvalidInputError(
            f"payment_method must be one of {', '.join(Payment.Method.values)} "
            f"(got {payment_method!r})",
            field="payment_method",
        )
    try:
        paid = to_decimal(amount)
    except ValueError:
        raise InvalidInputError(f"amount must be a number (got {amount!r})", field="amount")
    if paid <= 0:
        raise InvalidInputError(f"amount must be positive (got {paid})", field="amount")

    now = now or timezone.now()

    with transaction.atomic():
        bill = Bill.objects.select_for_update().select_related("customer").filter(pk=bill_id).first()
        if bill is None:
            raise BillNotFoundError(bill_id)
        if not actor.is_admin and not _owns_bill(actor, bill):
            raise ForbiddenBillAccessError(bill)
        if bill.status == Bill.Status.PAID:
            raise BillAlreadyPaidError(bill)
        if paid != bill.total_amount:
            raise AmountMismatchError(paid, bill.total_amount)

        payment = Payment(
            bill=bill,
            payment_method=payment_method,
            amount=paid,
            payment_date=now,
            status=Payment.Status.PENDING,
            submitted_by_id=actor.id,
            notes=notes or "",
        )
        prefix = get_setting("PAYMENT_NUMBER_PREFIX")
        save_with_unique_number(
            payment, "payment_number", lambda: numbering.payment_number(prefix, now)
        )

    logger.info(
        "Payment %s submitted for bill %s (%s via %s)",
        payment.payment_number,
        bill.bill_number,
        paid,
        payment_method,
    )
    return payment


def decide_payment(
    payment_id,
    decision: str,
    actor: Actor,
    *,
    notes: str | None = None,
    now: datetime | None = None,
) -> Payment:
    """
    Verify or reject a pending payment.

    On verification the payment and its bill (now paid) are updated in one
    transaction. On rejection only the payment changes and the bill may take
    a new submission.

    Args:
        payment_id: Primary key of the payment
        decision: 'verified' or 'rejected'
        actor: Deciding admin
        notes: Decision notes; the submitted notes are kept when omitted
        now: Decision time; defaults to the current time

    Returns:
        The decided Payment

    Raises:
        InvalidDecisionError: If decision is not 'verified' or 'rejected'
        InvalidInputError: If payment_id is not a valid id
        PaymentNotFoundError: If the payment does not exist
        PaymentAlreadyDecidedError: If the payment is no longer pending
        BillAlreadyPaidError: If verifying while another payment already
            settled the bill
    """
    if decision not in DECISIONS:
        raise InvalidDecisionError(decision)
    payment_id = parse_id(payment_id, "payment_id")

    now = now or timezone.now()

    with transaction.atomic():
        payment = Payment.objects.select_for_update().filter(pk=payment_id).first()
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        if payment.status != Payment.Status.PENDING:
            raise PaymentAlreadyDecidedError(payment)

        if decision == Payment.Status.VERIFIED:
            bill = Bill.objects.select_for_update().get(pk=payment.bill_id)
            # Another attempt on the same bill was verified first
            if bill.status == Bill.Status.PAID:
                raise BillAlreadyPaidError(bill)

        new_notes = notes if notes else payment.notes
        # Conditional update: a concurrent decision that slipped past the
        # lock (backends without row locks) updates zero rows here
        updated = Payment.objects.filter(pk=payment.pk, status=Payment.Status.PENDING).update(
            status=decision,
            verified_by_id=actor.id,
            verification_date=now,
            notes=new_notes,
        )
        if updated != 1:
            payment.refresh_from_db()
            raise PaymentAlreadyDecidedError(payment)

        if decision == Payment.Status.VERIFIED:
            Bill.objects.filter(pk=payment.bill_id).update(
                status=Bill.Status.PAID, updated_at=now
            )

        payment.refresh_from_db()

    logger.info(
        "Payment %s %s by user %s",
        payment.payment_number,
        decision,
        actor.id,
    )
    return payment


def payment_statistics(month: str | None = None) -> dict:
    """
    Summarize payments by status.

    Args:
        month: Optional 'YYYY-MM'; restricts to payments dated in that month
            (in the current time zone)

    Returns:
        {
            'verified': {'count': N, 'total_amount': Decimal},
            'pending': {'count': N, 'total_amount': Decimal},
            'rejected': {'count': N},
        }
    """
    payments = Payment.objects.all()
    if month:
        if not is_valid_month(month):
            raise InvalidInputError(
                f"month must use the YYYY-MM format (got {month!r})", field="month"
            )
        year, month_number = (int(part) for part in month.split("-"))
        payments = payments.filter(payment_date__year=year, payment_date__month=month_number)

    totals = payments.aggregate(
        verified_count=Count("pk", filter=Q(status=Payment.Status.VERIFIED)),
        verified_total=Sum("amount", filter=Q(status=Payment.Status.VERIFIED)),
        pending_count=Count("pk", filter=Q(status=Payment.Status.PENDING)),
        pending_total=Sum("amount", filter=Q(status=Payment.Status.PENDING)),
        rejected_count=Count("pk", filter=Q(status=Payment.Status.REJECTED)),
    )
    zero = to_decimal(0)
    return {
        "verified": {
            "count": totals["verified_count"],
            "total_amount": totals["verified_total"] or zero,
        },
        "pending": {
            "count": totals["pending_count"],
            "total_amount": totals["pending_total"] or zero,
        },
        "rejected": {"count": totals["rejected_count"]},
    }
