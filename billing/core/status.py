"""Derived bill status."""

from datetime import date

from .types import DisplayStatus


def derive_display_status(bill, today: date) -> DisplayStatus:
    """
    Status to show for a bill on a given day.

    Args:
        bill: Anything with ``status`` and ``due_date`` attributes
        today: Date to evaluate against

    The persisted status is only ever 'unpaid' or 'paid'. An unpaid bill whose
    due date has passed is shown as overdue; nothing rewrites the stored row.
    """
    if bill.status == DisplayStatus.PAID.value:
        return DisplayStatus.PAID
    if today > bill.due_date:
        return DisplayStatus.OVERDUE
    return DisplayStatus.UNPAID
