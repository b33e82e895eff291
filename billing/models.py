from datetime import date
from decimal import Decimal

from django.conf import settings
from django.db import models

from billing.core.status import derive_display_status
from billing.core.types import DisplayStatus


class Bill(models.Model):
    """
    Represents the bill generated from one meter reading.

    Rate, fee and tax values are copied from the tariff when the bill is
    generated; later tariff changes never alter an existing bill.
    """

    class Status(models.TextChoices):
        UNPAID = "unpaid", "Unpaid"
        PAID = "paid", "Paid"

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="bills",
        help_text="Customer",
    )
    meter_reading = models.OneToOneField(
        "readings.MeterReading",
        on_delete=models.CASCADE,
        related_name="bill",
        help_text="Reading this bill was generated from",
    )
    tariff = models.ForeignKey(
        "tariffs.Tariff",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bills",
        help_text="Tariff used at generation time (reference only)",
    )
    bill_number = models.CharField(max_length=32, unique=True)
    bill_month = models.CharField(max_length=7, db_index=True, help_text="YYYY-MM")
    usage_kwh = models.DecimalField(max_digits=12, decimal_places=2)
    rate_per_kwh = models.DecimalField(max_digits=12, decimal_places=2)
    tax_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    electricity_charge = models.DecimalField(max_digits=14, decimal_places=2)
    admin_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    due_date = models.DateField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.UNPAID)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-bill_month", "-created_at"]

    def __str__(self):
        return f"{self.bill_number} - {self.customer.full_name} ({self.total_amount})"

    def display_status(self, today: date) -> DisplayStatus:
        return derive_display_status(self, today)


class Payment(models.Model):
    """
    Represents a payment submitted against a bill.

    A bill may collect several attempts over time; at most one of them is
    ever verified. Decisions are final.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        VERIFIED = "verified", "Verified"
        REJECTED = "rejected", "Rejected"

    class Method(models.TextChoices):
        TRANSFER = "transfer", "Bank transfer"
        CASH = "cash", "Cash"

    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="payments")
    payment_number = models.CharField(max_length=40, unique=True)
    payment_method = models.CharField(max_length=20, choices=Method.choices)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment_date = models.DateTimeField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="submitted_payments",
    )
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_payments",
    )
    verification_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["bill"],
                condition=models.Q(status="verified"),
                name="unique_verified_payment_per_bill",
            ),
        ]

    def __str__(self):
        return f"{self.payment_number} ({self.status})"

    @property
    def is_decided(self) -> bool:
        return self.status != self.Status.PENDING
