from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

month_validator = RegexValidator(
    regex=r"^\d{4}-(0[1-9]|1[0-2])$",
    message="Month must use the YYYY-MM format.",
)


class MeterReading(models.Model):
    """
    Represents one monthly meter reading for a customer.

    previous_meter is fixed when the reading is recorded: 0 for the first
    reading, otherwise the current_meter of the latest earlier month.
    Usage is always current_meter - previous_meter and is never stored.
    """

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="meter_readings",
        help_text="Customer",
    )
    reading_month = models.CharField(
        max_length=7,
        validators=[month_validator],
        help_text="Billing month of this reading (YYYY-MM)",
    )
    previous_meter = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Meter value at the end of the previous reading",
    )
    current_meter = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Meter value at this reading",
    )
    reading_date = models.DateField(help_text="Date the meter was read")
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recorded_readings",
    )
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["customer", "-reading_month"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "reading_month"],
                name="unique_reading_per_customer_month",
            ),
            models.CheckConstraint(
                condition=models.Q(current_meter__gte=models.F("previous_meter")),
                name="reading_current_gte_previous",
            ),
        ]

    def __str__(self):
        return f"{self.customer.full_name} - {self.reading_month} ({self.usage_kwh} kWh)"

    @property
    def usage_kwh(self) -> Decimal:
        return self.current_meter - self.previous_meter

    def clean(self) -> None:
        super().clean()
        if (
            self.current_meter is not None
            and self.previous_meter is not None
            and self.current_meter < self.previous_meter
        ):
            raise ValidationError(
                {
                    "current_meter": (
                        f"Current meter ({self.current_meter}) cannot be less than "
                        f"previous meter ({self.previous_meter})."
                    )
                }
            )
