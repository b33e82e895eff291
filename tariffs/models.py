from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from customers.models import PowerCapacity


class TariffQuerySet(models.QuerySet):
    def effective(self, power_capacity: int, as_of):
        """
        Active tariffs for a power capacity that are in force on ``as_of``.

        Ordered most recent first; equal effective dates fall back to the
        latest inserted row.
        """
        return self.filter(
            power_capacity=power_capacity,
            is_active=True,
            effective_date__lte=as_of,
        ).order_by("-effective_date", "-pk")


class Tariff(models.Model):
    """
    Represents the electricity price for one power capacity class.

    Several tariffs may exist per class over time; the one in force on a date
    is the most recently dated active tariff effective on or before it.
    Tariffs are never hard-deleted once bills exist: bills copy the rate, fee
    and tax values at generation time.
    """

    power_capacity = models.PositiveIntegerField(
        choices=PowerCapacity.choices, help_text="Power capacity class in VA"
    )
    rate_per_kwh = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Price per kWh",
    )
    admin_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Flat administration fee per bill",
    )
    tax_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Tax as a percentage of the electricity charge",
    )
    effective_date = models.DateField(help_text="Date this tariff takes effect")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TariffQuerySet.as_manager()

    class Meta:
        ordering = ["power_capacity", "-effective_date"]
        indexes = [
            models.Index(
                fields=["power_capacity", "is_active", "effective_date"],
                name="tariff_capacity_effective_idx",
            ),
        ]

    def __str__(self):
        return f"{self.power_capacity}VA @ {self.rate_per_kwh}/kWh from {self.effective_date}"

    def deactivate(self):
        """Soft delete: the tariff stops being selectable for new bills."""
        if self.is_active:
            self.is_active = False
            self.save(update_fields=["is_active", "updated_at"])
