from django.conf import settings
from django.db import models


class PowerCapacity(models.IntegerChoices):
    """Connected power classes, in VA."""

    VA_450 = 450, "450 VA"
    VA_900 = 900, "900 VA"
    VA_1300 = 1300, "1300 VA"
    VA_2200 = 2200, "2200 VA"


class Customer(models.Model):
    """
    Represents an electricity customer.

    A customer may exist without a login account. Deleting a customer removes
    its meter readings, bills and payments.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="customer",
        help_text="Login account for this customer (optional)",
    )
    customer_number = models.CharField(
        max_length=32, unique=True, help_text="Generated customer number (e.g., PLN202401150042)"
    )
    full_name = models.CharField(max_length=200, help_text="Name of the customer")
    address = models.TextField(help_text="Service address")
    phone = models.CharField(max_length=32, blank=True, default="")
    power_capacity = models.PositiveIntegerField(
        choices=PowerCapacity.choices, help_text="Connected power capacity in VA"
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name"]

    def __str__(self):
        return f"{self.full_name} ({self.customer_number})"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE
