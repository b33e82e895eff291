from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="MeterReading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reading_month", models.CharField(help_text="Billing month of this reading (YYYY-MM)", max_length=7, validators=[django.core.validators.RegexValidator(message="Month must use the YYYY-MM format.", regex="^\\d{4}-(0[1-9]|1[0-2])$")])),
                ("previous_meter", models.DecimalField(decimal_places=2, default=Decimal("0"), help_text="Meter value at the end of the previous reading", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("current_meter", models.DecimalField(decimal_places=2, help_text="Meter value at this reading", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("reading_date", models.DateField(help_text="Date the meter was read")),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer", models.ForeignKey(help_text="Customer", on_delete=django.db.models.deletion.CASCADE, related_name="meter_readings", to="customers.customer")),
                ("recorded_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="recorded_readings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["customer", "-reading_month"],
                "constraints": [
                    models.UniqueConstraint(fields=("customer", "reading_month"), name="unique_reading_per_customer_month"),
                    models.CheckConstraint(condition=models.Q(("current_meter__gte", models.F("previous_meter"))), name="reading_current_gte_previous"),
                ],
            },
        ),
    ]
