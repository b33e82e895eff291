from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Tariff",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("power_capacity", models.PositiveIntegerField(choices=[(450, "450 VA"), (900, "900 VA"), (1300, "1300 VA"), (2200, "2200 VA")], help_text="Power capacity class in VA")),
                ("rate_per_kwh", models.DecimalField(decimal_places=2, help_text="Price per kWh", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("admin_fee", models.DecimalField(decimal_places=2, default=Decimal("0"), help_text="Flat administration fee per bill", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("tax_percentage", models.DecimalField(decimal_places=2, default=Decimal("0"), help_text="Tax as a percentage of the electricity charge", max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("effective_date", models.DateField(help_text="Date this tariff takes effect")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["power_capacity", "-effective_date"],
                "indexes": [models.Index(fields=["power_capacity", "is_active", "effective_date"], name="tariff_capacity_effective_idx")],
            },
        ),
    ]
