from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("readings", "0001_initial"),
        ("tariffs", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Bill",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bill_number", models.CharField(max_length=32, unique=True)),
                ("bill_month", models.CharField(db_index=True, help_text="YYYY-MM", max_length=7)),
                ("usage_kwh", models.DecimalField(decimal_places=2, max_digits=12)),
                ("rate_per_kwh", models.DecimalField(decimal_places=2, max_digits=12)),
                ("tax_percentage", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=5)),
                ("electricity_charge", models.DecimalField(decimal_places=2, max_digits=14)),
                ("admin_fee", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=14)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("due_date", models.DateField()),
                ("status", models.CharField(choices=[("unpaid", "Unpaid"), ("paid", "Paid")], default="unpaid", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer", models.ForeignKey(help_text="Customer", on_delete=django.db.models.deletion.CASCADE, related_name="bills", to="customers.customer")),
                ("meter_reading", models.OneToOneField(help_text="Reading this bill was generated from", on_delete=django.db.models.deletion.CASCADE, related_name="bill", to="readings.meterreading")),
                ("tariff", models.ForeignKey(blank=True, help_text="Tariff used at generation time (reference only)", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="bills", to="tariffs.tariff")),
            ],
            options={
                "ordering": ["-bill_month", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_number", models.CharField(max_length=40, unique=True)),
                ("payment_method", models.CharField(choices=[("transfer", "Bank transfer"), ("cash", "Cash")], max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("payment_date", models.DateTimeField()),
                ("status", models.CharField(choices=[("pending", "Pending"), ("verified", "Verified"), ("rejected", "Rejected")], default="pending", max_length=10)),
                ("verification_date", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("bill", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="billing.bill")),
                ("submitted_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="submitted_payments", to=settings.AUTH_USER_MODEL)),
                ("verified_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="verified_payments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "verified")), fields=("bill",), name="unique_verified_payment_per_bill"),
                ],
            },
        ),
    ]
