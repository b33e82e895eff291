import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("customer_number", models.CharField(help_text="Generated customer number (e.g., PLN202401150042)", max_length=32, unique=True)),
                ("full_name", models.CharField(help_text="Name of the customer", max_length=200)),
                ("address", models.TextField(help_text="Service address")),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("power_capacity", models.PositiveIntegerField(choices=[(450, "450 VA"), (900, "900 VA"), (1300, "1300 VA"), (2200, "2200 VA")], help_text="Connected power capacity in VA")),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive")], default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(blank=True, help_text="Login account for this customer (optional)", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="customer", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["full_name"],
            },
        ),
    ]
