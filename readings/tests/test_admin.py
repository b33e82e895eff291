"""
Integration tests for the meter reading admin.
"""

import datetime
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase
from django.urls import reverse

from billing.models import Bill
from billing.services import generate_bill
from customers.models import Customer, PowerCapacity
from readings.models import MeterReading
from readings.services import record_reading
from tariffs.models import Tariff


class MeterReadingAdminTests(TestCase):
    def setUp(self):
        self.admin_user = User.objects.create_superuser(
            username="admin", email="admin@test.com", password="admin123"
        )
        self.client.force_login(self.admin_user)
        self.customer = Customer.objects.create(
            customer_number="PLN202401010001",
            full_name="Budi Santoso",
            address="Jl. Merdeka 1",
            power_capacity=PowerCapacity.VA_900,
        )
        self.january = record_reading(self.customer.pk, "2024-01", "500", "2024-01-31")

    def test_changelist_loads(self):
        response = self.client.get(reverse("admin:readings_meterreading_changelist"))
        self.assertEqual(response.status_code, 200)

    def test_readings_cannot_be_added_through_admin(self):
        """A hand-entered reading would skip the previous meter derivation."""
        response = self.client.post(
            reverse("admin:readings_meterreading_add"),
            {
                "customer": self.customer.pk,
                "reading_month": "2024-02",
                "current_meter": "100",
                "reading_date": "2024-02-29",
                "notes": "",
            },
        )

        self.assertEqual(response.status_code, 403)
        self.assertEqual(MeterReading.objects.count(), 1)

    def test_unbilled_reading_can_be_deleted(self):
        response = self.client.post(
            reverse("admin:readings_meterreading_delete", args=[self.january.pk]),
            {"post": "yes"},
        )

        self.assertEqual(response.status_code, 302)
        self.assertFalse(MeterReading.objects.exists())

    def test_billed_reading_cannot_be_deleted(self):
        Tariff.objects.create(
            power_capacity=PowerCapacity.VA_900,
            rate_per_kwh=Decimal("1444"),
            effective_date=datetime.date(2024, 1, 1),
        )
        bill = generate_bill(self.january.pk, today=datetime.date(2024, 2, 1))

        response = self.client.post(
            reverse("admin:readings_meterreading_delete", args=[self.january.pk]),
            {"post": "yes"},
        )

        self.assertEqual(response.status_code, 403)
        self.assertTrue(MeterReading.objects.filter(pk=self.january.pk).exists())
        self.assertTrue(Bill.objects.filter(pk=bill.pk).exists())
