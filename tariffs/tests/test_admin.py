"""
Integration tests for the tariff admin actions and YAML export.
"""

import datetime
from decimal import Decimal

import yaml
from django.contrib.auth.models import User
from django.test import TestCase
from django.urls import reverse

from tariffs.models import Tariff


class TariffAdminTests(TestCase):
    def setUp(self):
        self.admin_user = User.objects.create_superuser(
            username="admin", email="admin@test.com", password="admin123"
        )
        self.client.force_login(self.admin_user)
        self.tariff = Tariff.objects.create(
            power_capacity=900,
            rate_per_kwh=Decimal("1444.70"),
            effective_date=datetime.date(2024, 1, 1),
        )

    def test_changelist_loads(self):
        response = self.client.get(reverse("admin:tariffs_tariff_changelist"))
        self.assertEqual(response.status_code, 200)

    def test_deactivate_action(self):
        response = self.client.post(
            reverse("admin:tariffs_tariff_changelist"),
            {"action": "deactivate_selected_tariffs", "_selected_action": [self.tariff.pk]},
        )

        self.assertEqual(response.status_code, 302)
        self.tariff.refresh_from_db()
        self.assertFalse(self.tariff.is_active)

    def test_export_action(self):
        response = self.client.post(
            reverse("admin:tariffs_tariff_changelist"),
            {"action": "export_selected_tariffs_to_yaml", "_selected_action": [self.tariff.pk]},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/x-yaml")
        data = yaml.safe_load(response.content)
        self.assertEqual(data["tariffs"][0]["power_capacity"], 900)

    def test_export_view(self):
        response = self.client.get(reverse("admin:tariffs_tariff_export"))

        self.assertEqual(response.status_code, 200)
        self.assertIn('filename="tariffs.yaml"', response["Content-Disposition"])

    def test_tariffs_cannot_be_deleted(self):
        response = self.client.get(reverse("admin:tariffs_tariff_delete", args=[self.tariff.pk]))

        self.assertEqual(response.status_code, 403)
