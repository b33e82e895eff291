import time

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from django.test import TestCase

from customers.models import Customer, PowerCapacity


class CustomerModelTests(TestCase):
    def _customer(self, **kwargs):
        values = {
            "customer_number": "PLN202401010001",
            "full_name": "Budi Santoso",
            "address": "Jl. Merdeka 1, Jakarta",
            "power_capacity": PowerCapacity.VA_900,
        }
        values.update(kwargs)
        return Customer.objects.create(**values)

    def test_create_and_str(self):
        customer = self._customer()
        self.assertIsNotNone(customer.pk)
        self.assertEqual(str(customer), "Budi Santoso (PLN202401010001)")
        self.assertTrue(customer.is_active)
        self.assertEqual(customer.phone, "")

    def test_customer_number_unique(self):
        self._customer()

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                self._customer(full_name="Someone Else")

    def test_inactive_status(self):
        customer = self._customer(status=Customer.Status.INACTIVE)
        self.assertFalse(customer.is_active)

    def test_deleting_user_keeps_customer(self):
        user = User.objects.create_user(username="budi@example.com", password="pw")
        customer = self._customer(user=user)

        user.delete()
        customer.refresh_from_db()

        self.assertIsNone(customer.user)

    def test_auto_timestamps(self):
        """Test that created_at and updated_at are set automatically."""
        customer = self._customer()
        created_at = customer.created_at
        updated_at = customer.updated_at

        time.sleep(0.01)
        customer.full_name = "Budi S."
        customer.save()
        customer.refresh_from_db()

        self.assertEqual(customer.created_at, created_at)
        self.assertGreater(customer.updated_at, updated_at)
