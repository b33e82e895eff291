import datetime
from decimal import Decimal

from django.test import TestCase

from billing.exceptions import TariffNotFoundError
from customers.models import PowerCapacity
from tariffs.models import Tariff
from tariffs.resolver import resolve_tariff


class ResolveTariffTests(TestCase):
    def _tariff(self, effective_date, rate="1444", **kwargs):
        return Tariff.objects.create(
            power_capacity=kwargs.pop("power_capacity", PowerCapacity.VA_900),
            rate_per_kwh=Decimal(rate),
            effective_date=effective_date,
            **kwargs,
        )

    def test_latest_effective_tariff_wins(self):
        self._tariff(datetime.date(2023, 1, 1), rate="1352")
        latest = self._tariff(datetime.date(2024, 1, 1))

        self.assertEqual(resolve_tariff(PowerCapacity.VA_900, datetime.date(2024, 2, 1)), latest)

    def test_effective_on_its_own_date(self):
        tariff = self._tariff(datetime.date(2024, 2, 1))

        self.assertEqual(resolve_tariff(PowerCapacity.VA_900, datetime.date(2024, 2, 1)), tariff)

    def test_future_tariff_ignored(self):
        current = self._tariff(datetime.date(2024, 1, 1))
        self._tariff(datetime.date(2024, 3, 1), rate="1600")

        self.assertEqual(resolve_tariff(PowerCapacity.VA_900, datetime.date(2024, 2, 1)), current)

    def test_inactive_tariff_ignored(self):
        current = self._tariff(datetime.date(2024, 1, 1))
        self._tariff(datetime.date(2024, 1, 15), is_active=False)

        self.assertEqual(resolve_tariff(PowerCapacity.VA_900, datetime.date(2024, 2, 1)), current)

    def test_same_effective_date_latest_inserted_wins(self):
        self._tariff(datetime.date(2024, 1, 1), rate="1400")
        newer = self._tariff(datetime.date(2024, 1, 1), rate="1450")

        self.assertEqual(resolve_tariff(PowerCapacity.VA_900, datetime.date(2024, 2, 1)), newer)

    def test_other_capacity_not_used(self):
        self._tariff(datetime.date(2024, 1, 1), power_capacity=PowerCapacity.VA_1300)

        with self.assertRaises(TariffNotFoundError) as ctx:
            resolve_tariff(PowerCapacity.VA_900, datetime.date(2024, 2, 1))

        self.assertEqual(ctx.exception.power_capacity, PowerCapacity.VA_900)
        self.assertEqual(ctx.exception.kind, "tariff_not_found")
