"""
Tests for meter reading CSV import service.
"""

import datetime
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase

from customers.models import Customer, PowerCapacity
from readings.csv_service import ReadingCSVImporter
from readings.models import MeterReading


class ReadingCSVImporterTests(TestCase):
    """Tests for ReadingCSVImporter class."""

    def setUp(self):
        """Create two customers."""
        self.clerk = User.objects.create_user(username="clerk", password="pw", is_staff=True)
        self.budi = Customer.objects.create(
            customer_number="PLN202401010001",
            full_name="Budi Santoso",
            address="Jl. Merdeka 1",
            power_capacity=PowerCapacity.VA_900,
        )
        self.siti = Customer.objects.create(
            customer_number="PLN202401010002",
            full_name="Siti Rahma",
            address="Jl. Sudirman 2",
            power_capacity=PowerCapacity.VA_1300,
        )

    def test_import_valid_readings(self):
        """Test importing a month's readings for several customers."""
        csv_content = """customer_number,reading_month,current_meter,reading_date,notes
PLN202401010001,2024-01,100,2024-01-31,
PLN202401010002,2024-01,320.5,2024-01-30,gate locked"""

        results = ReadingCSVImporter(csv_content, recorded_by=self.clerk).import_readings()

        self.assertEqual(len(results["created"]), 2)
        self.assertEqual(len(results["errors"]), 0)

        siti_reading = MeterReading.objects.get(customer=self.siti)
        self.assertEqual(siti_reading.current_meter, Decimal("320.5"))
        self.assertEqual(siti_reading.reading_date, datetime.date(2024, 1, 30))
        self.assertEqual(siti_reading.notes, "gate locked")
        self.assertEqual(siti_reading.recorded_by, self.clerk)

    def test_notes_column_optional(self):
        csv_content = """customer_number,reading_month,current_meter,reading_date
PLN202401010001,2024-01,100,2024-01-31"""

        results = ReadingCSVImporter(csv_content).import_readings()

        self.assertEqual(len(results["created"]), 1)
        self.assertEqual(MeterReading.objects.get().notes, "")

    def test_rows_applied_in_month_order(self):
        """Months out of order in the file still chain previous meter values."""
        csv_content = """customer_number,reading_month,current_meter,reading_date
PLN202401010001,2024-02,250,2024-02-29
PLN202401010001,2024-01,100,2024-01-31"""

        results = ReadingCSVImporter(csv_content).import_readings()

        self.assertEqual(len(results["errors"]), 0)
        february = MeterReading.objects.get(reading_month="2024-02")
        self.assertEqual(february.previous_meter, Decimal("100"))
        self.assertEqual(february.usage_kwh, Decimal("150"))

    def test_alternate_date_formats(self):
        csv_content = """customer_number,reading_month,current_meter,reading_date
PLN202401010001,2024-01,100,01/31/2024
PLN202401010002,2024-01,200,31 Jan 2024"""

        results = ReadingCSVImporter(csv_content).import_readings()

        self.assertEqual(len(results["errors"]), 0)
        dates = set(MeterReading.objects.values_list("reading_date", flat=True))
        self.assertEqual(dates, {datetime.date(2024, 1, 31)})

    def test_bad_rows_reported_good_rows_kept(self):
        csv_content = """customer_number,reading_month,current_meter,reading_date
PLN202401010001,2024-01,100,2024-01-31
PLN999999999999,2024-01,100,2024-01-31
PLN202401010002,2024-01,,2024-01-31
PLN202401010002,2024-01,abc,2024-01-31
PLN202401010001,2024-02,50,2024-02-29
PLN202401010001,2024-03,300,not a date"""

        results = ReadingCSVImporter(csv_content).import_readings()

        self.assertEqual(len(results["created"]), 1)
        errors = dict(results["errors"])
        self.assertEqual(len(errors), 5)
        self.assertIn("not found", errors["Row 3: PLN999999999999"][0])
        self.assertIn("Missing required field 'current_meter'", errors["Row 4: PLN202401010002"])
        self.assertIn("must be a number", errors["Row 5: PLN202401010002"][0])
        self.assertIn("cannot be less than", errors["Row 6: PLN202401010001"][0])
        self.assertIn("Invalid reading_date", errors["Row 7: PLN202401010001"][0])

    def test_duplicate_reading_in_file(self):
        csv_content = """customer_number,reading_month,current_meter,reading_date
PLN202401010001,2024-01,100,2024-01-31
PLN202401010001,2024-01,110,2024-01-31"""

        results = ReadingCSVImporter(csv_content).import_readings()

        self.assertEqual(len(results["created"]), 1)
        self.assertEqual(results["errors"][0][0], "Row 3: PLN202401010001")
        self.assertIn("already exists", results["errors"][0][1][0])

    def test_invalid_header(self):
        csv_content = """customer,month,meter
PLN202401010001,2024-01,100"""

        results = ReadingCSVImporter(csv_content).import_readings()

        self.assertEqual(len(results["created"]), 0)
        self.assertEqual(results["errors"][0][0], "CSV File")
        self.assertIn("Missing columns", results["errors"][0][1][0])

    def test_header_only(self):
        results = ReadingCSVImporter(
            "customer_number,reading_month,current_meter,reading_date\n"
        ).import_readings()

        self.assertEqual(results["errors"], [("CSV File", ["No data rows found in CSV file"])])

    def test_empty_file(self):
        results = ReadingCSVImporter("").import_readings()

        self.assertEqual(results["errors"][0][0], "CSV File")
        self.assertFalse(MeterReading.objects.exists())
