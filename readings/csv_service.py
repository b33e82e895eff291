"""
CSV import service for meter readings.

Provides ReadingCSVImporter for capturing a month's meter round for many
customers at once. Every row goes through readings.services.record_reading,
so the same duplicate and monotonicity checks apply as for single entry.
"""

import io
from datetime import date, datetime
from typing import Optional

import pandas as pd
from dateutil import parser as dateutil_parser

from billing.exceptions import BillingServiceError
from customers.models import Customer
from readings.services import record_reading


class ReadingCSVImporter:
    """Import meter readings from CSV format with validation."""

    EXPECTED_COLUMNS = {"customer_number", "reading_month", "current_meter", "reading_date", "notes"}
    REQUIRED_FIELDS = ["customer_number", "reading_month", "current_meter", "reading_date"]

    def __init__(self, csv_content: str, recorded_by=None):
        """
        Initialize importer with CSV content.

        Args:
            csv_content: CSV string to parse and import
            recorded_by: Optional user credited with the readings
        """
        self.csv_content = csv_content
        self.recorded_by = recorded_by
        self.results = {
            "created": [],  # [reading, ...]
            "errors": [],  # [(row_identifier, [error_messages]), ...]
        }

    def import_readings(self) -> dict:
        """
        Parse and import readings from CSV.

        Rows are applied in reading_month order so a file holding several
        months for one customer chains previous meter values correctly.

        Returns:
            Dictionary with results structure containing created and errors
        """
        try:
            df = self._parse_csv()
        except Exception as e:
            self.results["errors"].append(("CSV File", [str(e)]))
            return self.results

        if df.empty:
            self.results["errors"].append(("CSV File", ["No data rows found in CSV file"]))
            return self.results

        df["row_num"] = df.index + 2  # 1-indexed, skip header
        df = df.sort_values(["reading_month", "row_num"], kind="stable")

        customers = Customer.objects.in_bulk(
            df["customer_number"].str.strip().unique().tolist(), field_name="customer_number"
        )

        for _, row in df.iterrows():
            self._import_row(row, customers)

        return self.results

    def _parse_csv(self) -> pd.DataFrame:
        """
        Parse CSV content with pandas.

        Raises:
            ValueError: If CSV syntax is invalid or schema is wrong
        """
        try:
            df = pd.read_csv(io.StringIO(self.csv_content), dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            raise ValueError("CSV file is empty or has no header row")
        except pd.errors.ParserError as e:
            raise ValueError(f"Invalid CSV syntax: {str(e)}")

        self._validate_schema(df.columns.tolist())
        if "notes" not in df.columns:
            df["notes"] = ""
        return df

    def _validate_schema(self, columns: list[str]):
        """
        Validate CSV header structure. The notes column is optional.

        Raises:
            ValueError: If header is missing or incorrect
        """
        if not columns:
            raise ValueError("CSV file is empty or has no header row")

        actual_columns = set(columns)
        missing = set(self.REQUIRED_FIELDS) - actual_columns
        extra = actual_columns - self.EXPECTED_COLUMNS

        if missing or extra:
            error_parts = []
            if missing:
                error_parts.append(f"Missing columns: {', '.join(sorted(missing))}")
            if extra:
                error_parts.append(f"Unexpected columns: {', '.join(sorted(extra))}")
            raise ValueError(
                "Invalid CSV header. Expected columns: "
                "customer_number,reading_month,current_meter,reading_date[,notes]. "
                f"{'; '.join(error_parts)}"
            )

    def _import_row(self, row: pd.Series, customers: dict[str, Customer]):
        """Validate one row and record it in its own transaction."""
        row_dict = {k: str(v).strip() for k, v in row.items() if k != "row_num"}
        customer_number = row_dict.get("customer_number", "")
        row_identifier = f"Row {row['row_num']}" + (f": {customer_number}" if customer_number else "")

        errors = [
            f"Missing required field '{field}'"
            for field in self.REQUIRED_FIELDS
            if not row_dict.get(field, "")
        ]
        if errors:
            self.results["errors"].append((row_identifier, errors))
            return

        customer = customers.get(customer_number)
        if customer is None:
            self.results["errors"].append(
                (row_identifier, [f"Customer '{customer_number}' not found"])
            )
            return

        reading_date = self._parse_date(row_dict["reading_date"])
        if reading_date is None:
            self.results["errors"].append(
                (row_identifier, [f"Invalid reading_date: '{row_dict['reading_date']}'"])
            )
            return

        try:
            reading = record_reading(
                customer.pk,
                row_dict["reading_month"],
                row_dict["current_meter"],
                reading_date,
                notes=row_dict.get("notes") or None,
                recorded_by=self.recorded_by,
            )
        except BillingServiceError as e:
            self.results["errors"].append((row_identifier, [e.message]))
            return

        self.results["created"].append(reading)

    def _parse_date(self, date_str: str) -> Optional[date]:
        """
        Parse a reading date.

        Accepts ISO dates and the other formats python-dateutil understands
        (e.g. 01/15/2024, 15 Jan 2024).
        """
        try:
            return date.fromisoformat(date_str)
        except ValueError:
            pass
        try:
            parsed: datetime = dateutil_parser.parse(date_str)
        except (ValueError, OverflowError, dateutil_parser.ParserError):
            return None
        return parsed.date()
