"""
YAML import/export service for tariffs.

Provides bulk import and export of tariff schedules. Validation matches the
model validation used by the admin.

YAML Format:
    tariffs:
      - power_capacity: 900
        rate_per_kwh: 1444.70
        admin_fee: 2500
        tax_percentage: 10
        effective_date: "2024-01-01"
        is_active: true

A tariff is identified by its power capacity and effective date.
"""

import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import yaml
from django.core.exceptions import ValidationError
from django.db import transaction

from tariffs.models import Tariff


class TariffYAMLExporter:
    """Export tariffs to YAML format."""

    def __init__(self, tariffs_queryset):
        """
        Initialize exporter with tariffs queryset.

        Args:
            tariffs_queryset: Django queryset of Tariff objects to export
        """
        self.tariffs = tariffs_queryset.order_by("power_capacity", "effective_date", "pk")

    def export_to_yaml(self) -> str:
        """
        Export tariffs to YAML string.

        Returns:
            YAML string representation of tariffs
        """

        # Add custom representer for Decimal to preserve precision
        def decimal_representer(dumper, value):
            return dumper.represent_scalar("tag:yaml.org,2002:float", str(value))

        yaml.add_representer(Decimal, decimal_representer)

        data = {"tariffs": [self._serialize_tariff(t) for t in self.tariffs]}
        return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def _serialize_tariff(self, tariff: Tariff) -> dict:
        """Convert tariff instance to dictionary."""
        return {
            "power_capacity": tariff.power_capacity,
            "rate_per_kwh": tariff.rate_per_kwh,
            "admin_fee": tariff.admin_fee,
            "tax_percentage": tariff.tax_percentage,
            "effective_date": tariff.effective_date.isoformat(),
            "is_active": tariff.is_active,
        }


class TariffYAMLImporter:
    """Import tariffs from YAML format with validation."""

    REQUIRED_FIELDS = ("power_capacity", "rate_per_kwh", "effective_date")

    def __init__(self, yaml_content: str, replace_existing: bool = False):
        """
        Initialize importer with YAML content.

        Args:
            yaml_content: YAML string to parse and import
            replace_existing: If True, update existing tariffs with the same
                power capacity and effective date. If False, skip them.
        """
        self.yaml_content = yaml_content
        self.replace_existing = replace_existing
        self.results = {
            "created": [],  # [tariff, ...]
            "updated": [],  # [tariff, ...]
            "skipped": [],  # [(tariff_label, reason), ...]
            "errors": [],  # [(tariff_label, error_messages), ...]
        }

    def import_tariffs(self) -> dict:
        """
        Parse and import tariffs from YAML.

        Returns:
            Dictionary with results:
            {
                'created': [tariff, ...],
                'updated': [tariff, ...],
                'skipped': [(tariff_label, reason), ...],
                'errors': [(tariff_label, error_messages), ...]
            }
        """
        try:
            data = self._parse_yaml()
            self._validate_schema(data)
        except Exception as e:
            # Parse or schema errors affect entire file
            self.results["errors"].append(("YAML File", [str(e)]))
            return self.results

        # Import each tariff in its own transaction
        for index, tariff_data in enumerate(data["tariffs"], start=1):
            label = self._label(tariff_data, index)
            try:
                self._import_single_tariff(tariff_data, label)
            except Exception as e:
                # Unexpected errors during import
                self.results["errors"].append((label, [f"Unexpected error: {str(e)}"]))

        return self.results

    def _parse_yaml(self) -> dict:
        """Parse YAML content with error handling."""
        try:
            data = yaml.safe_load(self.yaml_content)
            if data is None:
                raise ValueError("Empty YAML file")
            return data
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax: {str(e)}")

    def _validate_schema(self, data: dict):
        """Validate top-level YAML structure."""
        if not isinstance(data, dict):
            raise ValueError("YAML must contain a dictionary at top level")

        if "tariffs" not in data:
            raise ValueError("Missing required top-level key: tariffs")

        if not isinstance(data["tariffs"], list):
            raise ValueError("tariffs must be a list")

        if len(data["tariffs"]) == 0:
            raise ValueError("tariffs list cannot be empty")

    def _label(self, tariff_data: Any, index: int) -> str:
        if isinstance(tariff_data, dict) and "power_capacity" in tariff_data:
            return f"Tariff {index}: {tariff_data['power_capacity']}VA from {tariff_data.get('effective_date')}"
        return f"Tariff {index}"

    def _import_single_tariff(self, tariff_data: dict, label: str):
        """Import a single tariff atomically."""
        if not isinstance(tariff_data, dict):
            self.results["errors"].append((label, ["Tariff entry must be a mapping"]))
            return

        errors = [
            f"Missing required field: {name}"
            for name in self.REQUIRED_FIELDS
            if tariff_data.get(name) in (None, "")
        ]
        if errors:
            self.results["errors"].append((label, errors))
            return

        try:
            values = {
                "power_capacity": int(tariff_data["power_capacity"]),
                "rate_per_kwh": self._parse_decimal(tariff_data["rate_per_kwh"], "rate_per_kwh"),
                "admin_fee": self._parse_decimal(tariff_data.get("admin_fee", 0), "admin_fee"),
                "tax_percentage": self._parse_decimal(
                    tariff_data.get("tax_percentage", 0), "tax_percentage"
                ),
                "effective_date": self._parse_date(tariff_data["effective_date"]),
                "is_active": bool(tariff_data.get("is_active", True)),
            }
        except (TypeError, ValueError) as e:
            self.results["errors"].append((label, [str(e)]))
            return

        existing_tariff = (
            Tariff.objects.filter(
                power_capacity=values["power_capacity"],
                effective_date=values["effective_date"],
            )
            .order_by("-pk")
            .first()
        )

        if existing_tariff and not self.replace_existing:
            self.results["skipped"].append(
                (label, f"Tariff already exists for {existing_tariff.power_capacity}VA "
                        f"from {existing_tariff.effective_date}")
            )
            return

        try:
            with transaction.atomic():
                tariff = existing_tariff or Tariff()
                for name, value in values.items():
                    setattr(tariff, name, value)
                tariff.full_clean()
                tariff.save()
        except ValidationError as e:
            error_messages = []
            if hasattr(e, "error_dict"):
                for field, field_errors in e.error_dict.items():
                    for error in field_errors:
                        error_messages.extend(f"{field}: {message}" for message in error.messages)
            else:
                error_messages = [str(e)]
            self.results["errors"].append((label, error_messages))
            return

        if existing_tariff:
            self.results["updated"].append(tariff)
        else:
            self.results["created"].append(tariff)

    def _parse_decimal(self, value: Any, field: str) -> Decimal:
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Invalid number for {field}: '{value}'")

    def _parse_date(self, value: Any) -> datetime.date:
        """Parse date in YYYY-MM-DD format (YAML may already yield a date)."""
        if isinstance(value, datetime.date):
            return value
        try:
            return datetime.datetime.strptime(str(value), "%Y-%m-%d").date()
        except ValueError:
            raise ValueError(f"Invalid date format: '{value}'. Expected YYYY-MM-DD")
