"""Coercion of caller-supplied arguments shared by the service modules."""

from billing.core.util import to_id
from billing.exceptions import InvalidInputError


def parse_id(value, field: str) -> int:
    """
    Validate a primary key argument.

    Raises:
        InvalidInputError: If the id is missing or not a positive integer
    """
    if value is None or value == "":
        raise InvalidInputError(f"{field} is required", field=field)
    try:
        return to_id(value)
    except ValueError:
        raise InvalidInputError(f"{field} must be a positive integer (got {value!r})", field=field)
