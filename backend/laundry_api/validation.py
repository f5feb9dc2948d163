from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError
from .time_utils import parse_client_datetime


# Largest amount accepted on an order: 9,999,999,999.99
MAX_AMOUNT = Decimal("9999999999.99")
MAX_NOTES_LENGTH = 1000
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def require_json(payload: Any) -> dict:
    """Request bodies must be JSON objects."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def parse_amount(value: Any, field: str, *, required: bool = False) -> Decimal | None:
    """
    Parse a money amount to Decimal with two places.

    Accepts ints, floats and numeric strings; rejects booleans, NaN and
    anything with more than two decimals.
    """
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if amount.as_tuple().exponent < -2:
        raise ValidationError(f"{field} must have at most 2 decimal places")
    if amount < 0:
        raise ValidationError(f"{field} must not be negative")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} is too large")
    return amount.quantize(Decimal("0.01"))


def parse_datetime_field(value: Any, field: str):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO-8601 datetime")
    try:
        return parse_client_datetime(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 datetime")


def parse_notes(value: Any, *, max_length: int = MAX_NOTES_LENGTH) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("notes must be a string")
    notes = value.strip()
    if len(notes) > max_length:
        raise ValidationError(f"Notes cannot exceed {max_length} characters")
    return notes


def parse_int(value: Any, field: str) -> int:
    """Strict integer: no floats, no decimals, no booleans."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(f"{field} must be an integer")


def parse_string(
    value: Any,
    field: str,
    *,
    required: bool = False,
    strip: bool = True,
    max_length: int | None = None,
) -> str | None:
    """
    Strict string field.

    Missing or blank values are None unless required. Numbers, booleans,
    lists and objects are rejected rather than coerced.
    """
    if value is None:
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    text = value.strip() if strip else value
    if not text.strip():
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} cannot exceed {max_length} characters")
    return text


def parse_bool(value: Any, field: str, *, default: bool = False) -> bool:
    """JSON booleans only; "false" and 0 are errors, not False."""
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean")
    return value


def parse_pagination(args) -> tuple[int, int]:
    """page >= 1 and 1 <= limit <= MAX_PAGE_SIZE from query args."""
    page = parse_int(args.get("page", 1), "page")
    limit = parse_int(args.get("limit", DEFAULT_PAGE_SIZE), "limit")
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    return page, limit
