"""
Input validation functions for the Inventory Ledger application.

This module provides validation functions for user inputs including:
- Numeric validation (positive, non-negative)
- String validation (length, required fields)
- Name normalization for case-insensitive material matching

Validators return a ``(is_valid, error_message)`` tuple so callers can
collect every problem in a form before raising a single ValidationError.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from .constants import (
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_REQUIRED_FIELD,
)


def normalize_name(name: Optional[str]) -> str:
    """
    Normalize a free-text name for case-insensitive comparison.

    Trims the ends, collapses inner whitespace and case-folds, so
    "  Teak   Wood " and "teak wood" share the key "teak wood".

    Args:
        name: Raw name as typed by the user

    Returns:
        Normalized key (empty string for None/blank input)
    """
    if name is None:
        return ""
    return " ".join(str(name).split()).casefold()


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a number or numeric string to Decimal.

    Args:
        value: int, float, Decimal, or numeric string

    Returns:
        Decimal value, or None if the value is missing or not numeric
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def to_scaled_decimal(value: Any, quantum: Decimal) -> Optional[Decimal]:
    """
    Convert to Decimal rounded half up to a column's scale.

    Args:
        value: int, float, Decimal, or numeric string
        quantum: Smallest stored step (e.g., Decimal("0.001"))

    Returns:
        Rounded Decimal, or None if the value is missing, not numeric, or
        too large to round at this scale
    """
    number = to_decimal(value)
    if number is None:
        return None
    try:
        return number.quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_string_length(
    value: Optional[str], max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Args:
        value: The string value to validate
        max_length: Maximum allowed length
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_positive_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a number greater than zero.

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    number = to_decimal(value)
    if number is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if number <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a number greater than or equal to zero.

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    number = to_decimal(value)
    if number is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if number < 0:
        return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, ""
