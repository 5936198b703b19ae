"""
Validation Utilities
====================

Input validation functions shared by the crypto core.

All helpers raise InvalidArgumentError (a ValueError) so that bad input
is rejected synchronously, before any cipher work is scheduled.
"""

from __future__ import annotations

from typing import Any

from chatcrypt.core.exceptions import InvalidArgumentError


def require_non_blank(value: Any, field_name: str = "value") -> str:
    """
    Validate that a value is a non-blank string.

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        The validated string

    Raises:
        InvalidArgumentError: If value is not a string or is blank
    """
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field_name} must be a string")

    if not value.strip():
        raise InvalidArgumentError(f"{field_name} cannot be null or blank")

    # Null bytes never belong in identifiers
    if "\x00" in value:
        raise InvalidArgumentError(f"{field_name} contains invalid characters")

    return value


def require_bytes(
    value: Any,
    field_name: str = "value",
    allow_empty: bool = False,
) -> bytes:
    """
    Validate a bytes-like value and return it as immutable bytes.

    Args:
        value: bytes, bytearray or memoryview
        field_name: Name of the field for error messages
        allow_empty: If False, zero-length input is rejected

    Returns:
        The value as bytes

    Raises:
        InvalidArgumentError: If value is None, not bytes-like, or empty
    """
    if value is None:
        raise InvalidArgumentError(f"{field_name} cannot be null")

    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(
            f"{field_name} must be bytes, got {type(value).__name__}"
        )

    data = bytes(value)
    if not allow_empty and not data:
        raise InvalidArgumentError(f"{field_name} cannot be empty")

    return data


def require_positive(value: Any, field_name: str = "value") -> int:
    """Validate that value is an int greater than zero."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{field_name} must be an integer")
    if value <= 0:
        raise InvalidArgumentError(f"{field_name} must be positive")
    return value


def require_non_negative(value: Any, field_name: str = "value") -> int:
    """Validate that value is an int greater than or equal to zero."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{field_name} must be an integer")
    if value < 0:
        raise InvalidArgumentError(f"{field_name} cannot be negative")
    return value
