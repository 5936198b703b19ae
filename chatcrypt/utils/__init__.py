"""
Utils module - Utility functions and helpers.
"""

from chatcrypt.utils.validators import (
    require_bytes,
    require_non_blank,
    require_non_negative,
    require_positive,
)

__all__ = [
    "require_bytes",
    "require_non_blank",
    "require_non_negative",
    "require_positive",
]
