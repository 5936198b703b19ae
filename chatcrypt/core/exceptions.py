"""
Cryptographic Error Taxonomy
============================

Every failure raised by the encryption core derives from CryptoError.

Categories:
    - InvalidArgumentError: bad input, raised before any work is scheduled
    - InvalidKeyError: wrong algorithm tag, wrong length, missing key
    - MalformedPayloadError: combined blob too short to hold iv + tag
    - AuthenticationFailure: AEAD tag rejected (tampering or wrong key)
    - EncryptionError / DecryptionError: wrapped engine faults

Engine faults are always re-raised with ``raise ... from exc`` so the
cause stays available for diagnostics while the library exception type
never reaches callers.
"""

from __future__ import annotations

from typing import Any, Dict, Final, Optional


# Error codes (E1xx block is reserved for the crypto core)
E_CRYPTO: Final[str] = "E100"
E_ENCRYPTION_FAILED: Final[str] = "E101"
E_DECRYPTION_FAILED: Final[str] = "E102"
E_INVALID_KEY: Final[str] = "E103"
E_KEY_GENERATION_FAILED: Final[str] = "E104"
E_AUTHENTICATION_FAILED: Final[str] = "E106"
E_INVALID_ARGUMENT: Final[str] = "E110"
E_MALFORMED_PAYLOAD: Final[str] = "E111"
E_PLUGIN_NOT_FOUND: Final[str] = "E120"


class CryptoError(Exception):
    """
    Base exception for the encryption core.

    Attributes:
        code: Short error code for logs and transport layers
        message: Human-readable message (never contains key material)
        details: Additional non-sensitive context
    """

    default_code: str = E_CRYPTO

    def __init__(
        self,
        message: str = "Cryptographic operation failed",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a dictionary for serialization."""
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidArgumentError(CryptoError, ValueError):
    """Input is None, blank, of the wrong type, or of the wrong size."""

    default_code = E_INVALID_ARGUMENT


class InvalidKeyError(CryptoError):
    """Key is missing, carries the wrong algorithm tag, or has the wrong length."""

    default_code = E_INVALID_KEY


class MalformedPayloadError(CryptoError, ValueError):
    """Combined blob is shorter than its declared iv + tag lengths."""

    default_code = E_MALFORMED_PAYLOAD


class AuthenticationFailure(CryptoError):
    """
    AEAD tag verification failed.

    Signals tampering, a wrong key, or a wrong nonce. Distinct from a
    generic DecryptionError so callers can treat it as a security event.
    """

    default_code = E_AUTHENTICATION_FAILED


class EncryptionError(CryptoError):
    """Underlying engine fault during encryption."""

    default_code = E_ENCRYPTION_FAILED


class DecryptionError(CryptoError):
    """Underlying engine fault during decryption (padding, key mismatch)."""

    default_code = E_DECRYPTION_FAILED


class KeyGenerationError(CryptoError):
    """Key material could not be generated."""

    default_code = E_KEY_GENERATION_FAILED


class PluginNotFoundError(CryptoError, LookupError):
    """No plugin is registered under the requested name."""

    default_code = E_PLUGIN_NOT_FOUND
