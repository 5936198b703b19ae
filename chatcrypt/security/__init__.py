"""
Security module - startup self-tests for the encryption core.

Security Considerations:
- Fail closed: a failing self-test blocks registry construction
- No custom cryptography implementations
"""

from chatcrypt.security.hardening import (
    CheckResult,
    CryptoSelfTest,
    SecurityCheckResult,
    StartupSelfTest,
)

__all__ = [
    "CheckResult",
    "CryptoSelfTest",
    "SecurityCheckResult",
    "StartupSelfTest",
]
