"""
ChatCrypt - Pluggable Authenticated Encryption
==============================================

This package provides the encryption core of a chat system: interchangeable
cipher variants (AES-256-GCM, RSA-4096 OAEP) behind a uniform,
future-returning plugin contract.

Security Notice:
- No key material or plaintext is logged
- Fail-closed design pattern
- Authentication tags are verified before plaintext is released
"""

from chatcrypt.core.config import CryptoConfig
from chatcrypt.core.logging import configure_logging, get_secure_logger
from chatcrypt.core.crypto import (
    AesGcmEngine,
    AlgorithmSpec,
    EncryptionResult,
    KeyManager,
    RsaEngine,
    aes256_gcm,
    rsa4096,
)
from chatcrypt.plugins import (
    AesEncryptionPlugin,
    EncryptionPlugin,
    PluginRegistry,
    RsaEncryptionPlugin,
)

__version__ = "1.0.0"
__author__ = "ChatCrypt Team"

__all__ = [
    "CryptoConfig",
    "configure_logging",
    "get_secure_logger",
    "AesGcmEngine",
    "AlgorithmSpec",
    "EncryptionResult",
    "KeyManager",
    "RsaEngine",
    "aes256_gcm",
    "rsa4096",
    "AesEncryptionPlugin",
    "EncryptionPlugin",
    "PluginRegistry",
    "RsaEncryptionPlugin",
    "__version__",
]
