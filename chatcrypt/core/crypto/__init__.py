"""
chatcrypt Cryptographic Core
============================

Algorithm-agnostic building blocks for the encryption plugins.

Architecture:
    1. AlgorithmSpec: immutable cipher metadata
    2. EncryptionResult: ciphertext + iv + tag and the combined wire layout
    3. AesGcmEngine: AES-256-GCM AEAD
    4. RsaEngine: RSA-4096 OAEP(SHA-256)

Security Properties:
    - Fresh random nonce for every AES-GCM encryption
    - Tags verified before any plaintext is returned
    - Secret key material held in zeroizable buffers
    - Library exceptions wrapped, causes preserved
"""

from chatcrypt.core.exceptions import (
    CryptoError,
    InvalidArgumentError,
    InvalidKeyError,
    MalformedPayloadError,
    AuthenticationFailure,
    EncryptionError,
    DecryptionError,
    KeyGenerationError,
    PluginNotFoundError,
)
from chatcrypt.core.crypto.algorithm import AlgorithmSpec, KeyType, aes256_gcm, rsa4096
from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.core.crypto.keys import Key, SecretKey, PublicKey, PrivateKey, KeyPair, KeyManager
from chatcrypt.core.crypto.aes_gcm import AesGcmEngine
from chatcrypt.core.crypto.rsa_oaep import RsaEngine

__all__ = [
    "CryptoError",
    "InvalidArgumentError",
    "InvalidKeyError",
    "MalformedPayloadError",
    "AuthenticationFailure",
    "EncryptionError",
    "DecryptionError",
    "KeyGenerationError",
    "PluginNotFoundError",
    "AlgorithmSpec",
    "KeyType",
    "aes256_gcm",
    "rsa4096",
    "EncryptionResult",
    "Key",
    "SecretKey",
    "PublicKey",
    "PrivateKey",
    "KeyPair",
    "KeyManager",
    "AesGcmEngine",
    "RsaEngine",
]
