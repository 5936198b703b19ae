"""
AES-256-GCM Authenticated Encryption
====================================

Core AEAD primitive behind the AES-256-GCM plugin.

Security Properties:
    - 256-bit key (128-bit security level)
    - 96-bit nonce (NIST recommended), drawn fresh for every call
    - 128-bit authentication tag, carried separately from the ciphertext
    - No plaintext is released unless the tag verifies

NIST SP 800-38D Compliance:
    - GCM mode with 96-bit IV
    - Random nonces: collision probability stays negligible up to
      2^32 encryptions under one key

WARNING:
    - Never reuse (key, nonce) pairs; the engine never accepts a
      caller-supplied nonce for encryption
    - AuthenticationFailure means tampering or a wrong key; do not
      retry with the same inputs
"""

from __future__ import annotations

import logging
import secrets
from typing import Final

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from chatcrypt.core.crypto.algorithm import AlgorithmSpec, aes256_gcm
from chatcrypt.core.exceptions import (
    AuthenticationFailure,
    DecryptionError,
    EncryptionError,
    InvalidArgumentError,
    InvalidKeyError,
)
from chatcrypt.core.crypto.keys import AES_ALGORITHM, Key
from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.utils.validators import require_bytes

# Constants following NIST recommendations
AES_KEY_SIZE: Final[int] = 32  # 256 bits
AES_NONCE_SIZE: Final[int] = 12  # 96 bits (NIST recommended for GCM)
AES_TAG_SIZE: Final[int] = 16  # 128 bits

_log = logging.getLogger("chatcrypt.crypto.aes")


class AesGcmEngine:
    """
    Stateless AES-256-GCM engine.

    Each call is one transition: ``plaintext x key -> EncryptionResult``
    or ``EncryptionResult x key -> plaintext``. The only shared resource
    is the OS CSPRNG, which is safe for concurrent callers.

    Usage:
        engine = AesGcmEngine()
        key = KeyManager.generate_symmetric_key()

        result = engine.encrypt(b"hello", key)
        plaintext = engine.decrypt(result.ciphertext, result.iv, result.tag, key)

        blob = engine.encrypt_string("hello", key)   # 12 + 16 + 5 bytes
        text = engine.decrypt_string(blob, key)
    """

    __slots__ = ()

    @property
    def algorithm(self) -> AlgorithmSpec:
        return aes256_gcm()

    @staticmethod
    def generate_nonce() -> bytes:
        """
        Generate a cryptographically secure random nonce.

        Returns:
            12 bytes of cryptographic random data
        """
        return secrets.token_bytes(AES_NONCE_SIZE)

    @staticmethod
    def is_key_valid(key: Key | None) -> bool:
        """True if key is tagged "AES" and holds exactly 32 bytes."""
        if key is None or not isinstance(key, Key):
            return False
        return key.algorithm.upper() == AES_ALGORITHM and len(key.encoded) == AES_KEY_SIZE

    def check_key(self, key: Key | None) -> bytes:
        """
        Validate key and return its raw material.

        Raises:
            InvalidKeyError: If the key is missing, mis-tagged or mis-sized
        """
        if key is None:
            raise InvalidKeyError("AES key cannot be null")
        if not isinstance(key, Key):
            raise InvalidKeyError(f"Expected a Key, got {type(key).__name__}")
        if key.algorithm.upper() != AES_ALGORITHM:
            raise InvalidKeyError(
                f"Invalid AES key: algorithm tag is {key.algorithm!r}",
                details={"algorithm": key.algorithm},
            )
        material = key.encoded
        if len(material) != AES_KEY_SIZE:
            raise InvalidKeyError(
                f"Invalid AES key: must be exactly {AES_KEY_SIZE} bytes",
                details={"length": len(material)},
            )
        return material

    def check_encrypt_args(self, plaintext: bytes, key: Key | None) -> tuple[bytes, bytes]:
        """Validate encrypt() inputs; returns (plaintext, key material)."""
        material = self.check_key(key)
        data = require_bytes(plaintext, "Plaintext")
        return data, material

    def check_decrypt_args(
        self,
        ciphertext: bytes,
        iv: bytes,
        tag: bytes,
        key: Key | None,
    ) -> tuple[bytes, bytes, bytes, bytes]:
        """Validate decrypt() inputs; returns (ciphertext, iv, tag, key material)."""
        material = self.check_key(key)
        body = require_bytes(ciphertext, "Ciphertext", allow_empty=True)
        nonce = require_bytes(iv, "IV", allow_empty=True)
        auth_tag = require_bytes(tag, "Tag", allow_empty=True)

        if len(nonce) != AES_NONCE_SIZE:
            raise InvalidArgumentError(
                f"IV must be {AES_NONCE_SIZE} bytes, got: {len(nonce)}"
            )
        if len(auth_tag) != AES_TAG_SIZE:
            raise InvalidArgumentError(
                f"Tag must be {AES_TAG_SIZE} bytes, got: {len(auth_tag)}"
            )
        return body, nonce, auth_tag, material

    def encrypt(self, plaintext: bytes, key: Key) -> EncryptionResult:
        """
        Encrypt plaintext using AES-256-GCM.

        Args:
            plaintext: Non-empty data to encrypt
            key: 256-bit AES key

        Returns:
            EncryptionResult(ciphertext, iv, tag)

        Raises:
            InvalidKeyError: If key is not a valid AES-256 key
            InvalidArgumentError: If plaintext is empty or not bytes
            EncryptionError: If the cipher backend fails
        """
        data, material = self.check_encrypt_args(plaintext, key)
        _log.debug("Encrypting %d bytes with AES-256-GCM", len(data))

        nonce = self.generate_nonce()
        try:
            # AESGCM appends the tag to the ciphertext
            sealed = AESGCM(material).encrypt(nonce, data, None)
        except (ValueError, TypeError, OverflowError) as exc:
            _log.error("AES-256-GCM encryption failed: %s", type(exc).__name__)
            raise EncryptionError("Failed to encrypt data with AES-256-GCM") from exc

        if len(sealed) < AES_TAG_SIZE:
            raise EncryptionError("Invalid ciphertext length after encryption")

        return EncryptionResult(
            ciphertext=sealed[:-AES_TAG_SIZE],
            iv=nonce,
            tag=sealed[-AES_TAG_SIZE:],
        )

    def decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Key) -> bytes:
        """
        Decrypt and authenticate AES-256-GCM ciphertext.

        Args:
            ciphertext: Encrypted data (tag not included)
            iv: 12-byte nonce used for encryption
            tag: 16-byte authentication tag
            key: The 256-bit key used for encryption

        Returns:
            Decrypted plaintext bytes

        Raises:
            InvalidKeyError: If key is not a valid AES-256 key
            InvalidArgumentError: If iv or tag has the wrong length
            AuthenticationFailure: If the tag does not verify
            DecryptionError: If the cipher backend fails otherwise
        """
        body, nonce, auth_tag, material = self.check_decrypt_args(ciphertext, iv, tag, key)
        _log.debug("Decrypting %d bytes with AES-256-GCM", len(body))

        try:
            return AESGCM(material).decrypt(nonce, body + auth_tag, None)
        except InvalidTag as exc:
            _log.warning("AES-256-GCM authentication failed (tampered data or wrong key)")
            raise AuthenticationFailure(
                "Authentication tag verification failed (data may have been tampered)"
            ) from exc
        except (ValueError, TypeError, OverflowError) as exc:
            _log.error("AES-256-GCM decryption failed: %s", type(exc).__name__)
            raise DecryptionError("Failed to decrypt data with AES-256-GCM") from exc

    def encrypt_string(self, plaintext: str, key: Key) -> bytes:
        """
        Encrypt a UTF-8 string into the combined ``iv || tag || ciphertext`` blob.

        Raises:
            InvalidArgumentError: If plaintext is not a string
        """
        if not isinstance(plaintext, str):
            raise InvalidArgumentError("Plaintext string cannot be null")
        return self.encrypt(plaintext.encode("utf-8"), key).combine()

    def decrypt_string(self, combined: bytes, key: Key) -> str:
        """
        Decrypt a combined blob produced by encrypt_string().

        Raises:
            MalformedPayloadError: If the blob is shorter than 28 bytes
            AuthenticationFailure: If the tag does not verify
            DecryptionError: If the plaintext is not valid UTF-8
        """
        result = EncryptionResult.split(combined, AES_NONCE_SIZE, AES_TAG_SIZE)
        plaintext = self.decrypt(result.ciphertext, result.iv, result.tag, key)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError("Decrypted payload is not valid UTF-8") from exc
