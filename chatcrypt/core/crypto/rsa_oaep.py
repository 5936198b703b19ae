"""
RSA-OAEP Asymmetric Encryption
==============================

Core primitive behind the RSA-4096 plugin.

Parameters:
    - RSA-4096 keys (public exponent 65537)
    - OAEP padding with SHA-256 and MGF1(SHA-256), no label

Limits:
    OAEP bounds a single message to ``key_bytes - 2 * 32 - 2`` bytes
    (446 bytes for RSA-4096). Larger payloads belong in a hybrid scheme
    built by the caller; the engine never chunks.
"""

from __future__ import annotations

import logging
from typing import Final

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from chatcrypt.core.crypto.algorithm import AlgorithmSpec, rsa4096
from chatcrypt.core.exceptions import (
    DecryptionError,
    EncryptionError,
    InvalidArgumentError,
    InvalidKeyError,
)
from chatcrypt.core.crypto.keys import (
    RSA_ALGORITHM,
    Key,
    KeyManager,
    KeyPair,
    PrivateKey,
    PublicKey,
)
from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.utils.validators import require_bytes

RSA_KEY_SIZE: Final[int] = 4096
OAEP_HASH_SIZE: Final[int] = 32  # SHA-256 digest length

_log = logging.getLogger("chatcrypt.crypto.rsa")


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def max_plaintext_size(key_size_bits: int) -> int:
    """Largest message OAEP(SHA-256) can carry for a modulus of this size."""
    return (key_size_bits + 7) // 8 - 2 * OAEP_HASH_SIZE - 2


class RsaEngine:
    """
    Stateless RSA-OAEP engine.

    RSA has no IV or tag: results carry empty ``iv``/``tag`` and
    decrypt() ignores them (they exist only for the uniform plugin
    contract).

    Usage:
        engine = RsaEngine()
        pair = engine.generate_key_pair()

        result = engine.encrypt(b"session key", pair.public)
        plaintext = engine.decrypt(result.ciphertext, b"", b"", pair.private)
    """

    __slots__ = ("_key_size",)

    def __init__(self, key_size: int = RSA_KEY_SIZE) -> None:
        self._key_size = key_size

    @property
    def algorithm(self) -> AlgorithmSpec:
        return rsa4096()

    @staticmethod
    def is_key_valid(key: Key | None) -> bool:
        """True if key is tagged "RSA" and has a non-empty encoding."""
        if key is None or not isinstance(key, Key):
            return False
        return key.algorithm.upper() == RSA_ALGORITHM and len(key.encoded) > 0

    def _check_tag(self, key: Key | None, half: str) -> None:
        if not self.is_key_valid(key):
            raise InvalidKeyError(f"Invalid RSA {half} key")

    def check_encrypt_args(self, plaintext: bytes, key: Key | None) -> tuple[bytes, PublicKey]:
        """
        Validate encrypt() inputs.

        Returns:
            (plaintext, public key) - a private key is reduced to its public half

        Raises:
            InvalidKeyError: Wrong tag, empty encoding, or no RSA key object
            InvalidArgumentError: Plaintext missing or above the OAEP limit
        """
        self._check_tag(key, "public")
        if isinstance(key, PrivateKey):
            public = key.public_key()
        elif isinstance(key, PublicKey):
            public = key
        else:
            raise InvalidKeyError("Invalid RSA public key: not an RSA key pair half")

        data = require_bytes(plaintext, "Plaintext", allow_empty=True)
        limit = max_plaintext_size(public.key_size)
        if len(data) > limit:
            raise InvalidArgumentError(
                f"Plaintext too long for RSA-{public.key_size} OAEP: "
                f"{len(data)} bytes, max {limit}",
                details={"length": len(data), "max": limit},
            )
        return data, public

    def check_decrypt_args(self, ciphertext: bytes, key: Key | None) -> tuple[bytes, PrivateKey]:
        """Validate decrypt() inputs; returns (ciphertext, private key)."""
        self._check_tag(key, "private")
        if not isinstance(key, PrivateKey):
            raise InvalidKeyError("Invalid RSA private key: decryption requires the private half")
        data = require_bytes(ciphertext, "Ciphertext")
        return data, key

    def encrypt(self, plaintext: bytes, key: Key) -> EncryptionResult:
        """
        Encrypt with RSA-OAEP.

        Args:
            plaintext: Message no longer than max_plaintext_size(key bits)
            key: RSA public key (a private key is accepted and reduced)

        Returns:
            EncryptionResult(ciphertext, b"", b"")

        Raises:
            InvalidKeyError: If the key fails validation
            InvalidArgumentError: If plaintext exceeds the OAEP bound
            EncryptionError: If the backend rejects the operation
        """
        data, public = self.check_encrypt_args(plaintext, key)
        _log.debug("Encrypting %d bytes with RSA-%d", len(data), public.key_size)

        try:
            ciphertext = public.raw.encrypt(data, _oaep())
        except (ValueError, TypeError) as exc:
            _log.error("RSA encryption failed: %s", type(exc).__name__)
            raise EncryptionError(f"Failed to encrypt data with RSA-{public.key_size}") from exc

        _log.debug("Encryption completed. Ciphertext: %d bytes", len(ciphertext))
        return EncryptionResult(ciphertext=ciphertext, iv=b"", tag=b"")

    def decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Key) -> bytes:
        """
        Decrypt RSA-OAEP ciphertext. ``iv`` and ``tag`` are ignored.

        Raises:
            InvalidKeyError: If the key fails validation or is not private
            DecryptionError: On padding failure or key mismatch
        """
        data, private = self.check_decrypt_args(ciphertext, key)
        _log.debug("Decrypting %d bytes with RSA-%d", len(data), private.key_size)

        try:
            return private.raw.decrypt(data, _oaep())
        except (ValueError, TypeError) as exc:
            _log.error("RSA decryption failed: %s", type(exc).__name__)
            raise DecryptionError(f"Failed to decrypt data with RSA-{private.key_size}") from exc

    def generate_key_pair(self) -> KeyPair:
        """Generate a fresh RSA key pair of the engine's key size."""
        return KeyManager.generate_asymmetric_key_pair(self._key_size)
