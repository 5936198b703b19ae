"""
Key Handles and Key Generation
==============================

Opaque key objects consumed by the engines and plugins.

Key kinds:
    - SecretKey: symmetric material held in a zeroizable SecureBuffer
    - PublicKey / PrivateKey: halves of an RSA key pair

Every key exposes an ``algorithm`` tag and an ``encoded`` form. The
encoded form exists only so validity predicates can check its length;
the core never logs or persists it.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Final

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from chatcrypt.core.exceptions import InvalidArgumentError, KeyGenerationError
from chatcrypt.core.memory import SecureBuffer, ZeroizeContext

AES_ALGORITHM: Final[str] = "AES"
RSA_ALGORITHM: Final[str] = "RSA"

AES_KEY_SIZES: Final[frozenset[int]] = frozenset({128, 192, 256})
RSA_MIN_KEY_SIZE: Final[int] = 2048
RSA_PUBLIC_EXPONENT: Final[int] = 65537

_log = logging.getLogger("chatcrypt.keys")


class Key(ABC):
    """Opaque key handle: an algorithm tag plus encoded material."""

    __slots__ = ()

    @property
    @abstractmethod
    def algorithm(self) -> str:
        """Algorithm tag, e.g. "AES" or "RSA"."""

    @property
    @abstractmethod
    def encoded(self) -> bytes:
        """Encoded key material (empty once destroyed)."""

    def __len__(self) -> int:
        return len(self.encoded)

    def __repr__(self) -> str:
        """Safe representation - never shows material."""
        return f"{type(self).__name__}(algorithm={self.algorithm!r}, length={len(self)})"


class SecretKey(Key):
    """
    Symmetric key whose material lives in a SecureBuffer.

    The buffer is zeroed by wipe(), on context exit, and on finalization.
    A wiped key reports an empty encoding and fails every validity check.

    Usage:
        with KeyManager.generate_symmetric_key() as key:
            result = engine.encrypt(data, key)
        # key material is now zeroed
    """

    __slots__ = ("_algorithm", "_buffer", "__weakref__")

    def __init__(self, material: bytes | bytearray | memoryview, algorithm: str = AES_ALGORITHM) -> None:
        if material is None:
            raise InvalidArgumentError("Key material cannot be null")
        if not isinstance(algorithm, str):
            raise InvalidArgumentError("Key algorithm must be a string")
        self._algorithm = algorithm
        self._buffer = SecureBuffer.from_bytes(material)

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def encoded(self) -> bytes:
        try:
            return self._buffer.data
        except ValueError:
            # Wiped, possibly by another thread
            return b""

    @property
    def is_wiped(self) -> bool:
        return self._buffer.is_wiped

    def wipe(self) -> None:
        """Zero the key material. Irreversible."""
        self._buffer.wipe()

    def __enter__(self) -> "SecretKey":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretKey):
            return NotImplemented
        # Constant-time comparison of material
        return (
            self._algorithm == other._algorithm
            and hmac.compare_digest(self.encoded, other.encoded)
        )


class PublicKey(Key):
    """Public half of an RSA key pair."""

    __slots__ = ("_key",)

    def __init__(self, key: rsa.RSAPublicKey) -> None:
        if not isinstance(key, rsa.RSAPublicKey):
            raise InvalidArgumentError("PublicKey requires an RSA public key object")
        self._key = key

    @property
    def algorithm(self) -> str:
        return RSA_ALGORITHM

    @property
    def encoded(self) -> bytes:
        return self._key.public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    @property
    def key_size(self) -> int:
        return self._key.key_size

    @property
    def raw(self) -> rsa.RSAPublicKey:
        """Underlying cryptography key object (for engines)."""
        return self._key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self._key.public_numbers() == other._key.public_numbers()

    def __hash__(self) -> int:
        return hash(self._key.public_numbers())


class PrivateKey(Key):
    """Private half of an RSA key pair."""

    __slots__ = ("_key",)

    def __init__(self, key: rsa.RSAPrivateKey) -> None:
        if not isinstance(key, rsa.RSAPrivateKey):
            raise InvalidArgumentError("PrivateKey requires an RSA private key object")
        self._key = key

    @property
    def algorithm(self) -> str:
        return RSA_ALGORITHM

    @property
    def encoded(self) -> bytes:
        return self._key.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )

    @property
    def key_size(self) -> int:
        return self._key.key_size

    @property
    def raw(self) -> rsa.RSAPrivateKey:
        """Underlying cryptography key object (for engines)."""
        return self._key

    def public_key(self) -> PublicKey:
        """Derive the matching public half."""
        return PublicKey(self._key.public_key())


@dataclass(frozen=True, slots=True)
class KeyPair:
    """
    RSA key pair.

    Attributes:
        public: Distributable public half
        private: Secret half (keep in memory only)
    """

    public: PublicKey
    private: PrivateKey

    def __repr__(self) -> str:
        return f"KeyPair(algorithm={RSA_ALGORITHM!r}, bits={self.public.key_size})"


class KeyManager:
    """
    Generates symmetric keys and asymmetric key pairs.

    All randomness comes from the OS CSPRNG (``secrets`` for symmetric
    material, OpenSSL's generator for RSA), both safe for concurrent use.
    """

    __slots__ = ()

    @staticmethod
    def generate_symmetric_key(bits: int = 256) -> SecretKey:
        """
        Generate a random AES key.

        Args:
            bits: 128, 192 or 256

        Returns:
            SecretKey tagged "AES"

        Raises:
            InvalidArgumentError: If bits is not a valid AES key size
        """
        if isinstance(bits, bool) or not isinstance(bits, int) or bits not in AES_KEY_SIZES:
            raise InvalidArgumentError(f"AES key size must be one of {sorted(AES_KEY_SIZES)}, got {bits}")

        material = bytearray(secrets.token_bytes(bits // 8))
        with ZeroizeContext(material):
            key = SecretKey(material, AES_ALGORITHM)
        _log.debug("Generated AES-%d key", bits)
        return key

    @staticmethod
    def generate_asymmetric_key_pair(bits: int = 4096) -> KeyPair:
        """
        Generate an RSA key pair with public exponent 65537.

        Args:
            bits: Modulus size, at least 2048

        Returns:
            KeyPair

        Raises:
            InvalidArgumentError: If bits is below the minimum
            KeyGenerationError: If the backend fails to generate the pair
        """
        if isinstance(bits, bool) or not isinstance(bits, int) or bits < RSA_MIN_KEY_SIZE:
            raise InvalidArgumentError(f"RSA key size must be at least {RSA_MIN_KEY_SIZE} bits")

        try:
            private = rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=bits)
        except (ValueError, TypeError) as exc:
            raise KeyGenerationError(f"Failed to generate RSA-{bits} key pair") from exc

        _log.debug("Generated RSA-%d key pair", bits)
        return KeyPair(public=PublicKey(private.public_key()), private=PrivateKey(private))
