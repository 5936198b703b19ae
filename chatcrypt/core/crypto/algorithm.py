"""
Algorithm Specifications
========================

Immutable metadata describing each cipher variant the core supports.

A plugin is parameterized by exactly one AlgorithmSpec, and every
EncryptionResult it produces carries an IV and tag whose lengths match
its spec (both zero for RSA).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from chatcrypt.utils.validators import (
    require_non_blank,
    require_non_negative,
    require_positive,
)
from chatcrypt.core.exceptions import InvalidArgumentError


class KeyType(Enum):
    """Kind of key material an algorithm consumes."""
    SYMMETRIC = "SYMMETRIC"
    ASYMMETRIC = "ASYMMETRIC"


@dataclass(frozen=True, slots=True)
class AlgorithmSpec:
    """
    Immutable description of a cipher variant.

    Attributes:
        name: Display identifier (e.g. "AES-256-GCM")
        transform_id: Cipher-mode string (e.g. "AES/GCM/NoPadding")
        key_size_bits: Key size in bits
        iv_size_bytes: IV length (0 for IV-less modes)
        tag_size_bytes: Authentication tag length (0 for tag-less modes)
        key_type: SYMMETRIC or ASYMMETRIC

    Raises:
        InvalidArgumentError: If any field violates its constraint
    """

    name: str
    transform_id: str
    key_size_bits: int
    iv_size_bytes: int
    tag_size_bytes: int
    key_type: KeyType

    def __post_init__(self) -> None:
        require_non_blank(self.name, "Algorithm name")
        require_non_blank(self.transform_id, "Algorithm transformation")
        require_positive(self.key_size_bits, "Key size")
        require_non_negative(self.iv_size_bytes, "IV size")
        require_non_negative(self.tag_size_bytes, "Tag size")
        if not isinstance(self.key_type, KeyType):
            raise InvalidArgumentError("Key type cannot be null")

    @property
    def key_size_bytes(self) -> int:
        """Key size rounded up to whole bytes."""
        return (self.key_size_bits + 7) // 8

    @property
    def is_symmetric(self) -> bool:
        return self.key_type is KeyType.SYMMETRIC

    @property
    def header_size_bytes(self) -> int:
        """Bytes that precede the ciphertext in the combined layout."""
        return self.iv_size_bytes + self.tag_size_bytes


AES_256_GCM_NAME: Final[str] = "AES-256-GCM"
RSA_4096_NAME: Final[str] = "RSA-4096"

_AES_256_GCM: Final[AlgorithmSpec] = AlgorithmSpec(
    name=AES_256_GCM_NAME,
    transform_id="AES/GCM/NoPadding",
    key_size_bits=256,
    iv_size_bytes=12,
    tag_size_bytes=16,
    key_type=KeyType.SYMMETRIC,
)

_RSA_4096: Final[AlgorithmSpec] = AlgorithmSpec(
    name=RSA_4096_NAME,
    transform_id="RSA/ECB/OAEPWithSHA-256AndMGF1Padding",
    key_size_bits=4096,
    iv_size_bytes=0,
    tag_size_bytes=0,
    key_type=KeyType.ASYMMETRIC,
)


def aes256_gcm() -> AlgorithmSpec:
    """AES-256-GCM: 256-bit key, 96-bit IV, 128-bit tag."""
    return _AES_256_GCM


def rsa4096() -> AlgorithmSpec:
    """RSA-4096 with OAEP (SHA-256 / MGF1-SHA-256); no IV, no tag."""
    return _RSA_4096
