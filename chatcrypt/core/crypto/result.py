"""
Encryption Result and Combined-Blob Framing
===========================================

Holds the output of one encryption and defines the canonical wire layout:

    AES-256-GCM:  [ IV: 12 ][ TAG: 16 ][ CIPHERTEXT: N ]
    RSA-4096:     [ CIPHERTEXT: N ]

No cryptographic operation happens here; this is pure framing.
"""

from __future__ import annotations

from dataclasses import dataclass

from chatcrypt.core.exceptions import InvalidArgumentError, MalformedPayloadError


@dataclass(frozen=True, slots=True)
class EncryptionResult:
    """
    Immutable result of an encryption.

    Attributes:
        ciphertext: Encrypted payload without the tag
        iv: Nonce used for this encryption (empty for IV-less modes)
        tag: Authentication tag (empty for tag-less modes)

    The result is owned by the caller and should not be kept longer than
    needed.
    """

    ciphertext: bytes
    iv: bytes = b""
    tag: bytes = b""

    def __post_init__(self) -> None:
        for field_name in ("ciphertext", "iv", "tag"):
            value = getattr(self, field_name)
            if value is None:
                raise InvalidArgumentError(f"{field_name} cannot be null")
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise InvalidArgumentError(f"{field_name} must be bytes")
            if not isinstance(value, bytes):
                # Frozen dataclass: normalise through object.__setattr__
                object.__setattr__(self, field_name, bytes(value))

    def combine(self) -> bytes:
        """Concatenate into the wire layout ``iv || tag || ciphertext``."""
        return b"".join((self.iv, self.tag, self.ciphertext))

    @classmethod
    def split(cls, combined: bytes, iv_len: int, tag_len: int) -> "EncryptionResult":
        """
        Parse a combined blob back into its parts.

        Args:
            combined: Bytes produced by combine()
            iv_len: Declared IV length
            tag_len: Declared tag length

        Returns:
            EncryptionResult equal to the one that produced the blob

        Raises:
            MalformedPayloadError: If the blob is shorter than iv_len + tag_len
        """
        if combined is None:
            raise MalformedPayloadError("Combined payload cannot be null")
        if iv_len < 0 or tag_len < 0:
            raise MalformedPayloadError("IV and tag lengths cannot be negative")

        data = bytes(combined)
        header = iv_len + tag_len
        if len(data) < header:
            raise MalformedPayloadError(
                f"Combined payload too short: {len(data)} bytes, need at least {header}",
                details={"length": len(data), "iv_len": iv_len, "tag_len": tag_len},
            )

        return cls(
            ciphertext=data[header:],
            iv=data[:iv_len],
            tag=data[iv_len:header],
        )

    @property
    def combined_length(self) -> int:
        """Length of the combined representation."""
        return len(self.iv) + len(self.tag) + len(self.ciphertext)

    def __repr__(self) -> str:
        """Safe representation without payload bytes."""
        return (
            f"EncryptionResult(ciphertext_len={len(self.ciphertext)}, "
            f"iv_len={len(self.iv)}, tag_len={len(self.tag)})"
        )
