"""
ChatCrypt - EncryptionResult framing tests.
"""

import pytest

from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.core.exceptions import InvalidArgumentError, MalformedPayloadError


def test_combine_layout():
    """Combined blob is iv || tag || ciphertext."""
    result = EncryptionResult(ciphertext=b"CCCC", iv=b"I" * 12, tag=b"T" * 16)
    combined = result.combine()

    assert len(combined) == 32
    assert combined[:12] == b"I" * 12
    assert combined[12:28] == b"T" * 16
    assert combined[28:] == b"CCCC"
    assert result.combined_length == 32


def test_split_restores_parts():
    original = EncryptionResult(ciphertext=b"payload", iv=bytes(range(12)), tag=bytes(range(16)))
    restored = EncryptionResult.split(original.combine(), 12, 16)
    assert restored == original


def test_split_header_only():
    """A blob of exactly iv + tag bytes yields empty ciphertext."""
    restored = EncryptionResult.split(b"\x00" * 28, 12, 16)
    assert restored.ciphertext == b""
    assert len(restored.iv) == 12
    assert len(restored.tag) == 16


def test_split_without_header():
    """RSA layout: the whole blob is ciphertext."""
    restored = EncryptionResult.split(b"abc", 0, 0)
    assert restored.ciphertext == b"abc"
    assert restored.iv == b""
    assert restored.tag == b""


def test_split_too_short():
    with pytest.raises(MalformedPayloadError):
        EncryptionResult.split(b"\x00" * 27, 12, 16)


def test_split_none():
    with pytest.raises(MalformedPayloadError):
        EncryptionResult.split(None, 12, 16)


def test_split_negative_lengths():
    with pytest.raises(MalformedPayloadError):
        EncryptionResult.split(b"\x00" * 40, -1, 16)


def test_defaults_are_empty():
    result = EncryptionResult(b"ct")
    assert result.iv == b""
    assert result.tag == b""
    assert result.combine() == b"ct"


def test_bytearray_normalized():
    result = EncryptionResult(bytearray(b"ct"), bytearray(b"iv"), bytearray(b"tg"))
    assert isinstance(result.ciphertext, bytes)
    assert isinstance(result.iv, bytes)
    assert isinstance(result.tag, bytes)


def test_none_fields_rejected():
    with pytest.raises(InvalidArgumentError):
        EncryptionResult(None)
    with pytest.raises(InvalidArgumentError):
        EncryptionResult(b"ct", iv=None)


def test_repr_hides_payload():
    result = EncryptionResult(ciphertext=b"secret-bytes", iv=b"I" * 12, tag=b"T" * 16)
    text = repr(result)
    assert "secret-bytes" not in text
    assert "ciphertext_len=12" in text
