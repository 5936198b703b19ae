"""
ChatCrypt - AES-256-GCM engine tests.

Covers round trips, nonce uniqueness, tamper detection and the
combined-blob string helpers.
"""

import pytest

from chatcrypt.core.crypto.aes_gcm import AES_NONCE_SIZE, AES_TAG_SIZE, AesGcmEngine
from chatcrypt.core.crypto.keys import KeyManager, SecretKey
from chatcrypt.core.exceptions import (
    AuthenticationFailure,
    CryptoError,
    DecryptionError,
    InvalidArgumentError,
    InvalidKeyError,
    MalformedPayloadError,
)


@pytest.fixture
def engine():
    return AesGcmEngine()


def _flip(data: bytes, index: int, bit: int = 0) -> bytes:
    tampered = bytearray(data)
    tampered[index] ^= 1 << bit
    return bytes(tampered)


def test_round_trip(engine, aes_key):
    plaintext = b"Hello, World!"
    result = engine.encrypt(plaintext, aes_key)

    assert len(result.iv) == 12
    assert len(result.tag) == 16
    assert len(result.ciphertext) == len(plaintext)
    assert result.ciphertext != plaintext

    assert engine.decrypt(result.ciphertext, result.iv, result.tag, aes_key) == plaintext


def test_round_trip_large_payload(engine, aes_key):
    plaintext = bytes(range(256)) * 4096
    result = engine.encrypt(plaintext, aes_key)
    assert engine.decrypt(result.ciphertext, result.iv, result.tag, aes_key) == plaintext


def test_nonce_distinctness(engine, aes_key):
    """10,000 encryptions of the same plaintext never repeat a nonce."""
    ivs = {engine.encrypt(b"same plaintext", aes_key).iv for _ in range(10_000)}
    assert len(ivs) == 10_000


def test_same_plaintext_different_ciphertext(engine, aes_key):
    first = engine.encrypt(b"repeat", aes_key)
    second = engine.encrypt(b"repeat", aes_key)
    assert first.ciphertext != second.ciphertext


def test_tamper_ciphertext_every_bit(engine, aes_key):
    """Any single bit flip in the ciphertext fails authentication."""
    result = engine.encrypt(b"tamper", aes_key)
    for index in range(len(result.ciphertext)):
        for bit in range(8):
            with pytest.raises(AuthenticationFailure):
                engine.decrypt(_flip(result.ciphertext, index, bit), result.iv, result.tag, aes_key)


def test_tamper_tag_every_bit(engine, aes_key):
    result = engine.encrypt(b"tamper the tag", aes_key)
    for index in range(AES_TAG_SIZE):
        for bit in range(8):
            with pytest.raises(AuthenticationFailure):
                engine.decrypt(result.ciphertext, result.iv, _flip(result.tag, index, bit), aes_key)


def test_tamper_iv(engine, aes_key):
    result = engine.encrypt(b"tamper the iv", aes_key)
    with pytest.raises(AuthenticationFailure):
        engine.decrypt(result.ciphertext, _flip(result.iv, 0), result.tag, aes_key)


def test_wrong_key_fails_authentication(engine, aes_key):
    result = engine.encrypt(b"secret", aes_key)
    other = KeyManager.generate_symmetric_key()
    with pytest.raises(AuthenticationFailure):
        engine.decrypt(result.ciphertext, result.iv, result.tag, other)


def test_authentication_failure_keeps_cause(engine, aes_key):
    result = engine.encrypt(b"secret", aes_key)
    with pytest.raises(AuthenticationFailure) as exc_info:
        engine.decrypt(result.ciphertext, result.iv, _flip(result.tag, 0), aes_key)
    assert exc_info.value.__cause__ is not None
    assert isinstance(exc_info.value, CryptoError)


@pytest.mark.parametrize("iv_len", [0, 11, 13, 16])
def test_wrong_iv_length_rejected_before_authentication(engine, aes_key, iv_len):
    result = engine.encrypt(b"data", aes_key)
    with pytest.raises(InvalidArgumentError):
        engine.decrypt(result.ciphertext, b"\x00" * iv_len, result.tag, aes_key)


@pytest.mark.parametrize("tag_len", [0, 12, 15, 17])
def test_wrong_tag_length_rejected_before_authentication(engine, aes_key, tag_len):
    result = engine.encrypt(b"data", aes_key)
    with pytest.raises(InvalidArgumentError):
        engine.decrypt(result.ciphertext, result.iv, b"\x00" * tag_len, aes_key)


def test_empty_plaintext_rejected(engine, aes_key):
    with pytest.raises(InvalidArgumentError):
        engine.encrypt(b"", aes_key)


def test_none_plaintext_rejected(engine, aes_key):
    with pytest.raises(InvalidArgumentError):
        engine.encrypt(None, aes_key)


def test_none_key_rejected(engine):
    with pytest.raises(InvalidKeyError):
        engine.encrypt(b"data", None)


def test_wrong_key_length_rejected(engine):
    with pytest.raises(InvalidKeyError):
        engine.encrypt(b"data", SecretKey(b"\x00" * 16))


def test_wrong_algorithm_tag_rejected(engine):
    with pytest.raises(InvalidKeyError):
        engine.encrypt(b"data", SecretKey(b"\x00" * 32, "DES"))


def test_wiped_key_rejected(engine):
    key = KeyManager.generate_symmetric_key()
    key.wipe()
    with pytest.raises(InvalidKeyError):
        engine.encrypt(b"data", key)


def test_is_key_valid(engine, aes_key, small_rsa_key_pair):
    assert engine.is_key_valid(aes_key)
    assert engine.is_key_valid(SecretKey(b"\x00" * 32, "aes"))
    assert not engine.is_key_valid(None)
    assert not engine.is_key_valid(SecretKey(b"", "AES"))
    assert not engine.is_key_valid(SecretKey(b"\x00" * 32, "RSA"))
    assert not engine.is_key_valid(small_rsa_key_pair.public)


def test_generate_nonce_length():
    assert len(AesGcmEngine.generate_nonce()) == AES_NONCE_SIZE


def test_hello_string_blob(engine, aes_key):
    """Encrypting "hello" yields 12 IV + 16 tag + 5 ciphertext bytes."""
    blob = engine.encrypt_string("hello", aes_key)
    assert len(blob) == 33
    assert engine.decrypt_string(blob, aes_key) == "hello"


def test_hello_string_blob_other_key(engine, aes_key):
    blob = engine.encrypt_string("hello", aes_key)
    with pytest.raises(AuthenticationFailure):
        engine.decrypt_string(blob, KeyManager.generate_symmetric_key())


def test_unicode_string_round_trip(engine, aes_key):
    text = "Grüße, 世界 🔒"
    assert engine.decrypt_string(engine.encrypt_string(text, aes_key), aes_key) == text


def test_decrypt_string_short_blob(engine, aes_key):
    with pytest.raises(MalformedPayloadError):
        engine.decrypt_string(b"\x00" * 27, aes_key)


def test_decrypt_string_invalid_utf8(engine, aes_key):
    result = engine.encrypt(b"\xff\xfe\xfd", aes_key)
    with pytest.raises(DecryptionError):
        engine.decrypt_string(result.combine(), aes_key)


def test_encrypt_string_rejects_non_string(engine, aes_key):
    with pytest.raises(InvalidArgumentError):
        engine.encrypt_string(None, aes_key)
