"""
ChatCrypt - RSA-OAEP engine tests.
"""

import pytest

from chatcrypt.core.crypto.keys import SecretKey
from chatcrypt.core.crypto.rsa_oaep import RsaEngine, max_plaintext_size
from chatcrypt.core.exceptions import (
    DecryptionError,
    InvalidArgumentError,
    InvalidKeyError,
)


@pytest.fixture
def engine():
    return RsaEngine()


def test_max_plaintext_size():
    assert max_plaintext_size(4096) == 446
    assert max_plaintext_size(2048) == 190


def test_round_trip(engine, rsa_key_pair):
    result = engine.encrypt(b"session key material", rsa_key_pair.public)

    assert result.iv == b""
    assert result.tag == b""
    assert len(result.ciphertext) == 512
    assert engine.decrypt(result.ciphertext, b"", b"", rsa_key_pair.private) == b"session key material"


def test_iv_and_tag_ignored_on_decrypt(engine, small_rsa_key_pair):
    result = engine.encrypt(b"data", small_rsa_key_pair.public)
    assert engine.decrypt(result.ciphertext, b"junk", b"more junk", small_rsa_key_pair.private) == b"data"


def test_randomized_padding(engine, small_rsa_key_pair):
    first = engine.encrypt(b"same", small_rsa_key_pair.public)
    second = engine.encrypt(b"same", small_rsa_key_pair.public)
    assert first.ciphertext != second.ciphertext


def test_max_length_plaintext(engine, rsa_key_pair):
    plaintext = b"\x5a" * 446
    result = engine.encrypt(plaintext, rsa_key_pair.public)
    assert engine.decrypt(result.ciphertext, b"", b"", rsa_key_pair.private) == plaintext


def test_oversized_plaintext_rejected(engine, rsa_key_pair):
    with pytest.raises(InvalidArgumentError):
        engine.encrypt(b"\x00" * 447, rsa_key_pair.public)


def test_empty_plaintext_allowed(engine, small_rsa_key_pair):
    result = engine.encrypt(b"", small_rsa_key_pair.public)
    assert engine.decrypt(result.ciphertext, b"", b"", small_rsa_key_pair.private) == b""


def test_private_key_accepted_for_encryption(engine, small_rsa_key_pair):
    result = engine.encrypt(b"data", small_rsa_key_pair.private)
    assert engine.decrypt(result.ciphertext, b"", b"", small_rsa_key_pair.private) == b"data"


def test_public_key_rejected_for_decryption(engine, small_rsa_key_pair):
    result = engine.encrypt(b"data", small_rsa_key_pair.public)
    with pytest.raises(InvalidKeyError):
        engine.decrypt(result.ciphertext, b"", b"", small_rsa_key_pair.public)


def test_aes_key_rejected(engine, aes_key):
    with pytest.raises(InvalidKeyError):
        engine.encrypt(b"data", aes_key)


def test_mis_tagged_secret_key_rejected(engine):
    with pytest.raises(InvalidKeyError):
        engine.encrypt(b"data", SecretKey(b"\x00" * 32, "RSA"))


def test_none_key_rejected(engine):
    with pytest.raises(InvalidKeyError):
        engine.encrypt(b"data", None)


def test_mismatched_private_key(engine, rsa_key_pair, small_rsa_key_pair):
    result = engine.encrypt(b"data", small_rsa_key_pair.public)
    with pytest.raises(DecryptionError) as exc_info:
        engine.decrypt(result.ciphertext, b"", b"", rsa_key_pair.private)
    assert exc_info.value.__cause__ is not None


def test_corrupted_ciphertext(engine, small_rsa_key_pair):
    result = engine.encrypt(b"data", small_rsa_key_pair.public)
    tampered = bytearray(result.ciphertext)
    tampered[10] ^= 0xFF
    with pytest.raises(DecryptionError):
        engine.decrypt(bytes(tampered), b"", b"", small_rsa_key_pair.private)


def test_empty_ciphertext_rejected(engine, small_rsa_key_pair):
    with pytest.raises(InvalidArgumentError):
        engine.decrypt(b"", b"", b"", small_rsa_key_pair.private)


def test_is_key_valid(engine, rsa_key_pair, aes_key):
    assert engine.is_key_valid(rsa_key_pair.public)
    assert engine.is_key_valid(rsa_key_pair.private)
    assert not engine.is_key_valid(None)
    assert not engine.is_key_valid(aes_key)


def test_generate_key_pair_size():
    pair = RsaEngine(2048).generate_key_pair()
    assert pair.public.key_size == 2048
