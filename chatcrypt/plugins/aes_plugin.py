"""
AES-256-GCM plugin.

Symmetric AEAD variant: 256-bit keys, 12-byte IV, 16-byte tag.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Final, Optional

from chatcrypt.core.crypto.aes_gcm import AesGcmEngine
from chatcrypt.core.crypto.algorithm import AlgorithmSpec
from chatcrypt.core.crypto.keys import Key, KeyManager, SecretKey
from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.plugins.base import EncryptionPlugin

PLUGIN_VERSION: Final[str] = "1.0.0"

_log = logging.getLogger("chatcrypt.plugins.aes")


class AesEncryptionPlugin(EncryptionPlugin):
    """
    AES-256-GCM encryption plugin.

    Usage:
        with AesEncryptionPlugin() as plugin:
            key = plugin.generate_key().result()
            result = plugin.encrypt(b"hello", key).result()
            plaintext = plugin.decrypt(result.ciphertext, result.iv, result.tag, key).result()
    """

    def __init__(self, executor: Optional[Executor] = None, max_workers: Optional[int] = None) -> None:
        self._engine = AesGcmEngine()
        super().__init__(executor, max_workers)
        _log.debug("Initialized %s v%s", self.name, self.version)

    @property
    def name(self) -> str:
        return self._engine.algorithm.name

    @property
    def version(self) -> str:
        return PLUGIN_VERSION

    @property
    def algorithm(self) -> AlgorithmSpec:
        return self._engine.algorithm

    def is_key_valid(self, key: Optional[Key]) -> bool:
        return self._engine.is_key_valid(key)

    def _check_encrypt(self, plaintext: bytes, key: Optional[Key]) -> None:
        self._engine.check_encrypt_args(plaintext, key)

    def _check_decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Optional[Key]) -> None:
        self._engine.check_decrypt_args(ciphertext, iv, tag, key)

    def _encrypt(self, plaintext: bytes, key: Key) -> EncryptionResult:
        return self._engine.encrypt(plaintext, key)

    def _decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Key) -> bytes:
        return self._engine.decrypt(ciphertext, iv, tag, key)

    def _generate_key(self) -> SecretKey:
        return KeyManager.generate_symmetric_key(self.algorithm.key_size_bits)
