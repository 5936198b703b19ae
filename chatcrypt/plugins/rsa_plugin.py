"""
RSA-4096 plugin.

Asymmetric variant using OAEP with SHA-256 and MGF1(SHA-256). Results
carry no IV or tag; decrypt() ignores both arguments.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from typing import Final, Optional

from chatcrypt.core.crypto.algorithm import AlgorithmSpec
from chatcrypt.core.crypto.keys import Key, KeyPair, PublicKey
from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.core.crypto.rsa_oaep import RSA_KEY_SIZE, RsaEngine
from chatcrypt.plugins.base import EncryptionPlugin

PLUGIN_VERSION: Final[str] = "1.0.0"

_log = logging.getLogger("chatcrypt.plugins.rsa")


class RsaEncryptionPlugin(EncryptionPlugin):
    """
    RSA-4096 encryption plugin.

    generate_key() resolves to the public half only, since that is the
    part a peer needs to encrypt to us. Use generate_key_pair() to keep
    the private half.

    Args:
        executor: Shared executor (optional)
        max_workers: Worker count for an owned executor
        key_size: Modulus size for generated pairs
    """

    def __init__(
        self,
        executor: Optional[Executor] = None,
        max_workers: Optional[int] = None,
        key_size: int = RSA_KEY_SIZE,
    ) -> None:
        self._engine = RsaEngine(key_size)
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
        self._engine.check_decrypt_args(ciphertext, key)

    def _encrypt(self, plaintext: bytes, key: Key) -> EncryptionResult:
        return self._engine.encrypt(plaintext, key)

    def _decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Key) -> bytes:
        return self._engine.decrypt(ciphertext, iv, tag, key)

    def _generate_key(self) -> PublicKey:
        return self._engine.generate_key_pair().public

    def generate_key_pair(self) -> "Future[KeyPair]":
        """Generate a full RSA key pair."""
        _log.debug("%s: scheduling key pair generation", self.name)
        return self._submit(self._engine.generate_key_pair)
