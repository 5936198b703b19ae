"""
Encryption Plugin Contract
==========================

Uniform, future-returning surface over the cipher engines.

Every operation validates its arguments on the calling thread and
raises immediately; only validated work is scheduled on the plugin's
executor. The returned ``concurrent.futures.Future`` resolves to the
result or carries the engine's CryptoError.

Cancellation is advisory: ``Future.cancel()`` only stops calls that have
not started yet. Timeouts belong to the caller (``future.result(timeout)``).
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from chatcrypt.core.crypto.algorithm import AlgorithmSpec
from chatcrypt.core.crypto.keys import Key
from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.core.exceptions import CryptoError

T = TypeVar("T")

_log = logging.getLogger("chatcrypt.plugins")


class EncryptionPlugin(ABC):
    """
    Base class for cipher variants.

    Subclasses provide identity (``name``, ``version``, ``algorithm``),
    the synchronous validity predicate and four hooks: argument checks
    for encrypt and decrypt, and the blocking transforms themselves.

    Args:
        executor: Shared executor to schedule work on. When omitted the
            plugin creates and owns a ThreadPoolExecutor.
        max_workers: Worker count for an owned executor.
    """

    def __init__(self, executor: Optional[Executor] = None, max_workers: Optional[int] = None) -> None:
        if executor is None:
            prefix = "chatcrypt-" + self.name.lower().replace("-", "")
            self._executor: Executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix=prefix,
            )
            self._owns_executor = True
        else:
            self._executor = executor
            self._owns_executor = False
        self._closed = False

    # =========================================================================
    # Identity
    # =========================================================================

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique plugin name, e.g. "AES-256-GCM"."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Plugin version string."""

    @property
    @abstractmethod
    def algorithm(self) -> AlgorithmSpec:
        """Cipher parameters this plugin implements."""

    @abstractmethod
    def is_key_valid(self, key: Optional[Key]) -> bool:
        """Synchronous, side-effect free key check."""

    # =========================================================================
    # Hooks
    # =========================================================================

    @abstractmethod
    def _check_encrypt(self, plaintext: bytes, key: Optional[Key]) -> None:
        ...

    @abstractmethod
    def _check_decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Optional[Key]) -> None:
        ...

    @abstractmethod
    def _encrypt(self, plaintext: bytes, key: Key) -> EncryptionResult:
        ...

    @abstractmethod
    def _decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Key) -> bytes:
        ...

    @abstractmethod
    def _generate_key(self) -> Key:
        ...

    # =========================================================================
    # Operations
    # =========================================================================

    def encrypt(self, plaintext: bytes, key: Key) -> "Future[EncryptionResult]":
        """
        Encrypt plaintext with key.

        Returns:
            Future resolving to an EncryptionResult

        Raises:
            InvalidArgumentError / InvalidKeyError: Synchronously, on bad input
        """
        self._check_encrypt(plaintext, key)
        _log.debug("%s: scheduling encryption of %d bytes", self.name, len(plaintext))
        return self._submit(self._encrypt, plaintext, key)

    def decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Key) -> "Future[bytes]":
        """
        Decrypt ciphertext with key.

        Returns:
            Future resolving to the plaintext, or failing with
            AuthenticationFailure / DecryptionError

        Raises:
            InvalidArgumentError / InvalidKeyError: Synchronously, on bad input
        """
        self._check_decrypt(ciphertext, iv, tag, key)
        _log.debug("%s: scheduling decryption of %d bytes", self.name, len(ciphertext))
        return self._submit(self._decrypt, ciphertext, iv, tag, key)

    def generate_key(self) -> "Future[Key]":
        """Generate a fresh key for this algorithm."""
        _log.debug("%s: scheduling key generation", self.name)
        return self._submit(self._generate_key)

    def encrypt_combined(self, plaintext: bytes, key: Key) -> "Future[bytes]":
        """Encrypt and frame the result as ``iv || tag || ciphertext``."""
        self._check_encrypt(plaintext, key)
        return self._submit(lambda: self._encrypt(plaintext, key).combine())

    def decrypt_combined(self, combined: bytes, key: Key) -> "Future[bytes]":
        """
        Split a combined blob using this plugin's IV/tag sizes and decrypt it.

        Raises:
            MalformedPayloadError: Synchronously, if the blob is too short
        """
        spec = self.algorithm
        result = EncryptionResult.split(combined, spec.iv_size_bytes, spec.tag_size_bytes)
        return self.decrypt(result.ciphertext, result.iv, result.tag, key)

    # asyncio adapters

    async def encrypt_async(self, plaintext: bytes, key: Key) -> EncryptionResult:
        return await asyncio.wrap_future(self.encrypt(plaintext, key))

    async def decrypt_async(self, ciphertext: bytes, iv: bytes, tag: bytes, key: Key) -> bytes:
        return await asyncio.wrap_future(self.decrypt(ciphertext, iv, tag, key))

    async def generate_key_async(self) -> Key:
        return await asyncio.wrap_future(self.generate_key())

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop accepting work. Shuts down the executor if the plugin owns it."""
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        _log.debug("%s: closed", self.name)

    def __enter__(self) -> "EncryptionPlugin":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _submit(self, fn: Callable[..., T], *args: Any) -> "Future[T]":
        if self._closed:
            raise CryptoError(f"Plugin {self.name} is closed")
        try:
            return self._executor.submit(fn, *args)
        except RuntimeError as exc:
            # Shared executor shut down underneath us
            raise CryptoError(f"Plugin {self.name} cannot schedule work") from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, version={self.version!r})"
