"""
Plugin Registry
===============

Closed set of encryption plugins keyed by name, plus the active plugin
and session key used by a chat server connection.

Usage:
    with PluginRegistry.from_config(CryptoConfig.load()) as registry:
        key = registry.generate_key().result()
        registry.set_session_key(key)
        result = registry.encrypt(b"hello").result()
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Iterable, List, Optional

from chatcrypt.core.crypto.keys import Key
from chatcrypt.core.crypto.result import EncryptionResult
from chatcrypt.core.exceptions import (
    CryptoError,
    InvalidArgumentError,
    InvalidKeyError,
    PluginNotFoundError,
)
from chatcrypt.plugins.aes_plugin import AesEncryptionPlugin
from chatcrypt.plugins.base import EncryptionPlugin
from chatcrypt.plugins.rsa_plugin import RsaEncryptionPlugin
from chatcrypt.security.hardening import StartupSelfTest

if TYPE_CHECKING:
    from chatcrypt.core.config import CryptoConfig

_log = logging.getLogger("chatcrypt.plugins.registry")


def default_plugins(executor: Optional[Executor] = None) -> List[EncryptionPlugin]:
    """The built-in variants, in priority order."""
    return [AesEncryptionPlugin(executor), RsaEncryptionPlugin(executor)]


class PluginRegistry:
    """
    Registry of encryption plugins with an active plugin and session key.

    The first plugin (or ``default``) starts active. Active plugin and
    session key are guarded by a lock so a registry can be shared by
    connection handlers on different threads.

    Args:
        plugins: Plugins to register; the built-in variants if omitted
        default: Name of the plugin to activate first
        executor: Shared executor for the built-in variants (ignored when
            ``plugins`` is given)

    Raises:
        InvalidArgumentError: Empty plugin list or duplicate names
        PluginNotFoundError: ``default`` names no registered plugin
    """

    def __init__(
        self,
        plugins: Optional[Iterable[EncryptionPlugin]] = None,
        default: Optional[str] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        if plugins is None:
            plugins = default_plugins(executor)

        self._plugins: dict[str, EncryptionPlugin] = {}
        for plugin in plugins:
            if plugin.name in self._plugins:
                raise InvalidArgumentError(f"Duplicate plugin name: {plugin.name}")
            self._plugins[plugin.name] = plugin
            _log.info("Loaded encryption plugin: %s v%s", plugin.name, plugin.version)

        if not self._plugins:
            raise InvalidArgumentError("At least one encryption plugin is required")

        active = default if default is not None else next(iter(self._plugins))
        if active not in self._plugins:
            raise PluginNotFoundError(f"Plugin not found: {active}", details={"name": active})

        self._active_name = active
        self._session_key: Optional[Key] = None
        self._lock = threading.RLock()
        self._owned_executor: Optional[Executor] = None
        self._closed = False
        _log.info("Active encryption plugin set to: %s", active)

    @classmethod
    def from_config(cls, config: Optional["CryptoConfig"] = None) -> "PluginRegistry":
        """
        Build a registry from configuration.

        Runs the startup self-test first when ``engine.self_test_on_startup``
        is set. The built-in plugins share one executor of
        ``engine.worker_threads`` workers, owned by the registry.

        Raises:
            CryptoError: If the self-test fails
            PluginNotFoundError: If ``engine.default_plugin`` is unknown
        """
        if config is None:
            from chatcrypt.core.config import CryptoConfig
            config = CryptoConfig.get_instance()

        engine = config.engine
        if engine.self_test_on_startup and not StartupSelfTest().run():
            raise CryptoError("Cryptographic self-test failed; refusing to start")

        executor = ThreadPoolExecutor(
            max_workers=engine.worker_threads,
            thread_name_prefix="chatcrypt-worker",
        )
        try:
            registry = cls(default=engine.default_plugin, executor=executor)
        except CryptoError:
            executor.shutdown(wait=False)
            raise
        registry._owned_executor = executor
        return registry

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, name: str) -> Optional[EncryptionPlugin]:
        """Plugin registered under name, or None."""
        return self._plugins.get(name)

    def names(self) -> List[str]:
        return list(self._plugins)

    def plugins(self) -> List[EncryptionPlugin]:
        return list(self._plugins.values())

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    # =========================================================================
    # Active plugin and session key
    # =========================================================================

    @property
    def active_plugin(self) -> EncryptionPlugin:
        with self._lock:
            return self._plugins[self._active_name]

    @property
    def active_plugin_name(self) -> str:
        with self._lock:
            return self._active_name

    def set_active_plugin(self, name: str) -> None:
        """
        Switch the active plugin.

        A session key the new plugin does not accept is dropped.

        Raises:
            PluginNotFoundError: If no plugin has that name
        """
        if name not in self._plugins:
            raise PluginNotFoundError(f"Plugin not found: {name}", details={"name": name})

        with self._lock:
            self._active_name = name
            if self._session_key is not None and not self._plugins[name].is_key_valid(self._session_key):
                self._session_key = None
                _log.warning("Session key cleared: not valid for plugin %s", name)
        _log.info("Active encryption plugin changed to: %s", name)

    @property
    def session_key(self) -> Optional[Key]:
        with self._lock:
            return self._session_key

    def set_session_key(self, key: Optional[Key]) -> None:
        """
        Set (or clear, with None) the session key.

        Raises:
            InvalidKeyError: If the active plugin rejects the key
        """
        with self._lock:
            if key is not None and not self._plugins[self._active_name].is_key_valid(key):
                raise InvalidKeyError(f"Session key is not valid for plugin {self._active_name}")
            self._session_key = key
        _log.debug("Active session key updated")

    @property
    def is_encryption_enabled(self) -> bool:
        with self._lock:
            return self._session_key is not None

    # =========================================================================
    # Delegated operations
    # =========================================================================

    def generate_key(self) -> "Future[Key]":
        """Generate a key with the active plugin."""
        plugin = self.active_plugin
        _log.debug("Generating new key using plugin: %s", plugin.name)
        return plugin.generate_key()

    def encrypt(self, plaintext: bytes) -> "Future[EncryptionResult]":
        """
        Encrypt with the active plugin and session key.

        Raises:
            InvalidKeyError: If no session key is set
        """
        plugin, key = self._active_with_key()
        return plugin.encrypt(plaintext, key)

    def decrypt(self, ciphertext: bytes, iv: bytes, tag: bytes) -> "Future[bytes]":
        """
        Decrypt with the active plugin and session key.

        Raises:
            InvalidKeyError: If no session key is set
        """
        plugin, key = self._active_with_key()
        return plugin.decrypt(ciphertext, iv, tag, key)

    def _active_with_key(self) -> tuple[EncryptionPlugin, Key]:
        with self._lock:
            if self._session_key is None:
                raise InvalidKeyError("No active session key set")
            return self._plugins[self._active_name], self._session_key

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close every plugin and the registry-owned executor."""
        if self._closed:
            return
        self._closed = True
        for plugin in self._plugins.values():
            plugin.close()
        if self._owned_executor is not None:
            self._owned_executor.shutdown(wait=True)
        _log.debug("Plugin registry closed")

    def __enter__(self) -> "PluginRegistry":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PluginRegistry(plugins={self.names()!r}, active={self._active_name!r})"
