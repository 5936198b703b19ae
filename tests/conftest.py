"""
Pytest configuration and fixtures for ChatCrypt tests.

Provides shared keys, plugins and a registry with clean executors.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from chatcrypt.core.config import CryptoConfig
from chatcrypt.core.crypto.keys import KeyManager, KeyPair, SecretKey
from chatcrypt.plugins import AesEncryptionPlugin, PluginRegistry, RsaEncryptionPlugin


@pytest.fixture(scope="session")
def rsa_key_pair() -> KeyPair:
    """
    RSA-4096 key pair shared by the whole session.

    Generation takes seconds, so tests reuse this pair.
    """
    return KeyManager.generate_asymmetric_key_pair(4096)


@pytest.fixture(scope="session")
def small_rsa_key_pair() -> KeyPair:
    """RSA-2048 pair for tests that do not depend on the modulus size."""
    return KeyManager.generate_asymmetric_key_pair(2048)


@pytest.fixture
def aes_key() -> Generator[SecretKey, None, None]:
    """Fresh AES-256 key, wiped after the test."""
    key = KeyManager.generate_symmetric_key()
    yield key
    key.wipe()


@pytest.fixture
def aes_plugin() -> Generator[AesEncryptionPlugin, None, None]:
    plugin = AesEncryptionPlugin(max_workers=2)
    yield plugin
    plugin.close()


@pytest.fixture
def rsa_plugin() -> Generator[RsaEncryptionPlugin, None, None]:
    plugin = RsaEncryptionPlugin(max_workers=2)
    yield plugin
    plugin.close()


@pytest.fixture
def registry() -> Generator[PluginRegistry, None, None]:
    """Registry with the built-in plugins, each owning its executor."""
    reg = PluginRegistry()
    yield reg
    reg.close()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for log files.

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp(prefix="chatcrypt_test_"))
    try:
        yield tmp
    finally:
        shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Generator[None, None, None]:
    """Keep CryptoConfig.get_instance() from leaking between tests."""
    CryptoConfig.reset_instance()
    yield
    CryptoConfig.reset_instance()
