"""
Encryption plugins.

Each plugin wraps one cipher engine behind the same future-returning
contract; PluginRegistry holds the closed set of built-in variants.
"""

from chatcrypt.plugins.base import EncryptionPlugin
from chatcrypt.plugins.aes_plugin import AesEncryptionPlugin
from chatcrypt.plugins.rsa_plugin import RsaEncryptionPlugin
from chatcrypt.plugins.registry import PluginRegistry, default_plugins

__all__ = [
    "EncryptionPlugin",
    "AesEncryptionPlugin",
    "RsaEncryptionPlugin",
    "PluginRegistry",
    "default_plugins",
]
