"""
Core module - Contains configuration, logging, memory hygiene and the crypto engines.
"""

from chatcrypt.core.config import CryptoConfig
from chatcrypt.core.logging import get_secure_logger, configure_logging, SecureLogFilter

__all__ = ["CryptoConfig", "get_secure_logger", "configure_logging", "SecureLogFilter"]
