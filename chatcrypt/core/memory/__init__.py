"""
chatcrypt Memory Security Module
================================

Provides secure memory handling primitives for key material.

Components:
- secure_memory.py: Zeroizable, page-locked buffers
- zeroization.py: Memory wiping utilities

WARNING:
- Python's memory model doesn't guarantee secure erasure
- These are best-effort mitigations
"""

from chatcrypt.core.memory.zeroization import secure_zero, ZeroizeContext
from chatcrypt.core.memory.secure_memory import SecureBuffer

__all__ = [
    "SecureBuffer",
    "secure_zero",
    "ZeroizeContext",
]
