"""
Memory Zeroization Utilities
============================

Explicit wiping of transient key material.

Python offers no guarantee that every copy of a secret is erased; these
helpers wipe the buffers we own and leave the rest to scope discipline.
"""

from __future__ import annotations

import ctypes
from contextlib import contextmanager
from typing import Iterator


def secure_zero(data: bytearray | memoryview) -> None:
    """
    Securely zero a mutable byte buffer.

    Uses ctypes for a multi-pass memset on bytearrays, with a
    Python-level loop for memoryviews and as a fallback.

    Args:
        data: Mutable byte buffer to zero (bytes objects cannot be wiped)
    """
    if len(data) == 0:
        return

    if isinstance(data, memoryview):
        for i in range(len(data)):
            data[i] = 0
        return

    try:
        addr = ctypes.addressof(
            (ctypes.c_char * len(data)).from_buffer(data)
        )
        ctypes.memset(addr, 0, len(data))
        ctypes.memset(addr, 0xFF, len(data))
        ctypes.memset(addr, 0, len(data))
    except (TypeError, ValueError, BufferError):
        for i in range(len(data)):
            data[i] = 0


@contextmanager
def ZeroizeContext(*buffers: bytearray) -> Iterator[None]:
    """
    Context manager that zeroizes buffers on exit, normal or exceptional.

    Usage:
        material = bytearray(secrets.token_bytes(32))
        with ZeroizeContext(material):
            key = SecretKey(material)
        # material is now zeroed, key holds its own copy
    """
    try:
        yield
    finally:
        for buf in buffers:
            secure_zero(buf)
