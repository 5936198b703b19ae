"""
Secure Memory Buffers
=====================

Backing storage for symmetric key material.

Security Properties:
- Explicit zeroization on wipe(), context exit and finalization
- Best-effort page locking so key pages are not swapped out; locks are
  reference-counted per page, so buffers sharing a page do not unlock
  each other

Limitations:
- Every cipher call hands the cryptography library a short-lived bytes
  copy; only the buffer owned here is guaranteed to be zeroed
"""

from __future__ import annotations

import ctypes
import ctypes.util
import mmap
import platform
import threading
from typing import Callable, Final, Optional

from chatcrypt.core.memory.zeroization import secure_zero

MAX_BUFFER_SIZE: Final[int] = 1024 * 1024  # 1 MB, far above any key

_PageOp = Callable[[int, int], bool]


def _load_page_ops() -> tuple[Optional[_PageOp], Optional[_PageOp]]:
    """Resolve (lock, unlock) for this platform, or (None, None)."""
    system = platform.system()
    try:
        if system == "Windows":
            kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]

            def lock(address: int, size: int) -> bool:
                return bool(kernel32.VirtualLock(ctypes.c_void_p(address), ctypes.c_size_t(size)))

            def unlock(address: int, size: int) -> bool:
                return bool(kernel32.VirtualUnlock(ctypes.c_void_p(address), ctypes.c_size_t(size)))

            return lock, unlock

        if system in ("Linux", "Darwin"):
            libc = ctypes.CDLL(ctypes.util.find_library("c"), use_errno=True)

            def lock(address: int, size: int) -> bool:
                return libc.mlock(ctypes.c_void_p(address), ctypes.c_size_t(size)) == 0

            def unlock(address: int, size: int) -> bool:
                return libc.munlock(ctypes.c_void_p(address), ctypes.c_size_t(size)) == 0

            return lock, unlock
    except (OSError, AttributeError):
        pass
    return None, None


_page_lock, _page_unlock = _load_page_ops()

PAGE_SIZE: Final[int] = mmap.PAGESIZE

# mlock does not nest: one munlock releases a page for every buffer on it.
# Pages are counted here and only locked on first use, unlocked on last.
_page_refs: dict[int, int] = {}
# Reentrant: a finalizer may release pages while this thread holds the lock
_page_refs_lock = threading.RLock()


def _page_range(address: int, size: int) -> range:
    return range(address // PAGE_SIZE, (address + size - 1) // PAGE_SIZE + 1)


def _acquire_pages(pages: range) -> bool:
    """Reference every page in the range, locking pages not yet held."""
    with _page_refs_lock:
        newly_locked: list[int] = []
        for page in pages:
            if _page_refs.get(page, 0) == 0:
                if not _page_lock(page * PAGE_SIZE, PAGE_SIZE):
                    for locked in newly_locked:
                        _page_unlock(locked * PAGE_SIZE, PAGE_SIZE)
                    return False
                newly_locked.append(page)
        for page in pages:
            _page_refs[page] = _page_refs.get(page, 0) + 1
        return True


def _release_pages(pages: range) -> None:
    with _page_refs_lock:
        for page in pages:
            count = _page_refs.get(page, 0) - 1
            if count > 0:
                _page_refs[page] = count
                continue
            _page_refs.pop(page, None)
            _page_unlock(page * PAGE_SIZE, PAGE_SIZE)


def locked_page_count(page: int) -> int:
    """Number of live buffers holding a lock on the given page."""
    with _page_refs_lock:
        return _page_refs.get(page, 0)


class SecureBuffer:
    """
    Fixed-size byte buffer that is zeroed when released.

    Usage:
        with SecureBuffer.from_bytes(material) as buf:
            use(buf.data)
        # buffer is now zeroed

    ``data`` returns a bytes copy; keep its scope short. wipe() is
    idempotent and safe to call while other threads read ``data``:
    a reader sees either the full content or ValueError, never a
    partially zeroed copy.
    """

    __slots__ = ("_buffer", "_wiped", "_pages", "_lock", "__weakref__")

    def __init__(self, size: int, lock_memory: bool = True) -> None:
        if size < 0:
            raise ValueError("Buffer size cannot be negative")
        if size > MAX_BUFFER_SIZE:
            raise ValueError(f"Buffer too large (max {MAX_BUFFER_SIZE})")

        self._buffer = bytearray(size)
        self._wiped = False
        self._lock = threading.Lock()
        self._pages: Optional[range] = None
        if lock_memory and size and _page_lock is not None and _page_unlock is not None:
            self._lock_pages()

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview, lock_memory: bool = True) -> "SecureBuffer":
        """Copy data into a new buffer. The caller still owns (and should wipe) the source."""
        buf = cls(len(data), lock_memory=lock_memory)
        buf._buffer[:] = data
        return buf

    def _lock_pages(self) -> None:
        # The bytearray is never resized, so its address is stable
        view = (ctypes.c_char * len(self._buffer)).from_buffer(self._buffer)
        try:
            pages = _page_range(ctypes.addressof(view), len(self._buffer))
        finally:
            del view
        try:
            if _acquire_pages(pages):
                self._pages = pages
        except OSError:
            self._pages = None

    @property
    def size(self) -> int:
        return len(self._buffer)

    @property
    def data(self) -> bytes:
        """
        Buffer content as bytes.

        Raises:
            ValueError: If the buffer has been wiped
        """
        with self._lock:
            if self._wiped:
                raise ValueError("Buffer has been wiped")
            return bytes(self._buffer)

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    @property
    def is_locked(self) -> bool:
        return self._pages is not None

    @property
    def pages(self) -> Optional[range]:
        """Page numbers this buffer holds locked, or None."""
        return self._pages

    def wipe(self) -> None:
        """Zero the buffer and release its page locks."""
        with self._lock:
            if self._wiped:
                return
            self._wiped = True
            secure_zero(self._buffer)
            pages, self._pages = self._pages, None
        if pages is not None:
            _release_pages(pages)

    def __enter__(self) -> "SecureBuffer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __del__(self) -> None:
        # Interpreter shutdown may have torn down ctypes already
        try:
            self.wipe()
        except Exception:
            pass

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        if self._wiped:
            return "SecureBuffer(WIPED)"
        return f"SecureBuffer(size={self.size}, locked={self.is_locked})"
