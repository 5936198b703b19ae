"""
ChatCrypt - Memory hygiene tests.
"""

import threading

import pytest

from chatcrypt.core.memory import SecureBuffer, ZeroizeContext, secure_memory, secure_zero


def test_secure_zero_bytearray():
    data = bytearray(b"sensitive")
    secure_zero(data)
    assert data == bytearray(len(b"sensitive"))


def test_zeroize_context():
    first = bytearray(b"one")
    second = bytearray(b"two")
    with ZeroizeContext(first, second):
        assert first == bytearray(b"one")
    assert first == bytearray(3)
    assert second == bytearray(3)


def test_zeroize_context_on_exception():
    data = bytearray(b"secret")
    with pytest.raises(RuntimeError):
        with ZeroizeContext(data):
            raise RuntimeError("boom")
    assert data == bytearray(6)


def test_secure_buffer_round_trip():
    buf = SecureBuffer.from_bytes(b"key material")
    assert buf.data == b"key material"
    assert len(buf) == 12
    assert buf.size == 12


def test_secure_buffer_wipe():
    buf = SecureBuffer.from_bytes(b"key material")
    buf.wipe()
    assert buf.is_wiped
    assert not buf.is_locked
    with pytest.raises(ValueError):
        _ = buf.data
    buf.wipe()


def test_secure_buffer_context_manager():
    with SecureBuffer.from_bytes(b"abc") as buf:
        assert buf.data == b"abc"
    assert buf.is_wiped


def test_secure_buffer_repr_hides_content():
    buf = SecureBuffer.from_bytes(b"topsecret")
    assert "topsecret" not in repr(buf)
    buf.wipe()
    assert repr(buf) == "SecureBuffer(WIPED)"


def test_secure_buffer_size_limits():
    with pytest.raises(ValueError):
        SecureBuffer(-1)
    with pytest.raises(ValueError):
        SecureBuffer(2 * 1024 * 1024)


@pytest.fixture
def recorded_page_ops(monkeypatch):
    """Replace the OS page lock calls with recorders that always succeed."""
    calls = []

    def lock(address, size):
        calls.append(("lock", address // size))
        return True

    def unlock(address, size):
        calls.append(("unlock", address // size))
        return True

    monkeypatch.setattr(secure_memory, "_page_lock", lock)
    monkeypatch.setattr(secure_memory, "_page_unlock", unlock)
    return calls


def test_shared_page_stays_locked_until_last_release(recorded_page_ops):
    """Two holders of one page: only the last release unlocks it."""
    page = 10 ** 12
    first = range(page, page + 1)
    second = range(page, page + 2)

    assert secure_memory._acquire_pages(first)
    assert secure_memory._acquire_pages(second)
    assert secure_memory.locked_page_count(page) == 2
    assert recorded_page_ops == [("lock", page), ("lock", page + 1)]

    secure_memory._release_pages(first)
    assert secure_memory.locked_page_count(page) == 1
    assert ("unlock", page) not in recorded_page_ops
    assert ("unlock", page + 1) not in recorded_page_ops

    secure_memory._release_pages(second)
    assert secure_memory.locked_page_count(page) == 0
    assert secure_memory.locked_page_count(page + 1) == 0
    assert recorded_page_ops[2:] == [("unlock", page), ("unlock", page + 1)]


def test_failed_page_lock_rolls_back(monkeypatch):
    page = 10 ** 12 + 100
    unlocked = []
    monkeypatch.setattr(secure_memory, "_page_lock", lambda address, size: address // size == page)
    monkeypatch.setattr(secure_memory, "_page_unlock", lambda address, size: unlocked.append(address // size) or True)

    assert not secure_memory._acquire_pages(range(page, page + 2))
    assert unlocked == [page]
    assert secure_memory.locked_page_count(page) == 0


def test_wiping_one_buffer_keeps_neighbour_pages_locked(recorded_page_ops):
    first = SecureBuffer.from_bytes(b"a" * 32)
    second = SecureBuffer.from_bytes(b"b" * 32)
    assert first.is_locked and second.is_locked
    first_pages, second_pages = set(first.pages), set(second.pages)
    held = {page: secure_memory.locked_page_count(page) for page in second_pages}

    first.wipe()

    for page in second_pages:
        assert secure_memory.locked_page_count(page) == held[page] - (page in first_pages)
        assert secure_memory.locked_page_count(page) >= 1
        assert ("unlock", page) not in recorded_page_ops

    second.wipe()
    assert second.pages is None
    for page in second_pages:
        assert secure_memory.locked_page_count(page) == held[page] - (page in first_pages) - 1


def test_secure_buffer_wipe_during_concurrent_reads():
    content = b"\x5a" * 64
    buf = SecureBuffer.from_bytes(content, lock_memory=False)
    start = threading.Barrier(3)
    seen = []

    def reader():
        start.wait()
        for _ in range(500):
            try:
                seen.append(buf.data)
            except ValueError:
                seen.append(None)

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    start.wait()
    buf.wipe()
    for thread in threads:
        thread.join(timeout=10)

    assert set(seen) <= {content, None}
