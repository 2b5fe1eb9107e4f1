import os
from pathlib import Path

import pytest

from pyinifile.handle import LocalFileHandle, MemoryFileHandle


def test_local_handle_read_write(tmp_path: Path):
    path = tmp_path / "cfg.ini"
    path.write_bytes(b"old content")
    with LocalFileHandle(path) as handle:
        assert handle.is_readable()
        assert handle.is_writable()
        assert handle.size() == 11
        assert handle.read_all() == b"old content"
        handle.lock_exclusive()
        handle.seek_to_start()
        handle.truncate(0)
        handle.write(b"new")
        handle.unlock()
    assert handle.closed
    assert path.read_bytes() == b"new"


def test_local_handle_read_only(tmp_path: Path):
    path = tmp_path / "cfg.ini"
    path.write_bytes(b"x")
    with LocalFileHandle(path, writable=False) as handle:
        assert handle.is_readable()
        assert not handle.is_writable()
        with pytest.raises(OSError):
            handle.write(b"y")


@pytest.mark.skipif(os.name == "nt", reason="flock semantics")
def test_local_handle_nonblocking_contention(tmp_path: Path):
    path = tmp_path / "cfg.ini"
    path.write_bytes(b"")
    with LocalFileHandle(path) as holder, LocalFileHandle(path, blocking=False) as other:
        holder.lock_exclusive()
        with pytest.raises(BlockingIOError):
            other.lock_shared()
        holder.unlock()
        other.lock_shared()
        other.unlock()


@pytest.mark.skipif(os.name == "nt", reason="flock semantics")
def test_local_handle_shared_locks_coexist(tmp_path: Path):
    path = tmp_path / "cfg.ini"
    path.write_bytes(b"")
    with LocalFileHandle(path) as first, LocalFileHandle(path, blocking=False) as second:
        first.lock_shared()
        second.lock_shared()
        with pytest.raises(BlockingIOError):
            second.lock_exclusive()
        first.unlock()
        second.unlock()


def test_local_handle_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        LocalFileHandle(tmp_path / "missing.ini")


def test_memory_handle_round_trip():
    handle = MemoryFileHandle(b"abcdef")
    assert handle.size() == 6
    assert handle.read_all() == b"abcdef"
    handle.seek_to_start()
    handle.truncate(0)
    handle.write(b"xy")
    assert handle.getvalue() == b"xy"


def test_memory_handle_lock_table():
    first = MemoryFileHandle(b"data")
    second = first.sibling()
    first.lock_shared()
    second.lock_shared()
    assert first.locked == "shared"
    with pytest.raises(BlockingIOError):
        second.lock_exclusive()
    first.unlock()
    second.lock_exclusive()
    assert second.locked == "exclusive"
    with pytest.raises(BlockingIOError):
        first.lock_shared()
    second.unlock()
    assert first.locked is None and second.locked is None


def test_memory_handle_sibling_shares_buffer():
    first = MemoryFileHandle(b"one")
    second = first.sibling()
    second.seek_to_start()
    second.truncate(0)
    second.write(b"two")
    assert first.read_all() == b"two"


def test_memory_handle_read_only_rejects_write():
    handle = MemoryFileHandle(b"x", writable=False)
    assert not handle.is_writable()
    with pytest.raises(OSError):
        handle.write(b"y")
    with pytest.raises(OSError):
        handle.truncate(0)


def test_memory_handle_close_releases_lock():
    handle = MemoryFileHandle()
    other = handle.sibling()
    handle.lock_exclusive()
    handle.close()
    assert not handle.is_readable()
    other.lock_exclusive()
    with pytest.raises(OSError):
        handle.size()
