"""File handles used by :class:`~pyinifile.document.IniDocument`.

A document never touches the filesystem directly.  It talks to an object
implementing :class:`FileHandle`, which reports failures by raising
:class:`OSError`.  :class:`LocalFileHandle` wraps a real file and uses
advisory locks; :class:`MemoryFileHandle` keeps the bytes in memory.
"""
from __future__ import annotations

import errno
import logging
import os
from pathlib import Path
from typing import Protocol

if os.name == "nt":  # pragma: no cover - platform specific
    import msvcrt
else:  # pragma: no cover - platform specific
    import fcntl

logger = logging.getLogger(__name__)


class FileHandle(Protocol):
    """Operations a document needs from its backing file."""

    def is_readable(self) -> bool: ...

    def is_writable(self) -> bool: ...

    def size(self) -> int: ...

    def read_all(self) -> bytes: ...

    def truncate(self, size: int = 0) -> None: ...

    def seek_to_start(self) -> None: ...

    def write(self, data: bytes) -> None: ...

    def lock_shared(self) -> None: ...

    def lock_exclusive(self) -> None: ...

    def unlock(self) -> None: ...

    def close(self) -> None: ...


class LocalFileHandle:
    """Handle over a file on disk.

    With ``writable=True`` the file is opened ``r+b``; if that is refused the
    handle falls back to ``rb`` and :meth:`is_writable` reports ``False``.
    ``blocking=False`` makes lock contention raise :class:`BlockingIOError`
    instead of waiting.
    """

    def __init__(self, path: str | os.PathLike[str], *, writable: bool = True, blocking: bool = True) -> None:
        self.path = Path(path)
        self.blocking = blocking
        fh = None
        if writable:
            try:
                fh = self.path.open("r+b")
            except PermissionError:
                logger.debug("%s is not writable, opening read-only", self.path)
        if fh is None:
            fh = self.path.open("rb")
        self._fh = fh

    def __enter__(self) -> LocalFileHandle:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LocalFileHandle({str(self.path)!r}, mode={self._fh.mode!r})"

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def is_readable(self) -> bool:
        return not self._fh.closed and self._fh.readable()

    def is_writable(self) -> bool:
        return not self._fh.closed and self._fh.writable()

    def size(self) -> int:
        return os.fstat(self._fh.fileno()).st_size

    def read_all(self) -> bytes:
        self._fh.seek(0)
        return self._fh.read()

    def truncate(self, size: int = 0) -> None:
        self._fh.truncate(size)

    def seek_to_start(self) -> None:
        self._fh.seek(0)

    def write(self, data: bytes) -> None:
        self._fh.write(data)
        self._fh.flush()

    def lock_shared(self) -> None:
        self._lock(exclusive=False)

    def lock_exclusive(self) -> None:
        self._lock(exclusive=True)

    def _lock(self, exclusive: bool) -> None:
        if os.name == "nt":  # pragma: no cover - platform specific
            self._fh.seek(0)
            if self.blocking:
                mode = msvcrt.LK_LOCK if exclusive else msvcrt.LK_RLCK
            else:
                mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
            msvcrt.locking(self._fh.fileno(), mode, 1)
        else:  # pragma: no cover - platform specific
            flags = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
            if not self.blocking:
                flags |= fcntl.LOCK_NB
            fcntl.flock(self._fh.fileno(), flags)

    def unlock(self) -> None:
        if os.name == "nt":  # pragma: no cover - platform specific
            self._fh.seek(0)
            msvcrt.locking(self._fh.fileno(), msvcrt.LK_UNLCK, 1)
        else:  # pragma: no cover - platform specific
            fcntl.flock(self._fh.fileno(), fcntl.LOCK_UN)

    def close(self) -> None:
        # Closing the descriptor also drops any lock still held on it.
        self._fh.close()


class _LockTable:
    """Shared/exclusive bookkeeping for a group of memory handles."""

    def __init__(self) -> None:
        self.holders: dict[int, str] = {}

    def acquire(self, owner: int, mode: str) -> None:
        others = {m for o, m in self.holders.items() if o != owner}
        if "exclusive" in others or (mode == "exclusive" and others):
            raise BlockingIOError(errno.EWOULDBLOCK, "resource is locked by another handle")
        self.holders[owner] = mode

    def release(self, owner: int) -> None:
        self.holders.pop(owner, None)


class MemoryFileHandle:
    """Handle over an in-memory buffer.

    Handles created with :meth:`sibling` share the buffer and the lock table,
    so they behave like two descriptors open on the same file: a shared lock
    conflicts with an exclusive one held elsewhere, and vice versa.  Locks
    never wait; a conflict raises :class:`BlockingIOError`.
    """

    def __init__(self, data: bytes = b"", *, readable: bool = True, writable: bool = True) -> None:
        self._buffer = bytearray(data)
        self._table = _LockTable()
        self._pos = 0
        self._readable = readable
        self._writable = writable
        self.closed = False

    def sibling(self, *, readable: bool = True, writable: bool = True) -> MemoryFileHandle:
        other = MemoryFileHandle(readable=readable, writable=writable)
        other._buffer = self._buffer
        other._table = self._table
        return other

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    @property
    def locked(self) -> str | None:
        """``"shared"``, ``"exclusive"`` or ``None``."""
        return self._table.holders.get(id(self))

    def _check_open(self) -> None:
        if self.closed:
            raise OSError(errno.EBADF, "handle is closed")

    def is_readable(self) -> bool:
        return not self.closed and self._readable

    def is_writable(self) -> bool:
        return not self.closed and self._writable

    def size(self) -> int:
        self._check_open()
        return len(self._buffer)

    def read_all(self) -> bytes:
        self._check_open()
        if not self._readable:
            raise OSError(errno.EBADF, "handle is not readable")
        self._pos = len(self._buffer)
        return bytes(self._buffer)

    def truncate(self, size: int = 0) -> None:
        self._check_open()
        if not self._writable:
            raise OSError(errno.EBADF, "handle is not writable")
        del self._buffer[size:]

    def seek_to_start(self) -> None:
        self._check_open()
        self._pos = 0

    def write(self, data: bytes) -> None:
        self._check_open()
        if not self._writable:
            raise OSError(errno.EBADF, "handle is not writable")
        end = self._pos + len(data)
        self._buffer[self._pos:end] = data
        self._pos = end

    def lock_shared(self) -> None:
        self._check_open()
        self._table.acquire(id(self), "shared")

    def lock_exclusive(self) -> None:
        self._check_open()
        self._table.acquire(id(self), "exclusive")

    def unlock(self) -> None:
        self._table.release(id(self))

    def close(self) -> None:
        self._table.release(id(self))
        self.closed = True
