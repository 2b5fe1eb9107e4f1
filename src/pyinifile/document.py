"""The in-memory INI document and its file lifecycle.

:class:`IniDocument` reads a file through a :class:`~pyinifile.handle.FileHandle`
under a shared lock, keeps the parsed data in memory and writes it back under
an exclusive lock on :meth:`IniDocument.save`.
"""
from __future__ import annotations

import codecs
import logging
import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from .codec import (
    FALSE_WORDS,
    NEWLINES,
    TRUE_WORDS,
    Document,
    ScannerMode,
    Section,
    ValidationResult,
    Value,
    parse,
    serialize,
    to_text,
    trim,
    validate_key_name,
    validate_section_name,
    validate_value,
)
from .errors import (
    FileLockFailedError,
    FileNotExistError,
    FileNotReadableError,
    FileNotWritableError,
    FileReadWriteFailedError,
    InvalidParameterError,
    ReadOnlyModeError,
)
from .handle import FileHandle, LocalFileHandle

logger = logging.getLogger(__name__)


class _Missing:
    """Type of :data:`MISSING`."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Returned by lookups when an entry does not exist.  ``None``, ``""``, ``0``
# and ``False`` are all storable values, so none of them can mean "absent".
MISSING = _Missing()


def _require(result: ValidationResult, parameter: str) -> None:
    if not result:
        raise InvalidParameterError(parameter, result.reason or "failed validation")


class IniDocument:
    """An INI file loaded into memory.

    The document owns an ordered ``section -> key -> value`` mapping and the
    :class:`~pyinifile.handle.FileHandle` it was read from.  Lookups work on
    the in-memory copy; mutations are validated before they are stored and
    only reach the file on :meth:`save`.

    Values read from the file are coerced according to ``scanner_mode``.
    Values set through :meth:`set_entry` or :meth:`set_section` are stored as
    text and stay text until the next :meth:`reload`.

    A document opened with ``read_only=True`` rejects every mutation and
    :meth:`save` with :class:`~pyinifile.errors.ReadOnlyModeError`.
    """

    def __init__(
        self,
        handle: FileHandle,
        *,
        read_only: bool = False,
        scanner_mode: ScannerMode | str = ScannerMode.TYPED,
        newline: str = "\n",
        encoding: str = "utf-8",
    ) -> None:
        self._mode = ScannerMode.coerce(scanner_mode)
        if newline not in NEWLINES:
            raise InvalidParameterError("newline", f"{newline!r} is not one of {NEWLINES!r}")
        try:
            codecs.lookup(encoding)
        except LookupError as exc:
            raise InvalidParameterError("encoding", f"{encoding!r} is not a known codec") from exc
        if not handle.is_readable():
            raise FileNotReadableError("file handle is not readable")
        self._handle = handle
        self._read_only = bool(read_only)
        self._newline = newline
        self._encoding = encoding
        self._closed = False
        self._data: Document = {}
        self.reload()

    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        read_only: bool = False,
        scanner_mode: ScannerMode | str = ScannerMode.TYPED,
        *,
        newline: str = "\n",
        encoding: str = "utf-8",
        blocking: bool = True,
    ) -> IniDocument:
        """Open and parse the INI file at *path*.

        Raises:
            FileNotExistError: *path* is not an existing file.
            InvalidParameterError: *scanner_mode*, *newline* or *encoding* is
                not recognised.
            FileNotReadableError: The file cannot be opened for reading.
            FileLockFailedError, FileReadWriteFailedError, IniParseError:
                The initial load failed, see :meth:`reload`.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotExistError(f"file {str(path)!r} does not exist")
        mode = ScannerMode.coerce(scanner_mode)
        try:
            handle = LocalFileHandle(path, writable=not read_only, blocking=blocking)
        except OSError as exc:
            raise FileNotReadableError(f"cannot open {str(path)!r} for reading: {exc}") from exc
        try:
            return cls(
                handle,
                read_only=read_only,
                scanner_mode=mode,
                newline=newline,
                encoding=encoding,
            )
        except BaseException:
            handle.close()
            raise

    def __enter__(self) -> IniDocument:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        flags = " read-only" if self._read_only else ""
        return f"<IniDocument {self._handle!r} {self._mode.value}{flags}>"

    def close(self) -> None:
        """Close the underlying handle.  Further :meth:`reload`/:meth:`save` calls fail."""
        if not self._closed:
            self._closed = True
            self._handle.close()

    # ----- properties -----

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def scanner_mode(self) -> ScannerMode:
        return self._mode

    @property
    def newline(self) -> str:
        return self._newline

    @property
    def encoding(self) -> str:
        return self._encoding

    # ----- file access -----

    def _ensure_open(self) -> None:
        if self._closed:
            raise FileReadWriteFailedError("document is closed")

    def _check_writable(self) -> None:
        if self._read_only:
            raise ReadOnlyModeError("document was opened read-only")

    @contextmanager
    def _locked(self, *, exclusive: bool) -> Iterator[None]:
        kind = "exclusive" if exclusive else "shared"
        try:
            if exclusive:
                self._handle.lock_exclusive()
            else:
                self._handle.lock_shared()
        except OSError as exc:
            raise FileLockFailedError(f"failed to acquire a {kind} file lock: {exc}") from exc
        try:
            yield
        except BaseException:
            # The body's error is the one reported; a failed unlock here
            # must not replace it.
            try:
                self._handle.unlock()
            except OSError:
                pass
            raise
        try:
            self._handle.unlock()
        except OSError as exc:
            raise FileLockFailedError(f"failed to release the {kind} file lock: {exc}") from exc

    def reload(self) -> None:
        """Re-read the file, replacing the in-memory data.

        Unsaved changes are lost.  The shared lock is held only while the
        bytes are read, not while they are parsed.

        Raises:
            FileLockFailedError: The shared lock could not be acquired.
            FileReadWriteFailedError: The content could not be read or decoded.
            IniParseError: The content is not valid INI.
        """
        self._ensure_open()
        with self._locked(exclusive=False):
            try:
                raw = self._handle.read_all() if self._handle.size() else b""
            except OSError as exc:
                raise FileReadWriteFailedError(f"failed to read data from file: {exc}") from exc
        try:
            text = raw.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise FileReadWriteFailedError(f"file is not valid {self._encoding}: {exc}") from exc
        self._data = parse(text, self._mode) if text else {}
        logger.debug(
            "loaded %d section(s) from %r in %s mode",
            len(self._data),
            self._handle,
            self._mode.value,
        )

    def save(self) -> None:
        """Write the in-memory data back to the file.

        The exclusive lock spans truncating and writing.  If the write fails
        after the truncate the file is left short; nothing is restored.

        Raises:
            ReadOnlyModeError: The document is read-only.
            FileNotWritableError: The handle was not opened for writing.
            FileLockFailedError: The exclusive lock could not be acquired.
            FileReadWriteFailedError: Truncating or writing failed.
        """
        self._check_writable()
        self._ensure_open()
        if not self._handle.is_writable():
            raise FileNotWritableError("file is not writable; was it opened read-only?")
        try:
            payload = self.dumps().encode(self._encoding)
        except UnicodeEncodeError as exc:
            raise FileReadWriteFailedError(f"data cannot be encoded as {self._encoding}: {exc}") from exc
        with self._locked(exclusive=True):
            try:
                self._handle.seek_to_start()
                self._handle.truncate(0)
            except OSError as exc:
                raise FileReadWriteFailedError(f"failed to clear current data: {exc}") from exc
            try:
                self._handle.write(payload)
            except OSError as exc:
                raise FileReadWriteFailedError(f"failed to write data to file: {exc}") from exc
        logger.debug("saved %d byte(s) to %r", len(payload), self._handle)

    def dumps(self) -> str:
        """Return the text :meth:`save` would write."""
        return serialize(self._data, self._newline)

    # ----- lookups -----

    def fetch_all(self) -> Document:
        """Return a copy of every section."""
        return {name: dict(entries) for name, entries in self._data.items()}

    def sections(self) -> list[str]:
        return list(self._data)

    def has_section(self, section: str) -> bool:
        return trim(section) in self._data

    def has_entry(self, section: str, key: str) -> bool:
        return self.fetch_entry(section, key) is not MISSING

    def fetch_section(self, section: str) -> Section | None:
        """Return a copy of *section*, or ``None`` if it does not exist."""
        entries = self._data.get(trim(section))
        if entries is None:
            return None
        return dict(entries)

    def fetch_entry(self, section: str, key: str, default: Value | _Missing = MISSING) -> Value | _Missing:
        """Return the value stored under *section*/*key*, or *default*.

        The default is :data:`MISSING`, which is distinct from every value a
        document can hold, so ``None``, ``""`` or ``0`` coming back always
        means the entry exists.
        """
        entries = self._data.get(trim(section))
        if entries is None:
            return default
        return entries.get(trim(key), default)

    # ----- typed helper getters -----

    def _typed_value(self, section: str, key: str) -> Value | _Missing:
        value = self.fetch_entry(section, key)
        # An explicit null is treated like an absent entry here.
        return MISSING if value is None else value

    def _not_convertible(self, section: str, key: str, value: Value, expected: str) -> InvalidParameterError:
        return InvalidParameterError("value", f"[{trim(section)}] {trim(key)}={value!r} is not {expected}")

    def fetch_int(self, section: str, key: str, default: int | None = None) -> int | None:
        """Return an entry as ``int`` or ``default`` when it is absent."""
        value = self._typed_value(section, key)
        if value is MISSING:
            return default
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        raise self._not_convertible(section, key, value, "an integer")

    def fetch_float(self, section: str, key: str, default: float | None = None) -> float | None:
        """Return an entry as ``float`` or ``default``."""
        value = self._typed_value(section, key)
        if value is MISSING:
            return default
        if isinstance(value, int | float) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                pass
        raise self._not_convertible(section, key, value, "a number")

    def fetch_bool(self, section: str, key: str, default: bool | None = None) -> bool | None:
        """Return an entry as ``bool`` or ``default``.

        Text values accept the INI keywords (``yes``/``no``, ``on``/``off``,
        ``true``/``false``) as well as ``1``, ``0`` and the empty string.
        """
        value = self._typed_value(section, key)
        if value is MISSING:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in {0, 1}:
            return bool(value)
        if isinstance(value, str):
            lower = value.lower()
            if lower in TRUE_WORDS or lower == "1":
                return True
            if lower in FALSE_WORDS or lower in {"0", ""}:
                return False
        raise self._not_convertible(section, key, value, "a boolean")

    # ----- mutations -----

    def set_entry(self, section: str, key: str, value: Value) -> None:
        """Set *key* in *section* to *value*, creating the section if needed.

        All three arguments are trimmed and validated first.  *value* is
        stored as its text form (see :func:`~pyinifile.codec.to_text`).  An
        existing key keeps its position; a new key is appended.

        Raises:
            ReadOnlyModeError: The document is read-only.
            InvalidParameterError: ``parameter`` is ``"section"``, ``"key"``
                or ``"value"``; ``reason`` says what is wrong.
        """
        self._check_writable()
        section = trim(section)
        key = trim(key)
        text = trim(to_text(value))
        _require(validate_section_name(section), "section")
        _require(validate_key_name(key), "key")
        _require(validate_value(text), "value")
        self._data.setdefault(section, {})[key] = text

    def set_section(self, section: str, entries: Mapping[str, Value], merge: bool = False) -> None:
        """Replace *section* with *entries*, or overlay them when *merge* is true.

        Every key and value is validated before anything changes, so a bad
        entry leaves the document untouched.  Values already in the section
        are kept as they are when merging.
        """
        self._check_writable()
        section = trim(section)
        _require(validate_section_name(section), "section")
        cleaned: Section = {}
        for key, value in entries.items():
            key = trim(key)
            text = trim(to_text(value))
            _require(validate_key_name(key), "key")
            _require(validate_value(text), "value")
            cleaned[key] = text

        existing = self._data.get(section)
        if merge and existing is not None:
            existing.update(cleaned)
        else:
            self._data[section] = cleaned

    def delete_entry(self, section: str, key: str) -> None:
        """Remove *key* from *section*; missing entries are ignored."""
        self._check_writable()
        entries = self._data.get(trim(section))
        if entries is not None:
            entries.pop(trim(key), None)

    def delete_section(self, section: str) -> None:
        """Remove *section* and all its entries; a missing section is ignored."""
        self._check_writable()
        self._data.pop(trim(section), None)
