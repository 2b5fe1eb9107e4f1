"""One-shot helpers that take a path on every call.

Each helper opens the file, performs a single operation, saves when it
changed something and closes the file again.  Use
:class:`~pyinifile.document.IniDocument` directly to batch several changes
into one save.

Mutating helpers load the file in :attr:`ScannerMode.RAW` so values that
are not touched are written back exactly as they were read.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from .codec import Document, ScannerMode, Section, Value
from .document import MISSING, IniDocument

__all__ = [
    "load",
    "get_entry",
    "get_section",
    "set_entry",
    "set_section",
    "delete_entry",
    "delete_section",
]

PathLike = str | os.PathLike[str]


def _prepare(path: PathLike, create: bool) -> Path:
    path = Path(path)
    if create and not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    return path


def load(path: PathLike, scanner_mode: ScannerMode | str = ScannerMode.TYPED) -> Document:
    with IniDocument.open(path, read_only=True, scanner_mode=scanner_mode) as doc:
        return doc.fetch_all()


def get_entry(
    path: PathLike,
    section: str,
    key: str,
    default: object = None,
    scanner_mode: ScannerMode | str = ScannerMode.TYPED,
) -> object:
    """Return one value from *path*, or *default* if it is not there.

    Pass :data:`~pyinifile.document.MISSING` as *default* to tell an absent
    entry apart from a stored ``null``.
    """
    with IniDocument.open(path, read_only=True, scanner_mode=scanner_mode) as doc:
        value = doc.fetch_entry(section, key)
    return default if value is MISSING else value


def get_section(
    path: PathLike,
    section: str,
    scanner_mode: ScannerMode | str = ScannerMode.TYPED,
) -> Section | None:
    """Return a copy of *section* from *path*, or ``None`` if it is not there."""
    with IniDocument.open(path, read_only=True, scanner_mode=scanner_mode) as doc:
        return doc.fetch_section(section)


def set_entry(path: PathLike, section: str, key: str, value: Value, *, create: bool = False) -> None:
    """Set one entry in *path*; with ``create=True`` a missing file is created first."""
    path = _prepare(path, create)
    with IniDocument.open(path, scanner_mode=ScannerMode.RAW) as doc:
        doc.set_entry(section, key, value)
        doc.save()


def set_section(
    path: PathLike,
    section: str,
    entries: Mapping[str, Value],
    *,
    merge: bool = False,
    create: bool = False,
) -> None:
    path = _prepare(path, create)
    with IniDocument.open(path, scanner_mode=ScannerMode.RAW) as doc:
        doc.set_section(section, entries, merge=merge)
        doc.save()


def delete_entry(path: PathLike, section: str, key: str) -> bool:
    """Remove one entry.  Returns ``False`` (and leaves the file alone) if it was absent."""
    with IniDocument.open(path, scanner_mode=ScannerMode.RAW) as doc:
        if not doc.has_entry(section, key):
            return False
        doc.delete_entry(section, key)
        doc.save()
    return True


def delete_section(path: PathLike, section: str) -> bool:
    """Remove a whole section.  Returns ``False`` if it was absent."""
    with IniDocument.open(path, scanner_mode=ScannerMode.RAW) as doc:
        if not doc.has_section(section):
            return False
        doc.delete_section(section)
        doc.save()
    return True
