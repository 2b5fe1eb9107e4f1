"""Conversion between INI text and the section/key/value model.

Everything here is pure: no file access, no state.  :func:`parse` turns text
into a :data:`Document`, :func:`serialize` does the reverse, and the
``validate_*`` helpers check names and values before they enter a document.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .errors import IniParseError, InvalidParameterError

Value = str | int | float | bool | None
Section = dict[str, Value]
Document = dict[str, Section]

# Characters removed by :func:`trim`, the same set PHP's ``trim`` strips.
TRIM_CHARS = " \t\n\r\0\x0b"
COMMENT_CHARS = (";", "#")
NEWLINES = ("\n", "\r\n")
BOM = "\ufeff"

TRUE_WORDS = frozenset({"true", "on", "yes"})
FALSE_WORDS = frozenset({"false", "off", "no", "none"})
NULL_WORD = "null"

_LINE_RX = re.compile(r"\r\n|\r|\n")
_INT_RX = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_RX = re.compile(r"^[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?$")


class ScannerMode(Enum):
    """How values are coerced when text is parsed."""

    RAW = "raw"
    NORMAL = "normal"
    TYPED = "typed"

    @classmethod
    def coerce(cls, mode: ScannerMode | str) -> ScannerMode:
        """Return *mode* as a member, accepting member names case-insensitively."""
        if isinstance(mode, cls):
            return mode
        if isinstance(mode, str):
            try:
                return cls(mode.strip().lower())
            except ValueError:
                pass
        choices = ", ".join(m.value for m in cls)
        raise InvalidParameterError(
            "scanner mode", f"{mode!r} is not one of {choices}"
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a ``validate_*`` call; truthy when valid."""

    ok: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.ok


VALID = ValidationResult(True)


def _invalid(reason: str) -> ValidationResult:
    return ValidationResult(False, reason)


def trim(text: str) -> str:
    return text.strip(TRIM_CHARS)


def _check_name(what: str, name: str, forbidden: str) -> ValidationResult:
    if not name:
        return _invalid(f"{what} must not be empty")
    for char in forbidden:
        if char in name:
            return _invalid(f"{what} must not contain {char!r}")
    if name.startswith(COMMENT_CHARS):
        return _invalid(f"{what} must not start with ';' or '#'")
    return VALID


def validate_section_name(name: str) -> ValidationResult:
    return _check_name("section name", name, "[]\r\n")


def validate_key_name(key: str) -> ValidationResult:
    return _check_name("key name", key, "[]=\r\n")


def validate_value(value: str) -> ValidationResult:
    for char in "\r\n":
        if char in value:
            return _invalid(f"value must not contain {char!r}")
    return VALID


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _coerce(value: str, mode: ScannerMode) -> Value:
    if mode is ScannerMode.RAW:
        return value
    # Quoted values are taken literally, keywords included.
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    lowered = value.lower()
    if mode is ScannerMode.NORMAL:
        if lowered in TRUE_WORDS:
            return "1"
        if lowered in FALSE_WORDS or lowered == NULL_WORD:
            return ""
        return value
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS or value == "":
        return False
    if lowered == NULL_WORD:
        return None
    if _INT_RX.match(value):
        return int(value)
    if _FLOAT_RX.match(value):
        return float(value)
    return value


def _require(result: ValidationResult, lineno: int) -> None:
    if not result:
        raise IniParseError(result.reason or "invalid line", lineno)


def parse(text: str, mode: ScannerMode | str = ScannerMode.TYPED) -> Document:
    """Parse INI *text* into a document.

    Args:
        text: The INI text. Any of ``\\n``, ``\\r\\n`` or ``\\r`` ends a line.
        mode: Value coercion policy, see :class:`ScannerMode`.

    Returns:
        An ordered mapping of section names to ordered key/value mappings.

    Raises:
        IniParseError: A line is neither blank, a comment, a section header
            nor a ``key=value`` pair, or it names an invalid section or key.
    """
    mode = ScannerMode.coerce(mode)
    # Editors such as Notepad prefix UTF-8 files with a byte order mark.
    if text.startswith(BOM):
        text = text[len(BOM):]
    doc: Document = {}
    section: Section | None = None

    for lineno, raw in enumerate(_LINE_RX.split(text), start=1):
        line = trim(raw)
        if not line or line.startswith(COMMENT_CHARS):
            continue

        if line[0] == "[":
            close = line.find("]")
            if close == -1:
                raise IniParseError("section header is missing ']'", lineno)
            if trim(line[close + 1:]):
                raise IniParseError("unexpected text after section header", lineno)
            name = trim(line[1:close])
            _require(validate_section_name(name), lineno)
            # A repeated header reopens the section.
            section = doc.setdefault(name, {})
            continue

        key, sep, value = line.partition("=")
        if not sep:
            raise IniParseError("expected '[section]' or 'key=value'", lineno)
        if section is None:
            raise IniParseError("entry appears before any section header", lineno)
        key = trim(key)
        _require(validate_key_name(key), lineno)
        section[key] = _coerce(trim(value), mode)

    return doc


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def to_text(value: Value) -> str:
    """Return the canonical text form of *value*."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def serialize(doc: Document, newline: str = "\n") -> str:
    """Render *doc* as INI text.

    Each section is written as ``[name]``, its ``key=value`` lines and one
    blank line, in insertion order.  *newline* terminates every line.
    """
    if newline not in NEWLINES:
        raise InvalidParameterError("newline", f"{newline!r} is not one of {NEWLINES!r}")
    lines: list[str] = []
    for name, entries in doc.items():
        lines.append(f"[{name}]")
        lines.extend(f"{key}={to_text(value)}" for key, value in entries.items())
        lines.append("")
    return "".join(line + newline for line in lines)
