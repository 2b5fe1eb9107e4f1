from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Category of an :class:`IniFileError`."""

    FILE_NOT_EXIST = "file_not_exist"
    FILE_NOT_READABLE = "file_not_readable"
    FILE_NOT_WRITABLE = "file_not_writable"
    FILE_LOCK_FAILED = "file_lock_failed"
    FILE_READ_WRITE_FAILED = "file_read_write_failed"
    INI_PARSE_FAILED = "ini_parse_failed"
    INVALID_PARAMETER = "invalid_parameter"
    READ_ONLY_MODE = "read_only_mode"


class IniFileError(Exception):
    """Base class for pyinifile errors."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FileNotExistError(IniFileError):
    """Raised when the target path does not exist."""

    kind = ErrorKind.FILE_NOT_EXIST


class FileNotReadableError(IniFileError):
    """Raised when the file cannot be opened or read."""

    kind = ErrorKind.FILE_NOT_READABLE


class FileNotWritableError(IniFileError):
    """Raised when saving to a handle that was not opened for writing."""

    kind = ErrorKind.FILE_NOT_WRITABLE


class FileLockFailedError(IniFileError):
    """Raised when a shared or exclusive lock cannot be acquired."""

    kind = ErrorKind.FILE_LOCK_FAILED


class FileReadWriteFailedError(IniFileError):
    """Raised for read, write or truncate failures on the handle."""

    kind = ErrorKind.FILE_READ_WRITE_FAILED


class IniParseError(IniFileError):
    """Raised when text does not follow the INI line grammar."""

    kind = ErrorKind.INI_PARSE_FAILED

    def __init__(self, message: str, lineno: int | None = None) -> None:
        if lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)
        self.lineno = lineno


class InvalidParameterError(IniFileError):
    """Raised when a section, key, value or option fails validation."""

    kind = ErrorKind.INVALID_PARAMETER

    def __init__(self, parameter: str, reason: str) -> None:
        super().__init__(f"invalid {parameter}: {reason}")
        self.parameter = parameter
        self.reason = reason


class ReadOnlyModeError(IniFileError):
    """Raised when modifying or saving a read-only document."""

    kind = ErrorKind.READ_ONLY_MODE
