from .codec import (
    Document,
    ScannerMode,
    Section,
    ValidationResult,
    Value,
    parse,
    serialize,
    to_text,
    validate_key_name,
    validate_section_name,
    validate_value,
)
from .document import MISSING, IniDocument
from .errors import (
    ErrorKind,
    FileLockFailedError,
    FileNotExistError,
    FileNotReadableError,
    FileNotWritableError,
    FileReadWriteFailedError,
    IniFileError,
    IniParseError,
    InvalidParameterError,
    ReadOnlyModeError,
)
from .handle import FileHandle, LocalFileHandle, MemoryFileHandle

__version__ = "0.1.0"

__all__ = [
    "IniDocument",
    "MISSING",
    "ScannerMode",
    "Document",
    "Section",
    "Value",
    "ValidationResult",
    "parse",
    "serialize",
    "to_text",
    "validate_section_name",
    "validate_key_name",
    "validate_value",
    "FileHandle",
    "LocalFileHandle",
    "MemoryFileHandle",
    "ErrorKind",
    "IniFileError",
    "FileNotExistError",
    "FileNotReadableError",
    "FileNotWritableError",
    "FileLockFailedError",
    "FileReadWriteFailedError",
    "IniParseError",
    "InvalidParameterError",
    "ReadOnlyModeError",
]
