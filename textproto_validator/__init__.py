"""Validate protobuf text-format files against the schema declared in their header."""

from .exceptions import (
    TextprotoValidatorError,
    FileAccessError,
    HeaderError,
    MissingDirectiveError,
    DuplicateDirectiveError,
    ResolutionError,
    SchemaCompileError,
    MessageNotFoundError,
    DecodeError,
    ConfigurationError,
)
from .file_io.file_access import FileAccess, InMemoryFileAccess, LocalFileAccess
from .parsers.header_parser import DirectivePair, extract_headers
from .resolvers.type_resolver import resolve_type
from .report import ValidationResult
from .validator import TextprotoValidator, validate_files, validate_textproto

__version__ = "0.1.0"

__all__ = [
    "TextprotoValidatorError",
    "FileAccessError",
    "HeaderError",
    "MissingDirectiveError",
    "DuplicateDirectiveError",
    "ResolutionError",
    "SchemaCompileError",
    "MessageNotFoundError",
    "DecodeError",
    "ConfigurationError",
    "FileAccess",
    "InMemoryFileAccess",
    "LocalFileAccess",
    "DirectivePair",
    "extract_headers",
    "resolve_type",
    "ValidationResult",
    "TextprotoValidator",
    "validate_files",
    "validate_textproto",
]
