"""Resolution of the declared message type from its proto schema."""

from .schema_compiler import (
    DEFAULT_IMPORT_PATHS,
    CompilerDiagnostic,
    ProtocSchemaCompiler,
    parse_diagnostics,
    scan_imports,
)
from .type_resolver import find_message_descriptor, new_message, resolve_type

__all__ = [
    "DEFAULT_IMPORT_PATHS",
    "CompilerDiagnostic",
    "ProtocSchemaCompiler",
    "parse_diagnostics",
    "scan_imports",
    "find_message_descriptor",
    "new_message",
    "resolve_type",
]
