# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Custom exceptions for the textproto validator.

Every error carries the pipeline stage that produced it (``read``, ``header``,
``resolve``, ``decode``) so callers can attribute a failure without parsing
the message text.
"""

from typing import TYPE_CHECKING, List, Optional

from .utils.source_location import SourceLocation

if TYPE_CHECKING:
    from .resolvers.schema_compiler import CompilerDiagnostic


class TextprotoValidatorError(Exception):
    """Base exception for textproto validation errors."""

    stage = "validate"

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.location = location


class FileAccessError(TextprotoValidatorError):
    """Exception raised when a file cannot be read through the file-access layer."""

    stage = "read"


class HeaderError(TextprotoValidatorError):
    """Exception raised for malformed proto-file/proto-message header comments."""

    stage = "header"


class MissingDirectiveError(HeaderError):
    """Exception raised when a required header directive is absent."""
    pass


class DuplicateDirectiveError(HeaderError):
    """Exception raised when a header directive appears more than once."""

    def __init__(self, message: str, line_index: int, location: Optional[SourceLocation] = None):
        super().__init__(message, location)
        self.line_index = line_index


class ResolutionError(TextprotoValidatorError):
    """Exception raised when the declared message type cannot be resolved."""

    stage = "resolve"


class SchemaCompileError(ResolutionError):
    """Exception raised when the schema compiler rejects a proto file."""

    def __init__(
        self,
        message: str,
        diagnostics: Optional[List["CompilerDiagnostic"]] = None,
        location: Optional[SourceLocation] = None,
    ):
        self.diagnostics = list(diagnostics or [])
        if location is None:
            located = [d.location for d in self.diagnostics if d.location.file_path is not None]
            location = located[0] if located else None
        super().__init__(message, location)


class MessageNotFoundError(ResolutionError):
    """Exception raised when no compiled file declares the requested message."""
    pass


class DecodeError(TextprotoValidatorError):
    """Exception raised when the text-format body does not match the message type."""

    stage = "decode"


class ConfigurationError(TextprotoValidatorError):
    """Exception raised for invalid validator configuration."""

    stage = "config"
