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

"""Textproto validation pipeline.

A run is strictly linear: read the file, extract the header directives,
resolve the declared message type from its schema, then decode the whole file
as text format into that message. The first failing step ends the run with
its stage-tagged error.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from google.protobuf import text_format
from google.protobuf.message import Message

from .exceptions import DecodeError, HeaderError, ResolutionError, TextprotoValidatorError
from .file_io.file_access import FileAccess, LocalFileAccess
from .parsers.header_parser import extract_headers
from .report import ValidationResult
from .resolvers.schema_compiler import DEFAULT_IMPORT_PATHS, ProtocSchemaCompiler
from .resolvers.type_resolver import resolve_type
from .utils.source_location import SourceLocation, with_file

logger = logging.getLogger(__name__)


class TextprotoValidator:
    """Validates textproto files against the schema named in their header."""

    def __init__(self, file_access: FileAccess, import_paths: Sequence[str] = DEFAULT_IMPORT_PATHS):
        """Initialize the validator.

        Args:
            file_access: Source of the textproto, schema and imported files
            import_paths: Directories searched, in order, for schema files
        """
        self.file_access = file_access
        self.import_paths = tuple(import_paths) or DEFAULT_IMPORT_PATHS

    def validate(self, input_path: Union[str, Path]) -> None:
        """Validate a single textproto file.

        Raises:
            FileAccessError: The input file cannot be read
            HeaderError: The header directives are missing or duplicated
            ResolutionError: The schema does not compile or lacks the message
            DecodeError: The body does not decode as the declared message
        """
        input_path = str(input_path)

        raw = self.file_access.read_file(input_path)

        try:
            headers = extract_headers(raw)
        except HeaderError as exc:
            exc.location = with_file(exc.location, input_path)
            raise

        try:
            message = resolve_type(
                self.file_access,
                headers.proto_file,
                headers.proto_message,
                compiler=ProtocSchemaCompiler(self.file_access, self.import_paths),
            )
        except ResolutionError as exc:
            raise ResolutionError(
                f"failed to find message {headers.proto_message} in {headers.proto_file}: {exc}",
                location=exc.location,
            ) from exc

        decode_textproto(raw, message, input_path)
        logger.debug(f"Validated {input_path} as {message.DESCRIPTOR.full_name}")

    def check(self, input_path: Union[str, Path]) -> ValidationResult:
        """Validate *input_path* and record the outcome instead of raising."""
        result = ValidationResult(Path(input_path))
        try:
            self.validate(input_path)
        except TextprotoValidatorError as exc:
            result.add_exception(exc)
        return result


def decode_textproto(raw: bytes, message: Message, input_path: Optional[str] = None) -> Message:
    """Parse *raw* as text format into *message*.

    Raises:
        DecodeError: On any text-format fault, or when required fields are unset
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(
            f"unmarshal failure: invalid UTF-8: {exc}",
            location=SourceLocation(file_path=Path(input_path)) if input_path else None,
        ) from exc

    try:
        text_format.Parse(text, message, descriptor_pool=message.DESCRIPTOR.file.pool)
    except text_format.ParseError as exc:
        location = SourceLocation(
            file_path=Path(input_path) if input_path else None,
            line=exc.GetLine(),
            column=exc.GetColumn(),
        )
        raise DecodeError(f"unmarshal failure: {exc}", location=location) from exc

    missing = message.FindInitializationErrors()
    if missing:
        fields = ", ".join(f"{message.DESCRIPTOR.full_name}.{name}" for name in missing)
        raise DecodeError(
            f"unmarshal failure: required field {fields} not set",
            location=SourceLocation(file_path=Path(input_path)) if input_path else None,
        )
    return message


def validate_textproto(
    file_access: FileAccess,
    input_path: Union[str, Path],
    import_paths: Sequence[str] = DEFAULT_IMPORT_PATHS,
) -> None:
    """Validate *input_path*; raise a TextprotoValidatorError on failure."""
    TextprotoValidator(file_access, import_paths).validate(input_path)


def validate_files(
    file_paths: Iterable[Union[str, Path]],
    file_access: Optional[FileAccess] = None,
    import_paths: Sequence[str] = DEFAULT_IMPORT_PATHS,
) -> List[ValidationResult]:
    """Validate a list of textproto files.

    Each file is validated independently; one failure does not stop the others.

    Returns:
        List of ValidationResult objects, one per file
    """
    validator = TextprotoValidator(file_access or LocalFileAccess(), import_paths)
    results = []
    for file_path in file_paths:
        result = validator.check(file_path)
        if result.ok:
            logger.debug(f"{file_path}: valid")
        results.append(result)
    return results
