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

"""Validation outcome reporting."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import TextprotoValidatorError


class ValidationResult:
    """Container for the validation outcome of a single textproto file."""

    def __init__(self, file_path: Path):
        """Initialize validation result.

        Args:
            file_path: Path to the file being validated
        """
        self.file_path = file_path
        self.errors: List[Dict[str, Any]] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(
        self,
        message: str,
        stage: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        """Add an error message.

        Args:
            message: Error message
            stage: Pipeline stage that failed (read, header, resolve, decode)
            file: File the location refers to, when it is not the validated file
            line: Optional 1-based line number where the error occurred
            column: Optional 1-based column number
        """
        error = {'message': message, 'stage': stage}
        if file is not None:
            error['file'] = file
        if line is not None:
            error['line'] = line
        if column is not None:
            error['column'] = column
        self.errors.append(error)

    def add_exception(self, exc: TextprotoValidatorError):
        """Record a validator exception with its stage and location."""
        loc = exc.location
        file = None
        line = None
        column = None
        if loc is not None:
            if loc.file_path is not None and str(loc.file_path) != str(self.file_path):
                file = str(loc.file_path)
            line = loc.line
            column = loc.column
        self.add_error(str(exc), exc.stage, file=file, line=line, column=column)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file': str(self.file_path),
            'valid': self.ok,
            'errors': self.errors,
        }
