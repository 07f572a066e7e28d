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

"""Extraction of the ``proto-file`` / ``proto-message`` header directives.

A textproto names its own schema with two comments at the very top of the
file::

    # proto-file: path/to/schema.proto
    # proto-message: package.MessageName

Scanning stops at the first line that is not a ``#`` comment (a blank line
included), so directives must be contiguous from the first line. A comment is
only a directive when it splits into exactly three whitespace-separated
fields; anything else is an ordinary comment and is skipped.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..exceptions import DuplicateDirectiveError, MissingDirectiveError
from ..utils.source_location import SourceLocation

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"
PROTO_FILE_KEY = "proto-file:"
PROTO_MESSAGE_KEY = "proto-message:"


@dataclass(frozen=True)
class DirectivePair:
    """Schema path and message type name declared by a textproto header."""

    proto_file: str
    proto_message: str


def _directive_fields(text: str):
    fields = text.split()
    if len(fields) != 3 or fields[0] != COMMENT_MARKER:
        return None
    return fields


def extract_headers(raw: Union[bytes, str]) -> DirectivePair:
    """Return the proto-file and proto-message values from *raw*.

    Args:
        raw: Full contents of the textproto file

    Returns:
        The extracted :class:`DirectivePair`

    Raises:
        DuplicateDirectiveError: A directive is set twice; the message names the
            zero-based line of the second occurrence
        MissingDirectiveError: A directive is absent from the header block
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    proto_file: Optional[str] = None
    proto_message: Optional[str] = None

    for line, text in enumerate(raw.split("\n")):
        text = text.strip()
        if not text.startswith(COMMENT_MARKER):
            break

        fields = _directive_fields(text)
        if fields is None:
            continue

        key, value = fields[1], fields[2]
        if key == PROTO_FILE_KEY:
            if proto_file is not None:
                raise DuplicateDirectiveError(
                    f"duplicate proto-file at line {line}",
                    line_index=line,
                    location=SourceLocation(line=line + 1),
                )
            proto_file = value
        elif key == PROTO_MESSAGE_KEY:
            if proto_message is not None:
                raise DuplicateDirectiveError(
                    f"duplicate proto-message at line {line}",
                    line_index=line,
                    location=SourceLocation(line=line + 1),
                )
            proto_message = value

    if proto_file is None:
        raise MissingDirectiveError("could not find proto-file comment")
    if proto_message is None:
        raise MissingDirectiveError("could not find proto-message comment")

    logger.debug(f"Found header directives: proto-file={proto_file} proto-message={proto_message}")
    return DirectivePair(proto_file=proto_file, proto_message=proto_message)
