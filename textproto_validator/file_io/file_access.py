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

"""Read-only file access capability used by the validator and schema compiler."""

import io
import logging
import posixpath
from abc import ABC, abstractmethod
from typing import BinaryIO, Dict, Mapping, Optional, Union

from ..exceptions import FileAccessError

logger = logging.getLogger(__name__)


class FileAccess(ABC):
    """Abstract source of file contents keyed by path."""

    @abstractmethod
    def read_file(self, name: str) -> bytes:
        """Return the entire contents of *name*.

        Raises:
            FileAccessError: If the file is absent or unreadable
        """

    @abstractmethod
    def open(self, name: str) -> BinaryIO:
        """Open *name* for streamed binary reading.

        The returned stream is a context manager; callers close it.

        Raises:
            FileAccessError: If the file is absent or unreadable
        """


class LocalFileAccess(FileAccess):
    """File access backed by the local filesystem."""

    def read_file(self, name: str) -> bytes:
        logger.debug(f"Reading file: {name}")
        try:
            with open(name, "rb") as stream:
                return stream.read()
        except OSError as exc:
            raise FileAccessError(f"open {name}: {exc.strerror or exc}") from exc

    def open(self, name: str) -> BinaryIO:
        logger.debug(f"Opening file: {name}")
        try:
            return open(name, "rb")
        except OSError as exc:
            raise FileAccessError(f"open {name}: {exc.strerror or exc}") from exc


class InMemoryFileAccess(FileAccess):
    """File access backed by a dict of path -> contents.

    Paths are normalised, so ``./a.proto`` and ``a.proto`` name the same entry.
    """

    def __init__(self, files: Optional[Mapping[str, Union[bytes, str]]] = None):
        self._files: Dict[str, bytes] = {}
        for name, content in (files or {}).items():
            self.add_file(name, content)

    @staticmethod
    def _key(name: str) -> str:
        return posixpath.normpath(name)

    def add_file(self, name: str, content: Union[bytes, str]) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._files[self._key(name)] = content

    def read_file(self, name: str) -> bytes:
        try:
            return self._files[self._key(name)]
        except KeyError:
            raise FileAccessError(f"unknown file {name}") from None

    def open(self, name: str) -> BinaryIO:
        return io.BytesIO(self.read_file(name))

    def __contains__(self, name: str) -> bool:
        return self._key(name) in self._files
