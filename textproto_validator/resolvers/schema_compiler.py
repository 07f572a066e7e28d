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

"""Schema compilation through ``protoc`` (as bundled by grpcio-tools).

protoc only reads from disk, so the requested schema and everything it imports
is first copied out of the :class:`FileAccess` into a private staging
directory, one sub-directory per import root. protoc then compiles the staged
tree into a ``FileDescriptorSet`` which is loaded into a fresh descriptor pool.

protoc is handed the schema names, not the staged paths, and runs from an
empty working directory. It resolves every name through the staged roots and
reports diagnostics under the names the caller used.
"""

import logging
import os
import posixpath
import re
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf.descriptor import FileDescriptor

from ..exceptions import FileAccessError, SchemaCompileError
from ..file_io.file_access import FileAccess
from ..utils.source_location import SourceLocation

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_PATHS: Tuple[str, ...] = (".",)
DESCRIPTOR_SET_NAME = "descriptor_set.pb"
STAGED_ROOTS_DIR = "roots"
WORK_DIR = "work"

_COMMENT_RE = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)
_IMPORT_RE = re.compile(r'(?:^|;)\s*import\s+(?:(?:public|weak)\s+)?"(?P<path>[^"]+)"\s*;', re.MULTILINE)
_LOCATED_DIAGNOSTIC_RE = re.compile(r"^(?P<file>[^:]+):(?P<line>\d+):(?P<column>\d+): (?P<message>.*)$")
_FILE_DIAGNOSTIC_RE = re.compile(r"^(?P<file>[^:]+): (?P<message>.*)$")


@dataclass(frozen=True)
class CompilerDiagnostic:
    """A single error or warning line reported by protoc."""

    message: str
    location: SourceLocation
    severity: str = "error"

    def __str__(self) -> str:
        loc = self.location
        if loc.line is not None and loc.column is not None:
            return f"{loc.file_path}:{loc.line}:{loc.column}: {self.message}"
        if loc.file_path is not None:
            return f"{loc.file_path}: {self.message}"
        return self.message


def parse_diagnostics(output: str) -> List[CompilerDiagnostic]:
    """Split protoc's gcc-style stderr into diagnostics."""
    diagnostics = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        match = _LOCATED_DIAGNOSTIC_RE.match(line)
        if match:
            location = SourceLocation(
                file_path=Path(match.group("file")),
                line=int(match.group("line")),
                column=int(match.group("column")),
            )
        else:
            match = _FILE_DIAGNOSTIC_RE.match(line)
            if match and match.group("file").lower() in ("warning", "error"):
                match = None
            if match:
                location = SourceLocation(file_path=Path(match.group("file")))
            else:
                severity = "warning" if line.lower().startswith(("warning", "[libprotobuf warning")) else "error"
                diagnostics.append(CompilerDiagnostic(message=line, location=SourceLocation(), severity=severity))
                continue

        message = match.group("message")
        severity = "warning" if message.lower().startswith("warning:") else "error"
        diagnostics.append(CompilerDiagnostic(message=message, location=location, severity=severity))
    return diagnostics


def scan_imports(source: str) -> List[str]:
    """Return the file names imported by a proto source, in declaration order."""
    stripped = _COMMENT_RE.sub("", source)
    return [match.group("path") for match in _IMPORT_RE.finditer(stripped)]


def schema_virtual_name(name: str) -> str:
    """Normalise a schema path to the name protoc knows it by.

    Raises:
        SchemaCompileError: If the path points outside the import roots
    """
    normalized = posixpath.normpath(name).lstrip("/")
    if normalized == ".." or normalized.startswith("../"):
        raise SchemaCompileError(f"{name}: schema path must be relative to an import path")
    return normalized


class _StagingArea:
    """Copies schema files from a FileAccess into per-import-root directories."""

    def __init__(self, file_access: FileAccess, import_paths: Sequence[str], directory: Path):
        self._file_access = file_access
        self._import_paths = list(import_paths)
        self._directory = directory
        # virtual name -> staged path relative to the staging directory (None while in progress or missing)
        self._staged: Dict[str, Optional[str]] = {}
        self.errors: Dict[str, str] = {}

        for path in self.proto_paths:
            Path(path).mkdir(parents=True, exist_ok=True)

    @property
    def proto_paths(self) -> List[str]:
        return [str(self._directory / str(index)) for index in range(len(self._import_paths))]

    def stage(self, name: str) -> Optional[str]:
        if name in self._staged:
            return self._staged[name]
        self._staged[name] = None

        content, index = self._fetch(name)
        if content is None:
            return None

        relative = posixpath.join(str(index), name)
        target = self._directory / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        self._staged[name] = relative
        logger.debug(f"Staged schema {name} from import path {self._import_paths[index]}")

        for dependency in scan_imports(content.decode("utf-8", errors="replace")):
            try:
                dependency = schema_virtual_name(dependency)
            except SchemaCompileError:
                # protoc reports unresolvable imports with their source position
                continue
            self.stage(dependency)

        return relative

    def _fetch(self, name: str):
        for index, root in enumerate(self._import_paths):
            path = os.path.normpath(os.path.join(root, name))
            try:
                with self._file_access.open(path) as stream:
                    return stream.read(), index
            except FileAccessError as exc:
                self.errors.setdefault(name, str(exc))
        return None, None


class ProtocSchemaCompiler:
    """Compiles proto files read through a FileAccess into file descriptors."""

    def __init__(
        self,
        file_access: FileAccess,
        import_paths: Sequence[str] = DEFAULT_IMPORT_PATHS,
        protoc_command: Optional[Sequence[str]] = None,
    ):
        """Initialize the compiler.

        Args:
            file_access: Source of the schema files and their imports
            import_paths: Directories searched, in order, for each schema file
            protoc_command: Command used to run protoc. Defaults to the
                grpcio-tools module running under the current interpreter.
        """
        self._file_access = file_access
        self._import_paths = tuple(import_paths) or DEFAULT_IMPORT_PATHS
        self._protoc_command = list(protoc_command or [sys.executable, "-m", "grpc_tools.protoc"])

    @property
    def import_paths(self) -> Tuple[str, ...]:
        return self._import_paths

    def compile(self, *schema_paths: str) -> List[FileDescriptor]:
        """Compile *schema_paths* and their transitive imports.

        Returns:
            One FileDescriptor per requested schema, in request order

        Raises:
            SchemaCompileError: If a schema cannot be found or protoc rejects it
        """
        if not schema_paths:
            raise ValueError("at least one schema path is required")

        names = [schema_virtual_name(path) for path in schema_paths]

        with tempfile.TemporaryDirectory(prefix="textproto-validator-") as staging_dir:
            staging_root = Path(staging_dir)
            staging = _StagingArea(self._file_access, self._import_paths, staging_root / STAGED_ROOTS_DIR)

            for name in names:
                if staging.stage(name) is None:
                    raise SchemaCompileError(
                        f"{name}: {staging.errors.get(name, 'file not found')}",
                        location=SourceLocation(file_path=Path(name)),
                    )

            descriptor_set_path = staging_root / DESCRIPTOR_SET_NAME
            self._run_protoc(staging_root / WORK_DIR, staging.proto_paths, names, descriptor_set_path)
            file_set = descriptor_pb2.FileDescriptorSet.FromString(descriptor_set_path.read_bytes())

        pool = descriptor_pool.DescriptorPool()
        for file_proto in file_set.file:
            pool.AddSerializedFile(file_proto.SerializeToString())

        return [pool.FindFileByName(name) for name in names]

    def _run_protoc(
        self,
        work_dir: Path,
        proto_paths: List[str],
        names: List[str],
        descriptor_set_path: Path,
    ) -> None:
        # names only resolve through --proto_path while work_dir stays empty
        work_dir.mkdir(parents=True, exist_ok=True)

        args = list(self._protoc_command)
        args.extend(f"--proto_path={path}" for path in proto_paths)
        args.extend(["--include_imports", f"--descriptor_set_out={descriptor_set_path}"])
        args.extend(names)

        logger.debug(f"Running protoc: {' '.join(args)}")
        try:
            completed = subprocess.run(
                args,
                cwd=work_dir,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise SchemaCompileError(f"failed to run protoc: {exc}") from exc

        output = completed.stderr.strip()
        diagnostics = parse_diagnostics(output)
        if completed.returncode != 0:
            raise SchemaCompileError(
                output or f"protoc exited with status {completed.returncode}",
                diagnostics=[d for d in diagnostics if d.severity == "error"] or diagnostics,
            )

        for diagnostic in diagnostics:
            logger.warning(f"protoc: {diagnostic}")
