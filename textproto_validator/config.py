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

"""Configuration for the textproto validator.

Import paths always start with the current directory; environment, the
optional YAML configuration file and command-line options append to it, in
that order.
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from .exceptions import ConfigurationError
from .resolvers.schema_compiler import DEFAULT_IMPORT_PATHS
from .utils.logging_utils import configure_split_stream_logging
from .utils.source_location import SourceLocation, lookup_source

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("human", "json", "github-actions")
CONFIG_SCHEMA_PATH = Path(__file__).parent / "schema" / "config.schema.json"


def merge_import_paths(*groups: Iterable[str]) -> Tuple[str, ...]:
    """Concatenate import path groups after the default root, dropping repeats."""
    merged = []
    for group in (DEFAULT_IMPORT_PATHS,) + groups:
        for path in group:
            if path and path not in merged:
                merged.append(path)
    return tuple(merged)


def _json_pointer_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def build_source_map(content: str) -> Dict[str, Dict[str, int]]:
    """Map JSON-pointer-like YAML paths to 1-based line/column."""
    source_map: Dict[str, Dict[str, int]] = {}

    try:
        root = yaml.compose(content, Loader=yaml.SafeLoader)
    except yaml.YAMLError:
        return source_map

    if root is None:
        return source_map

    def _walk(node, path: str) -> None:
        mark = getattr(node, "start_mark", None)
        if mark is not None:
            # PyYAML uses 0-based line/column
            source_map[path] = {"line": int(mark.line) + 1, "column": int(mark.column) + 1}

        if isinstance(node, yaml.nodes.MappingNode):
            for key_node, value_node in node.value:
                key = getattr(key_node, "value", None)
                if key is None:
                    continue
                _walk(value_node, f"{path}/{_json_pointer_escape(str(key))}")
        elif isinstance(node, yaml.nodes.SequenceNode):
            for idx, item_node in enumerate(node.value):
                _walk(item_node, f"{path}/{idx}")

    _walk(root, "")
    return source_map


def load_config_schema() -> dict:
    with open(CONFIG_SCHEMA_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


@dataclass(frozen=True)
class ValidatorConfig:
    """Settings shared by every validation run of one invocation."""

    import_paths: Tuple[str, ...] = DEFAULT_IMPORT_PATHS
    log_level: str = "WARNING"
    output_format: str = "human"

    @classmethod
    def from_env(cls) -> 'ValidatorConfig':
        """Create configuration from environment variables."""
        env_paths = os.getenv('TEXTPROTO_VALIDATOR_IMPORT_PATH', '')
        return cls(
            import_paths=merge_import_paths(env_paths.split(os.pathsep) if env_paths else ()),
            log_level=os.getenv('TEXTPROTO_VALIDATOR_LOG_LEVEL', 'WARNING'),
        )

    def with_yaml(self, file_path: Union[str, Path]) -> 'ValidatorConfig':
        """Return a copy updated from a YAML configuration file.

        Raises:
            ConfigurationError: If the file cannot be read, parsed or fails schema validation
        """
        path = Path(file_path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"Failed to read configuration file {path}: {exc.strerror or exc}",
                location=SourceLocation(file_path=path),
            ) from exc

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            raise ConfigurationError(
                f"Failed to parse YAML file {path}: {exc}",
                location=SourceLocation(
                    file_path=path,
                    line=mark.line + 1 if mark is not None else None,
                    column=mark.column + 1 if mark is not None else None,
                ),
            ) from exc

        if data is None:
            data = {}
        self._check_schema(data, path, build_source_map(content))

        logger.debug(f"Loaded configuration file: {path}")
        return self.updated(
            import_paths=data.get("import_paths", ()),
            log_level=data.get("log_level"),
            output_format=data.get("output_format"),
        )

    @staticmethod
    def _check_schema(data: Any, path: Path, source_map: Dict[str, Dict[str, int]]) -> None:
        try:
            jsonschema.validate(instance=data, schema=load_config_schema())
        except JsonSchemaValidationError as e:
            yaml_path = "/" + "/".join(str(p) for p in e.absolute_path) if e.absolute_path else ""
            loc = lookup_source(source_map, yaml_path)
            raise ConfigurationError(
                f"Invalid configuration file {path}: {e.message}",
                location=SourceLocation(
                    file_path=path,
                    yaml_path=loc.yaml_path or None,
                    line=loc.line,
                    column=loc.column,
                ),
            ) from e

    def updated(
        self,
        import_paths: Iterable[str] = (),
        log_level: Optional[str] = None,
        output_format: Optional[str] = None,
    ) -> 'ValidatorConfig':
        """Return a copy with extra import paths appended and the given settings overridden."""
        if output_format is not None and output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(f"Unknown output format: {output_format}")
        return replace(
            self,
            import_paths=merge_import_paths(self.import_paths, import_paths),
            log_level=log_level or self.log_level,
            output_format=output_format or self.output_format,
        )

    def set_logging(self) -> logging.Logger:
        """Setup logging based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.WARNING)

        formatter = logging.Formatter('%(levelname)s: %(message)s')
        configure_split_stream_logging(level=level, formatter=formatter)

        return logging.getLogger('textproto_validator')
