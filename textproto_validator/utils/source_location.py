from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Dict, Optional


@dataclass(frozen=True)
class SourceLocation:
    file_path: Optional[Path] = None
    yaml_path: Optional[str] = None
    line: Optional[int] = None  # 1-based
    column: Optional[int] = None  # 1-based


def lookup_source(source_map: Optional[Dict[str, Dict[str, int]]], yaml_path: Optional[str]) -> SourceLocation:
    if not source_map or yaml_path is None:
        return SourceLocation(yaml_path=yaml_path)

    entry = source_map.get(yaml_path)
    if not entry:
        return SourceLocation(yaml_path=yaml_path)

    return SourceLocation(
        yaml_path=yaml_path,
        line=entry.get("line"),
        column=entry.get("column"),
    )


def with_file(loc: Optional[SourceLocation], file_path) -> SourceLocation:
    """Return *loc* with ``file_path`` filled in when it does not name a file yet."""
    if loc is None:
        return SourceLocation(file_path=Path(file_path))
    if loc.file_path is not None:
        return loc
    return SourceLocation(
        file_path=Path(file_path),
        yaml_path=loc.yaml_path,
        line=loc.line,
        column=loc.column,
    )


def _format_file_path(path: Path) -> str:
    env_root = os.environ.get("TEXTPROTO_VALIDATOR_SOURCE_ROOT")
    if not env_root:
        return str(path)

    try:
        return str(path.relative_to(Path(env_root)))
    except ValueError:
        return str(path)


def format_source(loc: Optional[SourceLocation]) -> str:
    if not loc:
        return ""

    parts = []
    if loc.file_path is not None:
        file_path = _format_file_path(loc.file_path)
        if loc.line is not None and loc.column is not None:
            parts.append(f"source= {file_path}:{loc.line}:{loc.column}")
        elif loc.line is not None:
            parts.append(f"source= {file_path}:{loc.line}")
        else:
            parts.append(f"source= {file_path}")

    if loc.yaml_path:
        parts.append(f"yaml_path={loc.yaml_path}")

    if not parts:
        return ""

    return " (" + " ".join(parts) + ")"
