"""Logging setup shared by the CLI and the configuration layer.

Validation verdicts are printed by the CLI itself. Logging only carries
diagnostics, such as protoc warnings and per-stage tracing under ``-vv``.
"""

import logging
import sys
from typing import IO, Optional

DEFAULT_FORMAT = "%(name)s - %(levelname)s - %(message)s"


class _BelowLevelFilter(logging.Filter):
    """Passes records strictly below ``level``."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def verbosity_to_level(verbosity: int, default: int = logging.WARNING) -> int:
    """Map a count of ``-v`` flags to a logging level (-v INFO, -vv DEBUG)."""
    if verbosity <= 0:
        return default
    if verbosity == 1:
        return min(default, logging.INFO)
    return logging.DEBUG


def _stream_handler(
    stream: IO[str],
    formatter: logging.Formatter,
    min_level: int,
    below: Optional[int] = None,
) -> logging.Handler:
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(min_level)
    handler.setFormatter(formatter)
    if below is not None:
        handler.addFilter(_BelowLevelFilter(below))
    return handler


def configure_split_stream_logging(
    *,
    level: int = logging.INFO,
    stderr_level: int = logging.WARNING,
    formatter: Optional[logging.Formatter] = None,
) -> None:
    """Replace the root handlers with a stdout/stderr pair.

    Records below ``stderr_level`` go to stdout and the rest go to stderr, so
    ``--format json`` output can be piped while protoc warnings stay visible.
    """
    formatter = formatter or logging.Formatter(DEFAULT_FORMAT)
    stderr_level = max(stderr_level, logging.DEBUG)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(_stream_handler(sys.stdout, formatter, logging.DEBUG, below=stderr_level))
    root.addHandler(_stream_handler(sys.stderr, formatter, stderr_level))
