"""
Shared fixtures for the textproto validator tests.

Most tests run against an in-memory file store so no real files are touched.
Tests that need the schema compiler request the ``protoc`` fixture, which
skips them when grpcio-tools is not installed.
"""

import logging
from typing import Dict

import pytest

from textproto_validator.file_io.file_access import InMemoryFileAccess

VALID_PROTO = 'syntax = "proto3";\npackage foo.bar.baz;\nmessage Example {\nstring name = 1;\n}'

INPUT_NAME = "input.textproto"


def textproto(*lines: str) -> str:
    """Join lines into textproto file content."""
    return "\n".join(lines)


@pytest.fixture
def protoc():
    """Skip the test unless the bundled protoc is importable."""
    pytest.importorskip("grpc_tools.protoc")


@pytest.fixture
def make_files():
    """Build an InMemoryFileAccess from a {path: content} mapping."""

    def _make(files: Dict[str, str]) -> InMemoryFileAccess:
        return InMemoryFileAccess(files)

    return _make


@pytest.fixture
def valid_files() -> Dict[str, str]:
    return {
        INPUT_NAME: '# proto-file: valid.proto\n# proto-message: Example\n\nname: "example"',
        "valid.proto": VALID_PROTO,
    }


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by the CLI's logging setup."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
