"""
Tests for the protoc-backed schema compiler.

The pure helpers (import scanning, diagnostic parsing) run everywhere; the
compile tests need grpcio-tools and request the ``protoc`` fixture.
"""

from pathlib import Path

import pytest

from textproto_validator.exceptions import SchemaCompileError
from textproto_validator.file_io.file_access import InMemoryFileAccess
from textproto_validator.resolvers.schema_compiler import (
    ProtocSchemaCompiler,
    parse_diagnostics,
    scan_imports,
    schema_virtual_name,
)

from conftest import VALID_PROTO


# ============================================================================
# Import Scanning
# ============================================================================


def test_scan_imports_in_order():
    source = """
syntax = "proto3";
import "common/types.proto";
import public "shared/public.proto";
import weak "legacy/weak.proto";
"""
    assert scan_imports(source) == ["common/types.proto", "shared/public.proto", "legacy/weak.proto"]


def test_scan_imports_ignores_comments():
    source = """
// import "commented/line.proto";
/* import "commented/block.proto";
   still a comment */
syntax = "proto3"; import "real.proto";
"""
    assert scan_imports(source) == ["real.proto"]


def test_scan_imports_none():
    assert scan_imports(VALID_PROTO) == []


# ============================================================================
# Diagnostics
# ============================================================================


def test_parse_located_diagnostic():
    (diagnostic,) = parse_diagnostics('valid.proto:5:2: Expected top-level statement (e.g. "message").\n')

    assert diagnostic.location.file_path == Path("valid.proto")
    assert diagnostic.location.line == 5
    assert diagnostic.location.column == 2
    assert diagnostic.severity == "error"
    assert str(diagnostic) == 'valid.proto:5:2: Expected top-level statement (e.g. "message").'


def test_parse_file_only_and_warning_diagnostics():
    output = (
        "missing.proto: File not found.\n"
        "\n"
        "api.proto:3:1: warning: Import missing.proto is unused.\n"
    )
    first, second = parse_diagnostics(output)

    assert first.location.file_path == Path("missing.proto")
    assert first.location.line is None
    assert first.message == "File not found."
    assert second.severity == "warning"


def test_parse_unlocated_line():
    (diagnostic,) = parse_diagnostics("Warning: directory does not exist.")
    assert diagnostic.location.file_path is None
    assert str(diagnostic) == "Warning: directory does not exist."


# ============================================================================
# Schema Names
# ============================================================================


@pytest.mark.parametrize(
    "name, expected",
    [
        ("valid.proto", "valid.proto"),
        ("./protos/valid.proto", "protos/valid.proto"),
        ("protos/../valid.proto", "valid.proto"),
        ("/abs/valid.proto", "abs/valid.proto"),
    ],
)
def test_schema_virtual_name(name, expected):
    assert schema_virtual_name(name) == expected


def test_schema_virtual_name_rejects_escape():
    with pytest.raises(SchemaCompileError, match="relative to an import path"):
        schema_virtual_name("../outside.proto")


# ============================================================================
# Compilation
# ============================================================================


def test_compile_returns_requested_file(protoc):
    compiler = ProtocSchemaCompiler(InMemoryFileAccess({"valid.proto": VALID_PROTO}))

    (file_descriptor,) = compiler.compile("valid.proto")

    assert file_descriptor.name == "valid.proto"
    assert file_descriptor.package == "foo.bar.baz"
    assert "Example" in file_descriptor.message_types_by_name


def test_compile_follows_imports_across_import_paths(protoc):
    files = InMemoryFileAccess({
        "api.proto": (
            'syntax = "proto3";\n'
            'package api;\n'
            'import "common/types.proto";\n'
            'message Request { common.Id id = 1; }\n'
        ),
        "third_party/common/types.proto": (
            'syntax = "proto3";\npackage common;\nmessage Id { string value = 1; }\n'
        ),
    })
    compiler = ProtocSchemaCompiler(files, import_paths=(".", "third_party"))

    (file_descriptor,) = compiler.compile("api.proto")

    request = file_descriptor.message_types_by_name["Request"]
    assert request.fields_by_name["id"].message_type.full_name == "common.Id"


def test_compile_uses_bundled_well_known_types(protoc):
    files = InMemoryFileAccess({
        "event.proto": (
            'syntax = "proto3";\n'
            'import "google/protobuf/timestamp.proto";\n'
            'message Event { google.protobuf.Timestamp at = 1; }\n'
        ),
    })

    (file_descriptor,) = ProtocSchemaCompiler(files).compile("event.proto")

    event = file_descriptor.message_types_by_name["Event"]
    assert event.fields_by_name["at"].message_type.full_name == "google.protobuf.Timestamp"


def test_compile_import_cycle_is_reported_by_protoc(protoc):
    files = InMemoryFileAccess({
        "a.proto": 'syntax = "proto3";\nimport "b.proto";\nmessage A {}\n',
        "b.proto": 'syntax = "proto3";\nimport "a.proto";\nmessage B {}\n',
    })

    with pytest.raises(SchemaCompileError) as excinfo:
        ProtocSchemaCompiler(files).compile("a.proto")

    assert "recursively imports itself: a.proto -> b.proto -> a.proto" in str(excinfo.value)
    assert excinfo.value.location.file_path in (Path("a.proto"), Path("b.proto"))
    assert {d.location.file_path for d in excinfo.value.diagnostics} <= {Path("a.proto"), Path("b.proto")}


def test_compile_syntax_error_has_location(protoc):
    files = InMemoryFileAccess({"valid.proto": VALID_PROTO + "badtext"})

    with pytest.raises(SchemaCompileError) as excinfo:
        ProtocSchemaCompiler(files).compile("valid.proto")

    assert str(excinfo.value).startswith("valid.proto:5:2: ")
    assert excinfo.value.diagnostics
    assert excinfo.value.location.file_path == Path("valid.proto")
    assert excinfo.value.location.line == 5
    assert excinfo.value.location.column == 2


def test_compile_error_names_schema_from_later_import_path(protoc):
    files = InMemoryFileAccess({
        "third_party/common/types.proto": 'syntax = "proto3";\npackage common;\nbadtext\n',
    })
    compiler = ProtocSchemaCompiler(files, import_paths=(".", "third_party"))

    with pytest.raises(SchemaCompileError) as excinfo:
        compiler.compile("common/types.proto")

    assert str(excinfo.value).startswith("common/types.proto:3:1: ")
    assert excinfo.value.location.file_path == Path("common/types.proto")


def test_compile_missing_import(protoc):
    files = InMemoryFileAccess({
        "api.proto": 'syntax = "proto3";\nimport "missing.proto";\nmessage Request {}\n',
    })

    with pytest.raises(SchemaCompileError) as excinfo:
        ProtocSchemaCompiler(files).compile("api.proto")

    assert str(excinfo.value).startswith("missing.proto: File not found.")
    assert excinfo.value.location.file_path == Path("missing.proto")
    assert any(
        d.location.file_path == Path("api.proto") and d.location.line == 2 for d in excinfo.value.diagnostics
    )


def test_compile_missing_schema_reports_accessor_error():
    with pytest.raises(SchemaCompileError, match="valid.proto: unknown file valid.proto"):
        ProtocSchemaCompiler(InMemoryFileAccess()).compile("valid.proto")


def test_compile_requires_a_schema():
    with pytest.raises(ValueError):
        ProtocSchemaCompiler(InMemoryFileAccess()).compile()


def test_compile_reports_unrunnable_protoc():
    compiler = ProtocSchemaCompiler(
        InMemoryFileAccess({"valid.proto": VALID_PROTO}),
        protoc_command=["/nonexistent/protoc-binary"],
    )
    with pytest.raises(SchemaCompileError, match="failed to run protoc"):
        compiler.compile("valid.proto")


def test_parse_libprotobuf_log_line():
    (diagnostic,) = parse_diagnostics(
        "[libprotobuf WARNING google/protobuf/compiler/parser.cc:650] No syntax specified for the proto file"
    )
    assert diagnostic.severity == "warning"
    assert diagnostic.location.file_path is None
