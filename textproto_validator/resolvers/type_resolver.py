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

"""Locate a message type among compiled proto files and instantiate it."""

import logging
from typing import Iterable, Optional, Sequence

from google.protobuf import message_factory
from google.protobuf.descriptor import Descriptor, FileDescriptor
from google.protobuf.message import Message

from ..exceptions import MessageNotFoundError
from ..file_io.file_access import FileAccess
from .schema_compiler import DEFAULT_IMPORT_PATHS, ProtocSchemaCompiler

logger = logging.getLogger(__name__)


def find_message_descriptor(file_descriptors: Iterable[FileDescriptor], name: str) -> Descriptor:
    """Return the first top-level message called *name*.

    *name* may be the simple message name or its package-qualified full name.
    """
    for file_descriptor in file_descriptors:
        for descriptor in file_descriptor.message_types_by_name.values():
            if name in (descriptor.name, descriptor.full_name):
                return descriptor
        logger.debug(
            f"{file_descriptor.name} declares {sorted(file_descriptor.message_types_by_name)}, not {name}"
        )
    raise MessageNotFoundError("message not found")


def new_message(descriptor: Descriptor) -> Message:
    """Create an empty, mutable message of the given type."""
    return message_factory.GetMessageClass(descriptor)()


def resolve_type(
    file_access: FileAccess,
    schema_path: str,
    message_type_name: str,
    import_paths: Sequence[str] = DEFAULT_IMPORT_PATHS,
    compiler: Optional[ProtocSchemaCompiler] = None,
) -> Message:
    """Compile *schema_path* and return an empty *message_type_name* message.

    Raises:
        SchemaCompileError: If the schema or one of its imports fails to compile
        MessageNotFoundError: If no compiled file declares the message
    """
    if compiler is None:
        compiler = ProtocSchemaCompiler(file_access, import_paths)

    file_descriptors = compiler.compile(schema_path)
    descriptor = find_message_descriptor(file_descriptors, message_type_name)
    logger.debug(f"Resolved {message_type_name} to {descriptor.full_name} in {descriptor.file.name}")
    return new_message(descriptor)
