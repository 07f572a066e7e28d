"""File access layer.

The validator and the schema compiler only ever read files through a
:class:`FileAccess` instance, so tests can substitute an in-memory store.
"""

from .file_access import FileAccess, InMemoryFileAccess, LocalFileAccess

__all__ = [
    "FileAccess",
    "InMemoryFileAccess",
    "LocalFileAccess",
]
