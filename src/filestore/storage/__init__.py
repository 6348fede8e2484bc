"""
Storage layer: where URL paths become files.

    paths.py       URL path → absolute path inside the store root
    filesystem.py  read / write / delete / stat with typed failures
"""

from .paths import PathResolver
from .filesystem import (
    FileSystem,
    WriteMode,
    StorageError,
    StorageNotFoundError,
    StorageIOError,
)

__all__ = [
    "PathResolver",
    "FileSystem",
    "WriteMode",
    "StorageError",
    "StorageNotFoundError",
    "StorageIOError",
]
