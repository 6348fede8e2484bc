"""
=============================================================================
FILESYSTEM COLLABORATOR
=============================================================================

The four file operations the store needs, each with a success outcome and
a typed failure outcome:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      FILESYSTEM INTERFACE                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read_file(path)              → bytes                               │
    │                                  StorageNotFoundError | StorageIOError│
    │                                                                      │
    │   write_file(path, data, mode) → None                                │
    │                                  StorageIOError                      │
    │                                                                      │
    │   delete_file(path)            → None                                │
    │                                  StorageNotFoundError | StorageIOError│
    │                                                                      │
    │   stat_file(path)              → bool  (is it an existing file?)     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY WRAP OSError?
=============================================================================

The dispatcher collapses failures: any read/delete problem is
a 404, any write problem is a 500. If it caught OSError directly, telling
"permission denied" apart from "not found" later would mean touching every
handler. Translating OSError into a small hierarchy here keeps that future
change in one mapping, and the original OSError stays available as
__cause__ for logging.

=============================================================================
CONCURRENCY
=============================================================================

There is NO locking. Two requests writing the same path at the same time
race: for PUT the last writer wins, for POST the appended chunks may
interleave. Callers must not assume writes to one path are serialized.

=============================================================================
"""

import logging
from enum import Enum
from pathlib import Path


logger = logging.getLogger(__name__)


class WriteMode(Enum):
    """How write_file treats existing content."""
    OVERWRITE = "wb"   # create or truncate
    APPEND = "ab"      # create or append


class StorageError(Exception):
    """Base class for filesystem failures."""

    def __init__(self, message: str, path: Path = None):
        super().__init__(message)
        self.path = path


class StorageNotFoundError(StorageError):
    """The path does not exist."""


class StorageIOError(StorageError):
    """The operation failed for any reason other than absence."""


class FileSystem:
    """
    Thin wrapper over pathlib for the store's file operations.

    All paths are expected to come from PathResolver; this class does no
    validation of its own.
    """

    def read_file(self, path: Path) -> bytes:
        """Read a whole file into memory."""
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"No such file: {path}", path) from e
        except OSError as e:
            raise StorageIOError(f"Cannot read {path}: {e}", path) from e

    def write_file(self, path: Path, data: bytes, mode: WriteMode = WriteMode.OVERWRITE) -> None:
        """
        Write bytes to a file, creating it if needed.

        Parent directories are NOT created; writing into a missing
        directory is an error.
        """
        try:
            with open(path, mode.value) as f:
                f.write(data)
        except OSError as e:
            raise StorageIOError(f"Cannot write {path}: {e}", path) from e

        logger.debug(f"Wrote {len(data)} bytes to {path} ({mode.name.lower()})")

    def delete_file(self, path: Path) -> None:
        """Remove a file. Directories are never removed."""
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"No such file: {path}", path) from e
        except OSError as e:
            raise StorageIOError(f"Cannot delete {path}: {e}", path) from e

    def stat_file(self, path: Path) -> bool:
        """Check that the path exists and is a regular file."""
        try:
            return path.is_file()
        except OSError:
            return False
