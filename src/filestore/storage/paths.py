"""
=============================================================================
PATH RESOLUTION
=============================================================================

Maps a decoded URL path to a file under the store root.

    URL path                     Resolved path
    ─────────────────────────    ─────────────────────────────────────
    /notes.txt               →   /srv/public/notes.txt
    /docs/a%20b.txt (decoded)→   /srv/public/docs/a b.txt
    /                        →   /srv/public            (the root itself)
    /../etc/passwd           →   PathTraversalError     (outside root)
    /docs/                   →   NotFound               (not a file path)

=============================================================================
PATH TRAVERSAL
=============================================================================

Naively concatenating root + URL path lets a client walk out of the root:

    GET /../../etc/passwd HTTP/1.1
        root = /srv/public
        root + path = /srv/public/../../etc/passwd  →  /etc/passwd

The resolver uses resolve-and-verify:

    1. Join the path onto the absolute root and collapse ".." lexically
    2. Check the joined path is still inside the root with relative_to()
    3. Canonicalize it with Path.resolve() (follows symlinks) and check
       the real location is inside the root too
    4. Reject anything else BEFORE any read, write or delete happens

The rejection is a NotFound subclass, so the client sees a plain 404.

The checks run on the canonical path, but the returned path is the
joined one. File operations act on exactly what the client named:

    DELETE /link.txt     link.txt → notes.txt (inside root)
        unlinks link.txt, notes.txt is kept

    DELETE /notes.txt/   trailing slash on a file
        NotFound, notes.txt is kept

=============================================================================
"""

import logging
import os
from pathlib import Path

from ..errors import NotFound, PathTraversalError


logger = logging.getLogger(__name__)


class PathResolver:
    """
    Resolves URL paths against a fixed root directory.

    Usage:
        resolver = PathResolver("public")
        resolver.resolve("/notes.txt")   # Path("/abs/public/notes.txt")
    """

    def __init__(self, root_dir: str | Path):
        """
        Args:
            root_dir: Directory exposed by the store. Must exist.

        Raises:
            ValueError: If root_dir is not an existing directory.
        """
        # Resolve once up front so the containment check compares like with like
        self.root_dir = Path(root_dir).resolve()

        if not self.root_dir.is_dir():
            raise ValueError(f"Store root directory does not exist: {root_dir}")

    def resolve(self, url_path: str) -> Path:
        """
        Resolve a decoded URL path to a filesystem path inside the root.

        Args:
            url_path: Percent-decoded path, query already removed.

        Returns:
            Absolute, lexically normalized path inside the root directory.
            Symlinks in it are NOT followed, so a DELETE removes the link
            rather than the file it points to.

        Raises:
            NotFound: If a non-root path ends with "/".
            PathTraversalError: If the path escapes the root, lexically or
                                through a symlink, or cannot be
                                represented on this filesystem.
        """
        relative = url_path.lstrip("/")

        # "notes.txt/" names a directory; the file operations would drop the slash
        if relative.endswith("/"):
            raise NotFound(f"Not a file path: {url_path!r}")

        target = Path(os.path.normpath(self.root_dir / relative))
        self._check_inside_root(target, url_path)

        try:
            real = target.resolve()
        except (OSError, ValueError) as e:
            # Embedded NUL bytes, symlink loops, over-long names
            raise PathTraversalError(f"Unresolvable path: {url_path!r}") from e

        self._check_inside_root(real, url_path)
        return target

    def _check_inside_root(self, path: Path, url_path: str) -> None:
        try:
            path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {url_path!r}")
            raise PathTraversalError(f"Path escapes store root: {url_path!r}") from None
