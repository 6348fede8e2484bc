"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type reported for stored files.

In the file store the MIME type does two jobs:

1. LABELLING - GET and HEAD report it in the Content-Type header so the
   client knows how to interpret the bytes.

2. GATING - only files that resolve to text/plain accept POST (append).
   Appending arbitrary bytes to an image or an HTML page would silently
   corrupt it, so those targets answer 415 Unsupported Media Type and
   OPTIONS leaves POST out of the Allow header.

    ┌────────────────────────────────────────────────────────────────────┐
    │                    LOOKUP FLOW                                     │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   "public/Notes.TXT"                                               │
    │          │                                                          │
    │          ▼  Path.suffix.lower()                                    │
    │       ".txt"                                                       │
    │          │                                                          │
    │          ▼  MIME_TYPES.get(...)                                    │
    │     "text/plain"   (or application/octet-stream if unknown)        │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

The table is wrapped in a MappingProxyType: it is built once at import and
shared read-only by every worker thread, so no locking is needed.

=============================================================================
"""

from pathlib import Path
from types import MappingProxyType
from typing import Optional


MIME_TYPES = MappingProxyType({
    # ─────────────────────────────────────────────────────────────────────
    # Text
    # ─────────────────────────────────────────────────────────────────────
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".csv": "text/csv",
    ".md": "text/markdown",

    # ─────────────────────────────────────────────────────────────────────
    # Data
    # ─────────────────────────────────────────────────────────────────────
    ".json": "application/json",
    ".xml": "application/xml",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",

    # ─────────────────────────────────────────────────────────────────────
    # Images
    # ─────────────────────────────────────────────────────────────────────
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
})

DEFAULT_MIME_TYPE = "application/octet-stream"

PLAIN_TEXT = "text/plain"


def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or name with extension
        default: Fallback when the extension is unknown.
                 Uses application/octet-stream if not specified.

    Returns:
        The MIME type string

    Examples:
        >>> get_mime_type("public/notes.txt")
        'text/plain'
        >>> get_mime_type("/srv/store/INDEX.HTML")
        'text/html'
        >>> get_mime_type("archive.unknown")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()  # .TXT → .txt
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)


def is_plain_text(path: str | Path) -> bool:
    """Check whether a path resolves to text/plain (the only appendable type)."""
    return get_mime_type(path) == PLAIN_TEXT
