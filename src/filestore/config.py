"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file store server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m filestore --port 4000 --root ./data             │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── FILESTORE_PORT=4000 python -m filestore                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The protocol engine itself has no knobs: there is nothing to configure
about how a request is parsed or how a response is framed. Everything
here is about the surroundings (where to listen, which directory to
expose, how many threads, how much to log).

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the file store server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, buffer_size, timeout, max_request_size

    STORE
    - root_dir, error_image_base

    THREADING
    - min_workers, max_workers, queue_size

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 3000
    """TCP port. 0 lets the OS pick a free one (useful in tests)."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = wait forever for the rest of a request. A client that never
    finishes its header block then holds its worker indefinitely.
    """

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """
    Largest request (headers + body) a connection will buffer.
    Bigger requests are dropped without a response.
    """

    # ─────────────────────────────────────────────────────────────────────
    # STORE SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "public"
    """Directory exposed by the store. Every URL path resolves inside it."""

    error_image_base: str = "https://http.cat"
    """Base URL of the status-code pictures embedded in error pages."""

    # ─────────────────────────────────────────────────────────────────────
    # THREADING SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    queue_size: int = 100
    """Connections waiting for a worker. When full, new ones are closed."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """Access log format: 'text' (Apache style) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FILESTORE_HOST         Server host (default: 127.0.0.1)
        FILESTORE_PORT         Server port (default: 3000)
        FILESTORE_ROOT         Store root directory (default: public)
        FILESTORE_WORKERS      Max worker threads (default: 16), also caps
                               min_workers
        FILESTORE_TIMEOUT      Socket timeout in seconds (default: none)
        FILESTORE_LOG_LEVEL    Logging level (default: INFO)
        FILESTORE_LOG_FORMAT   Access log format (default: text)

        =====================================================================
        """
        timeout = os.getenv("FILESTORE_TIMEOUT")
        workers = int(os.getenv("FILESTORE_WORKERS", str(cls.max_workers)))
        return cls(
            host=os.getenv("FILESTORE_HOST", "127.0.0.1"),
            port=int(os.getenv("FILESTORE_PORT", "3000")),
            root_dir=os.getenv("FILESTORE_ROOT", "public"),
            min_workers=min(cls.min_workers, workers),
            max_workers=workers,
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("FILESTORE_LOG_LEVEL", "INFO"),
            log_format=os.getenv("FILESTORE_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast at startup rather than on the first request.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if not self.root_dir:
            raise ValueError("root_dir must not be empty")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format: {self.log_format}. Use 'text' or 'json'.")
