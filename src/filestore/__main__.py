"""
=============================================================================
FILE STORE CLI ENTRY POINT
=============================================================================

    # Serve ./public on localhost:3000
    python -m filestore

    # Another directory and port
    python -m filestore --root /srv/files --port 8080

    # Listen on all interfaces (for containers)
    python -m filestore --host 0.0.0.0

    # JSON access logs for a log aggregator
    python -m filestore --log-format json

Environment variables (FILESTORE_*) provide the defaults; flags override
them. See ServerConfig.from_env().

=============================================================================
"""

import argparse
import sys
from dataclasses import replace
from typing import Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS, LOG_FORMATS
from .server import FileStoreServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, using defaults for every flag."""
    parser = argparse.ArgumentParser(
        prog="filestore",
        description="Expose a directory as a REST-like file store over HTTP/1.1",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m filestore                          # ./public on 127.0.0.1:3000
  python -m filestore --root ./data -p 8080    # Custom root and port
  python -m filestore --host 0.0.0.0           # Listen on all interfaces
  python -m filestore --log-format json        # JSON access logs
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help="Socket timeout per connection in seconds (default: none)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # STORE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.root_dir,
        help=f"Directory to expose (default: {defaults.root_dir})",
    )

    parser.add_argument(
        "--error-image-base",
        default=defaults.error_image_base,
        help=f"Base URL for error page pictures (default: {defaults.error_image_base})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum worker threads (default: {defaults.max_workers})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})",
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"filestore {__version__}",
    )

    return parser


def config_from_args(argv: Optional[list[str]] = None) -> ServerConfig:
    """Translate environment + command line into a ServerConfig."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return replace(
        defaults,
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        root_dir=args.root,
        error_image_base=args.error_image_base,
        min_workers=min(ServerConfig.min_workers, args.workers),
        max_workers=args.workers,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv: Optional[list[str]] = None):
    """Main CLI entry point."""
    config = config_from_args(argv)

    try:
        server = FileStoreServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
