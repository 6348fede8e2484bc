"""
=============================================================================
FILE STORE SERVER
=============================================================================

Wires the components together and owns the per-connection request cycle.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer (main thread)                                         │
    │       │ accept()                                                     │
    │       ▼                                                              │
    │   ThreadPool.submit(_process_connection, conn)                       │
    │       │                                                              │
    │       ▼  (worker thread)                                             │
    │   Connection.read_request()     accumulate until complete            │
    │       │                                                              │
    │       ▼                                                              │
    │   RequestParser.parse()         method, decoded path, body           │
    │       │                                                              │
    │       ▼                                                              │
    │   MethodDispatcher.dispatch()   PathResolver + FileSystem            │
    │       │                                                              │
    │       ▼                                                              │
    │   HTTPResponse.to_bytes()       status line, headers, body           │
    │       │                                                              │
    │       ▼                                                              │
    │   Connection.send_response() → Connection.close()                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Exactly one request is dispatched per connection; the connection is
closed afterwards no matter the outcome.

=============================================================================
FAILURE HANDLING
=============================================================================

    Peer closes before \r\n\r\n      → close, no response (debug log)
    Request > max_request_size       → close, no response (warning)
    Socket error / timeout           → close, no response (warning)
    Dispatcher raises unexpectedly   → 500 error page (logged with trace)
    Filesystem failure               → handled inside the dispatcher

=============================================================================
"""

import logging
import time
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool, RequestTooLargeError
from .handlers import MethodDispatcher
from .http import RequestParser, HTTPResponse
from .storage import FileSystem, PathResolver


logger = logging.getLogger(__name__)


class FileStoreServer:
    """
    HTTP/1.1 server exposing a directory as a resource store.

    Usage:
        server = FileStoreServer(ServerConfig(port=3000, root_dir="public"))
        server.run()   # Blocks until Ctrl+C / SIGTERM

    Embedding (tests, other apps):
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(5)
        host, port = server.address
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().

        Raises:
            ValueError: If the configuration is invalid or the root
                        directory does not exist.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # TRANSPORT
        # ─────────────────────────────────────────────────────────────────
        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
            overflow=True,
        )

        # ─────────────────────────────────────────────────────────────────
        # PROTOCOL + STORE
        # ─────────────────────────────────────────────────────────────────
        self._parser = RequestParser()
        self._dispatcher = MethodDispatcher(
            filesystem=FileSystem(),
            resolver=PathResolver(self.config.root_dir),
            error_image_base=self.config.error_image_base,
        )
        self._access_log = AccessLogger(log_format=self.config.log_format)

    @property
    def dispatcher(self) -> MethodDispatcher:
        return self._dispatcher

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port); the real port once listening, even with port=0."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._thread_pool.start()

        logger.info(
            f"Serving {self._dispatcher.resolver.root_dir} "
            f"on {self.config.host}:{self.config.port}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. Returns immediately."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("filestore").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a freshly accepted connection to the worker pool."""
        if not self._thread_pool.submit(self._process_connection, args=(conn,)):
            logger.warning(f"[{conn.id}] Worker queue full, dropping connection from {conn.client_ip}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Run the full request cycle for one connection (worker thread).
        """
        with conn:
            try:
                raw_request = conn.read_request()
            except RequestTooLargeError as e:
                logger.warning(f"[{conn.id}] {e}, dropping connection")
                return
            except OSError as e:
                # Resets, timeouts: nothing can be sent back reliably
                logger.warning(f"[{conn.id}] Socket error while reading: {e}")
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Closed before a complete request arrived")
                return

            start_time = time.time()
            request = self._parser.parse(raw_request, conn.address)
            conn.state = ConnectionState.PROCESSING

            response = self.handle_request(request, conn.id)

            conn.send_response(response.to_bytes())
            self._access_log.log(conn.id, request, response, start_time)

    def handle_request(self, request, connection_id: str = "-") -> HTTPResponse:
        """
        Dispatch one parsed request, turning unexpected crashes into a 500.
        """
        try:
            return self._dispatcher.dispatch(request)
        except Exception as e:
            logger.exception(f"[{connection_id}] Handler error: {e}")
            return self._dispatcher.internal_error()


def create_server(config: Optional[ServerConfig] = None) -> FileStoreServer:
    """
    Create a file store server.

    Example:
        server = create_server(ServerConfig(root_dir="/srv/files"))
        server.run()
    """
    return FileStoreServer(config)
