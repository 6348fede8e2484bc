"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for exactly one request/response cycle.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does not preserve message boundaries. A client that sends one request
may have it delivered as any number of recv() chunks:

    Client sends:
        PUT /notes.txt HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello

    Server might receive:
        recv() → "PUT /notes.tx"
        recv() → "t HTTP/1.1\r\nContent-Length: 5\r\n\r\nhel"
        recv() → "lo"

A server that assumes one recv() == one request silently drops the first
case and truncates the body in the second. So every delivery is appended
to a per-connection buffer, and the buffer is re-scanned each time:

    ┌─────────────────────────────────────────────────────────────────┐
    │                    read_request() Flow                           │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   ┌──────────────────────┐                                      │
    │   │ while no \r\n\r\n:   │   ← header block not complete yet    │
    │   │   recv() → buffer    │     (peer closed? → return None)     │
    │   └──────────┬───────────┘                                      │
    │              │                                                   │
    │   ┌──────────▼───────────┐                                      │
    │   │ Content-Length line? │   ← framing only, nothing else in    │
    │   └──────────┬───────────┘     the headers is looked at         │
    │              │                                                   │
    │   ┌──────────▼───────────┐                                      │
    │   │ while body short:    │   ← peer half-closed? take what      │
    │   │   recv() → buffer    │     arrived as the body              │
    │   └──────────┬───────────┘                                      │
    │              │                                                   │
    │   ┌──────────▼───────────┐                                      │
    │   │ return buffer        │                                      │
    │   └──────────────────────┘                                      │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

There is no keep-alive and no pipelining. Once the response is written the
connection is closed, whatever the method or status:

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
     │         │                                      ▲
     └─────────┴──────────── (transport error) ───────┘

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..http.request import HEADER_TERMINATOR, LINE_SEPARATOR, declared_content_length


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and close() idempotence."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Accumulating request bytes
    PROCESSING = "processing"  # Request complete, dispatcher running
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


class RequestTooLargeError(Exception):
    """The buffered request grew past max_request_size."""


@dataclass
class Connection:
    """
    A client connection carrying a single request.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used to correlate log lines.
        state: Current lifecycle state.
        created_at: When the connection was accepted.
        last_activity: Last successful recv/send.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    timeout: Optional[float] = None
    max_request_size: int = 10 * 1024 * 1024

    # Bytes received so far
    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        # Blocking socket; timeout=None means block forever
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    @property
    def buffered(self) -> bytes:
        """Bytes received so far (read-only view for diagnostics and tests)."""
        return self._buffer

    # =========================================================================
    # READING
    # =========================================================================

    def feed(self, chunk: bytes) -> None:
        """
        Append one delivery to the buffer.

        Raises:
            RequestTooLargeError: If the buffer exceeds max_request_size.
        """
        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLargeError(f"Request too large: {len(self._buffer)} bytes")

    def has_complete_headers(self) -> bool:
        return HEADER_TERMINATOR in self._buffer

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete request from the socket.

        Returns:
            The request bytes (request line, headers, terminator, body),
            or None if the peer closed before finishing the header block.

        Raises:
            RequestTooLargeError: If the request exceeds max_request_size.
            OSError: On transport failure, including socket timeouts.
        """
        self.state = ConnectionState.READING

        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Accumulate until the header block is complete
        # ─────────────────────────────────────────────────────────────────
        while not self.has_complete_headers():
            chunk = self._recv()
            if not chunk:
                if self._buffer:
                    logger.debug(
                        f"[{self.id}] Peer closed with {len(self._buffer)} bytes "
                        f"and no header terminator"
                    )
                return None
            self.feed(chunk)

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: Wait for a declared body, if any
        # ─────────────────────────────────────────────────────────────────
        header_end = self._buffer.find(HEADER_TERMINATOR)
        body_start = header_end + len(HEADER_TERMINATOR)

        header_lines = (
            self._buffer[:header_end]
            .decode("utf-8", errors="replace")
            .split(LINE_SEPARATOR)[1:]
        )
        expected = declared_content_length(header_lines)

        if expected is not None:
            while len(self._buffer) - body_start < expected:
                chunk = self._recv()
                if not chunk:
                    logger.debug(
                        f"[{self.id}] Peer closed mid-body: "
                        f"{len(self._buffer) - body_start}/{expected} bytes"
                    )
                    break
                self.feed(chunk)

        return self._buffer

    def _recv(self) -> bytes:
        data = self.socket.recv(self.buffer_size)
        if data:
            self.last_activity = time.time()
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the serialized response with sendall().

        Returns:
            True if every byte was handed to the OS, False if the peer is gone.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            self.last_activity = time.time()
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response
        2. Drain whatever the client still has in flight
        3. close() releases the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
