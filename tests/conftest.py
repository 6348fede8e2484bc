"""
pytest configuration and fixtures.
"""

import socket
import threading
from dataclasses import dataclass, field
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from filestore import FileStoreServer, ServerConfig
from filestore.handlers import MethodDispatcher
from filestore.storage import FileSystem, PathResolver


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample GET with a query string and a couple of headers."""
    return (
        b"GET /notes.txt?version=2 HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_put_request() -> bytes:
    """Sample PUT carrying a small body."""
    body = b"hello"
    return (
        b"PUT /notes.txt HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"Content-Length: %d\r\n"
        b"\r\n" % len(body)
    ) + body


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    """Empty store root directory."""
    root = tmp_path / "public"
    root.mkdir()
    return root


@pytest.fixture
def dispatcher(store_root: Path) -> MethodDispatcher:
    """Dispatcher over a temporary store root."""
    return MethodDispatcher(FileSystem(), PathResolver(store_root))


# =============================================================================
# LIVE SERVER
# =============================================================================

@dataclass
class RawResponse:
    """An HTTP response as received on the wire."""
    status: int
    reason: str
    headers: dict = field(default_factory=dict)
    header_names: list = field(default_factory=list)
    body: bytes = b""
    raw: bytes = b""


def parse_response(raw: bytes) -> RawResponse:
    """Split raw response bytes into status, headers and body."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    _, code, reason = lines[0].split(" ", 2)

    headers = {}
    names = []
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
        names.append(name.strip())

    return RawResponse(int(code), reason, headers, names, body, raw)


class TestServer:
    """File store server running in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: FileStoreServer, root: Path):
        self.server = server
        self.root = root
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock

    def send_raw(self, *chunks: bytes, pause: float = 0.0) -> RawResponse:
        """
        Send chunks on one connection and read until the server closes.

        With pause > 0 the chunks are sent as separate deliveries.
        """
        import time

        with self.connect() as sock:
            for i, chunk in enumerate(chunks):
                if i and pause:
                    time.sleep(pause)
                sock.sendall(chunk)
            return parse_response(read_until_closed(sock))

    def request(self, method: str, path: str, body: bytes = b"") -> RawResponse:
        head = f"{method} {path} HTTP/1.1\r\nHost: localhost\r\n"
        if body:
            head += f"Content-Length: {len(body)}\r\n"
        return self.send_raw(head.encode() + b"\r\n" + body)


def read_until_closed(sock: socket.socket) -> bytes:
    data = b""
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            return data
        data += chunk


@pytest.fixture
def live_server(store_root: Path) -> Generator[TestServer, None, None]:
    """A running file store serving store_root on a free port."""
    server = FileStoreServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=str(store_root),
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        log_level="WARNING",
    ))

    test_srv = TestServer(server, store_root)
    test_srv.start()

    yield test_srv

    test_srv.stop()
