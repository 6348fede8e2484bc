"""
=============================================================================
CORE - Transport and concurrency
=============================================================================

    socket_server.py  Listening socket + accept loop
    connection.py     One client socket, one request, buffered reads
    thread_pool.py    Worker threads that run connection handlers

Nothing here knows about files or HTTP methods; it moves bytes and
schedules work.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLargeError
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLargeError",
    "ThreadPool",
]
