"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per handled request, emitted on the "filestore.access" logger.

    TEXT FORMAT (default, Apache style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] "PUT /a.txt" 200 26 1.20ms│
    │ ───────────────────────────────────────────────────────────────────│
    │ IP          Timestamp          Method/Path   Status Size Duration  │
    └─────────────────────────────────────────────────────────────────────┘

    JSON FORMAT (for log aggregators):
    {"connection_id": "a1b2c3d4", "method": "PUT", "path": "/a.txt", ...}

A separate logger name means operators can route or silence access logs
without touching server diagnostics:

    logging.getLogger("filestore.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from typing import Optional

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("filestore.access")


@dataclass
class RequestLog:
    """Structured record of one request/response cycle."""

    connection_id: str
    method: str
    path: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Formats and emits access log entries.

    Usage:
        access = AccessLogger(log_format="json")
        start = time.time()
        response = dispatcher.dispatch(request)
        access.log(conn.id, request, response, start)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def build_entry(
        self,
        connection_id: str,
        request: HTTPRequest,
        response: HTTPResponse,
        start_time: float,
        end_time: Optional[float] = None,
    ) -> RequestLog:
        end_time = end_time if end_time is not None else time.time()
        return RequestLog(
            connection_id=connection_id,
            method=request.method or "-",
            path=request.path,
            client_ip=request.client_address[0] or "-",
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=(end_time - start_time) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def format(self, entry: RequestLog) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    def log(
        self,
        connection_id: str,
        request: HTTPRequest,
        response: HTTPResponse,
        start_time: float,
    ) -> RequestLog:
        """Build, emit and return the entry for one request."""
        entry = self.build_entry(connection_id, request, response, start_time)
        logger.log(self.log_level, self.format(entry))
        return entry
