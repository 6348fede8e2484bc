"""
=============================================================================
HTTP RESPONSE SERIALIZER
=============================================================================

Builds the bytes the file store writes back to the client.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  │    ────┬─── ─┬─ ─┬─                                            │ │
    │  │     Version Code Phrase                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (always in this order) ───────────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Length: 5\r\n          ← len(body), never supplied  │ │
    │  │    Allow: GET, HEAD, PUT, DELETE\r\n   ← OPTIONS only          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello                  ← raw bytes, never re-encoded        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY CONTENT-LENGTH IS DERIVED, NOT STORED
=============================================================================

The server closes the connection after every response, but clients still
rely on Content-Length to know the body is complete. If the header ever
disagreed with the bytes written, a client would either hang waiting for
bytes that never come or silently truncate the file it downloaded.

HTTPResponse therefore has no content_length field at all. The header is
computed from len(body) at the moment the bytes are produced, so it cannot
drift. Note that len() counts BYTES: "héllo" is 6 bytes in UTF-8, not 5.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"


@dataclass
class HTTPResponse:
    """
    A response waiting to be serialized.

    Attributes:
        status:        Status code (carries its reason phrase).
        content_type:  Value of the Content-Type header.
        body:          Body bytes, written verbatim.
        extra_headers: Headers emitted after Content-Length, in insertion
                       order. In practice only Allow.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = "text/plain"
    body: bytes = b""
    extra_headers: Dict[str, str] = field(default_factory=dict)

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 415 Unsupported Media Type"
        """
        return f"{HTTP_VERSION} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        """Byte length of the body, the only source of Content-Length."""
        return len(self.body)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Add an extra header.

        Returns self for method chaining.
        """
        self.extra_headers[name] = value
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\r\n
            Content-Type: text/plain\r\n
            Content-Length: 13\r\n
            \r\n
            Data appended

        =====================================================================
        """
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {self.content_length}",
        ]

        for name, value in self.extra_headers.items():
            lines.append(f"{name}: {value}")

        # Trailing "" yields the blank line that ends the header block
        lines.append("")
        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"

        return header_bytes + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the shapes of response the dispatcher produces:
#
#     return text_response("File deleted")
#     return file_response(data, "text/plain")
#     return empty_response("text/html", status=HTTPStatus.NOT_FOUND)
#
# =============================================================================

def text_response(
    text: Union[str, bytes],
    status: HTTPStatus = HTTPStatus.OK,
    content_type: str = "text/plain",
) -> HTTPResponse:
    """
    Create a short text response, encoding str bodies as UTF-8.
    """
    body = text.encode("utf-8") if isinstance(text, str) else text
    return HTTPResponse(status=status, content_type=content_type, body=body)


def file_response(content: bytes, content_type: str) -> HTTPResponse:
    """Create a 200 response carrying file bytes."""
    return HTTPResponse(status=HTTPStatus.OK, content_type=content_type, body=content)


def empty_response(
    content_type: str,
    status: HTTPStatus = HTTPStatus.OK,
    extra_headers: Dict[str, str] = None,
) -> HTTPResponse:
    """
    Create a response with no body (HEAD, OPTIONS).

    Content-Length is still sent, and is 0.
    """
    return HTTPResponse(
        status=status,
        content_type=content_type,
        extra_headers=dict(extra_headers or {}),
    )
