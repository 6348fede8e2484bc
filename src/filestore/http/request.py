"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes received on a connection into an HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    PUT /notes/today.txt?draft=1 HTTP/1.1\r\n                   │ │
    │  │    ─┬─ ────────────┬─────────── ────┬────                      │ │
    │  │     │              │                │                           │ │
    │  │   Method         Target          Version                        │ │
    │  │                    │                                            │ │
    │  │         ┌──────────┴──────────┐                                │ │
    │  │       Path                 Query                                │ │
    │  │   /notes/today.txt        draft=1   (never used for lookup)    │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADER LINES (kept verbatim) ─────────────────────────────────┐ │
    │  │    Host: localhost:3000\r\n                                    │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADER TERMINATOR ────────────────────────────────────────────┐ │
    │  │    \r\n        (the blank line; \r\n\r\n in the byte stream)   │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (raw bytes) ─────────────────────────────────────────────┐ │
    │  │    hello                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT THE FILE STORE KEEPS
=============================================================================

The dispatcher only ever needs three things: the method, the decoded path,
and the body bytes. Header lines are preserved exactly as received but are
never interpreted here. The one exception lives in the connection layer,
which looks for Content-Length to decide when the body has fully arrived.

Parsing is lenient:

    - No terminator yet        → parse() returns None ("incomplete")
    - Empty request line       → method None  → 405 downstream
    - Request line w/o target  → target None  → path "/"
    - Unknown HTTP version     → kept as-is, never checked

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict
from urllib.parse import parse_qs, urlsplit, unquote


HEADER_TERMINATOR = b"\r\n\r\n"
LINE_SEPARATOR = "\r\n"


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Frozen: built once per connection and never modified afterwards.

    Attributes:
        method:         Request method exactly as sent ("GET", "PUT", ...),
                        or None when the request line had no method token.
        path:           Percent-decoded path without the query string.
                        Always starts with "/".
        target:         Raw request target as sent ("/a%20b.txt?x=1").
        query:          Raw query string ("x=1"), empty if absent.
        version:        Protocol token from the request line, if any.
        header_lines:   Header lines in arrival order, unparsed.
        body:           Every byte after the header terminator.
        client_address: (ip, port) of the peer, for logging.
    """

    method: Optional[str]
    path: str = "/"
    target: Optional[str] = None
    query: str = ""
    version: Optional[str] = None
    header_lines: tuple[str, ...] = ()
    body: bytes = b""
    client_address: tuple[str, int] = field(default=("", 0), compare=False)

    @property
    def query_params(self) -> Dict[str, list[str]]:
        """
        Parsed query string as a dict of lists.

        "?a=1&a=2&b=3" → {"a": ["1", "2"], "b": ["3"]}
        """
        return parse_qs(self.query, keep_blank_values=True)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    The parser is stateless: it looks at the cumulative bytes received so
    far and either returns a request or reports that the header block is
    not complete yet. Accumulating the bytes is the connection's job.

        data = b"GET /a.txt HTTP/1.1\r\nHost: x\r\n\r\n"
        request = RequestParser().parse(data)
        request.method   # "GET"
        request.path     # "/a.txt"
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> Optional[HTTPRequest]:
        """
        Parse cumulative request bytes.

        Args:
            data: All bytes received on the connection so far.
            client_address: Peer (ip, port), carried through for logging.

        Returns:
            The parsed request, or None if no header terminator is present.
        """
        # =====================================================================
        # STEP 1: Find the header/body boundary
        # =====================================================================
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            return None

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + len(HEADER_TERMINATOR):]

        # =====================================================================
        # STEP 2: Request line, then verbatim header lines
        # =====================================================================
        lines = header_section.split(LINE_SEPARATOR)
        method, target, version = self._parse_request_line(lines[0])

        # =====================================================================
        # STEP 3: Split the target into decoded path + raw query
        # =====================================================================
        path, query = self._split_target(target)

        return HTTPRequest(
            method=method,
            path=path,
            target=target,
            query=query,
            version=version,
            header_lines=tuple(lines[1:]),
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str,
    ) -> tuple[Optional[str], Optional[str], Optional[str]]:
        """
        Split the request line on single spaces.

        "GET /a.txt HTTP/1.1" → ("GET", "/a.txt", "HTTP/1.1")
        "GET"                 → ("GET", None, None)
        ""                    → (None, None, None)
        """
        tokens = line.split(" ")
        method = tokens[0] or None
        target = tokens[1] if len(tokens) > 1 and tokens[1] else None
        version = tokens[2] if len(tokens) > 2 and tokens[2] else None
        return method, target, version

    def _split_target(self, target: Optional[str]) -> tuple[str, str]:
        """
        Separate the path from the query and percent-decode the path.

        "/my%20notes.txt?v=2" → ("/my notes.txt", "v=2")
        """
        if not target:
            return "/", ""

        if target.startswith("/"):
            # Origin form. Split by hand so "//x" stays a path, not a host.
            raw_path, _, query = target.partition("?")
            raw_path = raw_path.split("#", 1)[0]
            query = query.split("#", 1)[0]
        else:
            # Absolute form: "http://host:3000/a.txt?x=1"
            parsed = urlsplit(target)
            raw_path, query = parsed.path, parsed.query

        path = unquote(raw_path) or "/"
        if not path.startswith("/"):
            path = "/" + path
        return path, query


def declared_content_length(header_lines: tuple[str, ...] | list[str]) -> Optional[int]:
    """
    Find the Content-Length declared in a header block.

    Used by the connection to know when a request body has fully arrived.
    The dispatcher never looks at headers.

    Returns:
        The declared length, or None if absent or not a valid number.
    """
    for line in header_lines:
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "content-length":
            try:
                length = int(value.strip())
            except ValueError:
                return None
            return length if length >= 0 else None
    return None


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> Optional[HTTPRequest]:
    """
    Parse request bytes with a default parser.

    Convenience for tests and one-off parsing.
    """
    return RequestParser().parse(data, client_address)
