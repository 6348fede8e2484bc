"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The file store speaks a tiny subset of HTTP. Only five status
codes can ever leave the server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     EMITTED STATUS CODES                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   200 OK                      Every successful operation             │
    │   404 Not Found               Missing file (GET / HEAD / DELETE)     │
    │   405 Method Not Allowed      Anything but the six known methods     │
    │   415 Unsupported Media Type  POST to a file that is not text/plain  │
    │   500 Internal Server Error   Write or append failed                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Status codes are grouped into classes by their first digit:

    2xx  Success       The request was received and carried out
    4xx  Client error  The request cannot be fulfilled as sent
    5xx  Server error  The server failed to fulfill a valid request

Using an IntEnum means a status compares equal to its integer code
(HTTPStatus.NOT_FOUND == 404) while still carrying a name and a phrase.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes emitted by the file store.

    Example:
        >>> HTTPStatus.NOT_FOUND
        <HTTPStatus.NOT_FOUND: 404>
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
        >>> HTTPStatus(415).phrase
        'Unsupported Media Type'
    """

    OK = 200
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    UNSUPPORTED_MEDIA_TYPE = 415
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

        The reason phrase follows the code on the status line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
