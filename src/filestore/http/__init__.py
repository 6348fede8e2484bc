"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows what HTTP/1.1 looks like on the wire:

    request.py       Raw bytes → HTTPRequest (method, path, body)
    response.py      HTTPResponse → raw bytes (status line, headers, body)
    status_codes.py  The five status codes the store can emit
    mime_types.py    File extension → Content-Type
    error_page.py    Decorative HTML body for error responses

Nothing in this package touches sockets or the filesystem.

=============================================================================
"""

from .request import HTTPRequest, RequestParser, parse_request, declared_content_length
from .response import HTTPResponse, text_response, file_response, empty_response
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, is_plain_text
from .error_page import build_error_body, error_response

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",
    "declared_content_length",

    # Response building
    "HTTPResponse",
    "text_response",
    "file_response",
    "empty_response",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
    "is_plain_text",

    # Error pages
    "build_error_body",
    "error_response",
]
