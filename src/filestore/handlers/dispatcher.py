"""
=============================================================================
METHOD DISPATCHER
=============================================================================

Maps an HTTP method on a path to an operation on a file.

=============================================================================
METHOD TABLE
=============================================================================

    ┌─────────┬────────────────────────────┬───────────────────────────────┐
    │ Method  │ Action                     │ Outcome                       │
    ├─────────┼────────────────────────────┼───────────────────────────────┤
    │ GET     │ read whole file            │ 200 file bytes  │ 404         │
    │ HEAD    │ stat file                  │ 200 no body     │ 404 no body │
    │ PUT     │ create or truncate + write │ 200 text        │ 500         │
    │ POST    │ append (text/plain only)   │ 200 text │ 415 │ 500         │
    │ DELETE  │ unlink                     │ 200 text        │ 404         │
    │ OPTIONS │ nothing                    │ 200 + Allow                   │
    │ other   │ nothing                    │ 405                           │
    └─────────┴────────────────────────────┴───────────────────────────────┘

Failure handling is coarse:

    - ANY storage failure on GET / HEAD / DELETE → 404
      (missing, permission denied, is a directory: all the same)
    - ANY storage failure on PUT / POST          → 500

Each handler raises from the error taxonomy; dispatch() is the single place
where an exception becomes an error response.

=============================================================================
OPTIONS POLICY
=============================================================================

    Allow: GET, HEAD, PUT, DELETE          for every target
    Allow: GET, HEAD, PUT, DELETE, POST    when the target is text/plain

OPTIONS never touches the filesystem, so the answer depends only on the
file extension, not on whether the file exists.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Callable, Dict

from ..errors import (
    FileStoreError,
    NotFound,
    MethodNotAllowed,
    UnsupportedMediaType,
    InternalIOFailure,
)
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, text_response, file_response, empty_response
from ..http.status_codes import HTTPStatus
from ..http.mime_types import get_mime_type, is_plain_text
from ..http.error_page import DEFAULT_IMAGE_BASE, error_response
from ..storage import FileSystem, PathResolver, WriteMode, StorageError


logger = logging.getLogger(__name__)


BASE_ALLOWED_METHODS = ("GET", "HEAD", "PUT", "DELETE")

Handler = Callable[[HTTPRequest, Path], HTTPResponse]


def allowed_methods(path: str | Path) -> list[str]:
    """
    Methods advertised by OPTIONS for a target.

    >>> allowed_methods("/notes.txt")
    ['GET', 'HEAD', 'PUT', 'DELETE', 'POST']
    >>> allowed_methods("/index.html")
    ['GET', 'HEAD', 'PUT', 'DELETE']
    """
    methods = list(BASE_ALLOWED_METHODS)
    if is_plain_text(path):
        methods.append("POST")
    return methods


class MethodDispatcher:
    """
    Turns a parsed request into a response by acting on the store.

    Stateless between calls: the same dispatcher serves every connection
    concurrently, so it must never keep per-request data on self.

    Usage:
        dispatcher = MethodDispatcher(FileSystem(), PathResolver("public"))
        response = dispatcher.dispatch(request)
        conn.send_response(response.to_bytes())
    """

    def __init__(
        self,
        filesystem: FileSystem,
        resolver: PathResolver,
        error_image_base: str = DEFAULT_IMAGE_BASE,
    ):
        self.filesystem = filesystem
        self.resolver = resolver
        self.error_image_base = error_image_base

        # Keyed by the exact method token; "get" is not "GET"
        self._handlers: Dict[str, Handler] = {
            "GET": self._get,
            "HEAD": self._head,
            "PUT": self._put,
            "POST": self._post,
            "DELETE": self._delete,
            "OPTIONS": self._options,
        }

    @property
    def supported_methods(self) -> list[str]:
        return list(self._handlers)

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Handle one request.

        Flow:
            1. Look up the handler for the method (405 if none)
            2. Resolve the path inside the store root (404 if it escapes)
            3. Run the handler
            4. Convert any FileStoreError into its error response

        Returns:
            The response to send. Never raises FileStoreError.
        """
        try:
            handler = self._handlers.get(request.method)
            if handler is None:
                raise MethodNotAllowed(f"Unsupported method: {request.method!r}")

            target = self.resolver.resolve(request.path)
            return handler(request, target)

        except FileStoreError as e:
            logger.debug(f"{request.method} {request.path} failed: {e}")
            return self._error(request, e)

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def _get(self, request: HTTPRequest, target: Path) -> HTTPResponse:
        try:
            content = self.filesystem.read_file(target)
        except StorageError as e:
            raise NotFound(str(e)) from e

        return file_response(content, get_mime_type(target))

    def _head(self, request: HTTPRequest, target: Path) -> HTTPResponse:
        if not self.filesystem.stat_file(target):
            raise NotFound(f"No such file: {target}")

        return empty_response(get_mime_type(target))

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def _put(self, request: HTTPRequest, target: Path) -> HTTPResponse:
        try:
            self.filesystem.write_file(target, request.body, WriteMode.OVERWRITE)
        except StorageError as e:
            raise InternalIOFailure(str(e)) from e

        logger.info(f"Stored {len(request.body)} bytes at {request.path}")
        return text_response("File created or overwritten")

    def _post(self, request: HTTPRequest, target: Path) -> HTTPResponse:
        # Checked before any I/O: a rejected POST must not create the file
        if not is_plain_text(target):
            raise UnsupportedMediaType(f"Cannot append to {get_mime_type(target)}")

        try:
            self.filesystem.write_file(target, request.body, WriteMode.APPEND)
        except StorageError as e:
            raise InternalIOFailure(str(e)) from e

        logger.info(f"Appended {len(request.body)} bytes to {request.path}")
        return text_response("Data appended")

    def _delete(self, request: HTTPRequest, target: Path) -> HTTPResponse:
        try:
            self.filesystem.delete_file(target)
        except StorageError as e:
            raise NotFound(str(e)) from e

        logger.info(f"Deleted {request.path}")
        return text_response("File deleted")

    # =========================================================================
    # CAPABILITY DISCOVERY
    # =========================================================================

    def _options(self, request: HTTPRequest, target: Path) -> HTTPResponse:
        return empty_response(
            "text/plain",
            extra_headers={"Allow": ", ".join(allowed_methods(target))},
        )

    # =========================================================================
    # ERRORS
    # =========================================================================

    def _error(self, request: HTTPRequest, error: FileStoreError) -> HTTPResponse:
        """
        Build the response for a failed request.

        HEAD responses never carry a body, so a missing file on HEAD is a
        bare 404 labelled with the file's own MIME type. Everything else
        gets the decorative HTML page.
        """
        if request.method == "HEAD" and error.status == HTTPStatus.NOT_FOUND:
            return empty_response(get_mime_type(request.path), status=HTTPStatus.NOT_FOUND)

        return error_response(error.status, self.error_image_base)

    def internal_error(self) -> HTTPResponse:
        """Response for a crash outside the normal failure taxonomy."""
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, self.error_image_base)
