"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every way a request can fail maps to exactly one HTTP status code. Instead
of passing (status, message) tuples around, handlers raise one of these
exceptions and a single conversion point turns it into a response.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      FAILURE → STATUS MAPPING                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   FileStoreError                                                     │
    │    ├── NotFound ................. 404  GET / HEAD / DELETE failed    │
    │    │    └── PathTraversalError .. 404  target escapes the root       │
    │    ├── MethodNotAllowed ......... 405  unknown or missing method     │
    │    ├── UnsupportedMediaType ..... 415  POST to non text/plain file   │
    │    └── InternalIOFailure ........ 500  PUT / POST write failed       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

All of them are terminal for the request. Nothing is retried, and no state
survives the connection that produced the error.

=============================================================================
"""

from .http.status_codes import HTTPStatus


class FileStoreError(Exception):
    """
    Base class for request-level failures.

    Carries the HTTP status that should be returned to the client.
    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status: HTTPStatus = None):
        super().__init__(message or self.__class__.__name__)
        if status is not None:
            self.status = status


class NotFound(FileStoreError):
    """The resource is absent, unreadable, or not a regular file."""

    status = HTTPStatus.NOT_FOUND


class PathTraversalError(NotFound):
    """
    The decoded URL path resolves outside the store root.

    Reported as 404 so that probing for files outside the root looks
    exactly like asking for a file that does not exist.
    """


class MethodNotAllowed(FileStoreError):
    status = HTTPStatus.METHOD_NOT_ALLOWED


class UnsupportedMediaType(FileStoreError):
    status = HTTPStatus.UNSUPPORTED_MEDIA_TYPE


class InternalIOFailure(FileStoreError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
