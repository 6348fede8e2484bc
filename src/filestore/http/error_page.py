"""
Decorative error pages.

Every non-2xx outcome gets the same tiny HTML document whose only content
is an image from an external status-code picture service:

    <!DOCTYPE html><html lang="en"><body><img src="https://http.cat/404.jpg" /></body></html>

The server never fetches the image itself; the client's browser does.
"""

from .response import HTTPResponse
from .status_codes import HTTPStatus


DEFAULT_IMAGE_BASE = "https://http.cat"


def error_image_url(status: HTTPStatus | int, image_base: str = DEFAULT_IMAGE_BASE) -> str:
    """URL of the picture for a status code, e.g. https://http.cat/405.jpg."""
    return f"{image_base.rstrip('/')}/{int(status)}.jpg"


def build_error_body(status: HTTPStatus | int, image_base: str = DEFAULT_IMAGE_BASE) -> bytes:
    """
    Build the HTML body for an error status.

    Args:
        status: Status code the page is for.
        image_base: Base URL of the picture service.

    Returns:
        UTF-8 encoded HTML document.
    """
    url = error_image_url(status, image_base)
    html = f'<!DOCTYPE html><html lang="en"><body><img src="{url}" /></body></html>'
    return html.encode("utf-8")


def error_response(status: HTTPStatus, image_base: str = DEFAULT_IMAGE_BASE) -> HTTPResponse:
    """Wrap the decorative page as a text/html response with the given status."""
    return HTTPResponse(
        status=status,
        content_type="text/html",
        body=build_error_body(status, image_base),
    )
