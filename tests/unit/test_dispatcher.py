"""
Unit tests for the method dispatcher.

Requests are built directly as HTTPRequest objects, so these tests cover
the method table without any sockets involved.
"""

import os
from pathlib import Path

import pytest

from filestore.handlers import MethodDispatcher, allowed_methods
from filestore.http.request import HTTPRequest
from filestore.http.status_codes import HTTPStatus
from filestore.storage import FileSystem, PathResolver


def make_request(method, path: str, body: bytes = b"") -> HTTPRequest:
    return HTTPRequest(method=method, path=path, body=body)


def assert_error_page(response, status: HTTPStatus):
    assert response.status == status
    assert response.content_type == "text/html"
    assert f"https://http.cat/{int(status)}.jpg".encode() in response.body


class TestGet:
    """Tests for GET."""

    def test_existing_file(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"hello")

        response = dispatcher.dispatch(make_request("GET", "/notes.txt"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == b"hello"
        assert response.content_length == 5

    def test_content_type_from_extension(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "page.html").write_bytes(b"<p>hi</p>")

        response = dispatcher.dispatch(make_request("GET", "/page.html"))

        assert response.content_type == "text/html"

    def test_unknown_extension(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "blob").write_bytes(b"\x00\x01")

        response = dispatcher.dispatch(make_request("GET", "/blob"))

        assert response.content_type == "application/octet-stream"
        assert response.body == b"\x00\x01"

    def test_missing_file(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request("GET", "/missing.txt"))

        assert_error_page(response, HTTPStatus.NOT_FOUND)

    def test_directory_is_not_found(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "docs").mkdir()

        assert_error_page(dispatcher.dispatch(make_request("GET", "/docs")), HTTPStatus.NOT_FOUND)
        assert_error_page(dispatcher.dispatch(make_request("GET", "/")), HTTPStatus.NOT_FOUND)

    def test_nested_file(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "docs").mkdir()
        (store_root / "docs" / "a b.txt").write_bytes(b"nested")

        response = dispatcher.dispatch(make_request("GET", "/docs/a b.txt"))

        assert response.body == b"nested"

    def test_trailing_slash_on_file(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"hello")

        response = dispatcher.dispatch(make_request("GET", "/notes.txt/"))

        assert_error_page(response, HTTPStatus.NOT_FOUND)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_inside_root(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"hello")
        (store_root / "link.txt").symlink_to(store_root / "notes.txt")

        response = dispatcher.dispatch(make_request("GET", "/link.txt"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"hello"


class TestHead:
    """Tests for HEAD."""

    def test_existing_file(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"hello")

        response = dispatcher.dispatch(make_request("HEAD", "/notes.txt"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == b""
        assert b"Content-Length: 0\r\n" in response.to_bytes()

    def test_missing_file_has_no_body(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request("HEAD", "/missing.png"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.content_type == "image/png"
        assert response.body == b""

    def test_traversal_has_no_body(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request("HEAD", "/../secret.txt"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""


class TestPut:
    """Tests for PUT."""

    def test_creates_file(self, dispatcher: MethodDispatcher, store_root: Path):
        response = dispatcher.dispatch(make_request("PUT", "/notes.txt", b"hello"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == b"File created or overwritten"
        assert (store_root / "notes.txt").read_bytes() == b"hello"

    def test_overwrites_file(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"old and much longer content")

        dispatcher.dispatch(make_request("PUT", "/notes.txt", b"new"))

        assert (store_root / "notes.txt").read_bytes() == b"new"

    def test_empty_body_creates_empty_file(self, dispatcher: MethodDispatcher, store_root: Path):
        response = dispatcher.dispatch(make_request("PUT", "/empty.txt"))

        assert response.status == HTTPStatus.OK
        assert (store_root / "empty.txt").read_bytes() == b""

    def test_any_content_type(self, dispatcher: MethodDispatcher, store_root: Path):
        data = bytes(range(256))

        response = dispatcher.dispatch(make_request("PUT", "/image.png", data))

        assert response.status == HTTPStatus.OK
        assert (store_root / "image.png").read_bytes() == data

    def test_missing_parent_directory(self, dispatcher: MethodDispatcher, store_root: Path):
        response = dispatcher.dispatch(make_request("PUT", "/no/such/dir.txt", b"x"))

        assert_error_page(response, HTTPStatus.INTERNAL_SERVER_ERROR)
        assert not (store_root / "no").exists()

    def test_onto_directory(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "docs").mkdir()

        response = dispatcher.dispatch(make_request("PUT", "/docs", b"x"))

        assert_error_page(response, HTTPStatus.INTERNAL_SERVER_ERROR)


class TestPost:
    """Tests for POST (append)."""

    def test_appends(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"hello")

        response = dispatcher.dispatch(make_request("POST", "/notes.txt", b" world"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"Data appended"
        assert (store_root / "notes.txt").read_bytes() == b"hello world"

    def test_creates_missing_file(self, dispatcher: MethodDispatcher, store_root: Path):
        response = dispatcher.dispatch(make_request("POST", "/log.txt", b"first"))

        assert response.status == HTTPStatus.OK
        assert (store_root / "log.txt").read_bytes() == b"first"

    def test_repeated_appends_accumulate(self, dispatcher: MethodDispatcher, store_root: Path):
        for chunk in (b"a", b"b", b"c"):
            dispatcher.dispatch(make_request("POST", "/log.txt", chunk))

        assert (store_root / "log.txt").read_bytes() == b"abc"

    @pytest.mark.parametrize("path", ["/page.html", "/data.json", "/noext"])
    def test_non_plain_text_rejected(self, dispatcher: MethodDispatcher, store_root: Path, path: str):
        response = dispatcher.dispatch(make_request("POST", path, b"data"))

        assert_error_page(response, HTTPStatus.UNSUPPORTED_MEDIA_TYPE)
        assert not (store_root / path.lstrip("/")).exists()

    def test_rejected_post_leaves_file_alone(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "page.html").write_bytes(b"<p>original</p>")

        dispatcher.dispatch(make_request("POST", "/page.html", b"more"))

        assert (store_root / "page.html").read_bytes() == b"<p>original</p>"

    def test_missing_parent_directory(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request("POST", "/no/such.txt", b"x"))

        assert_error_page(response, HTTPStatus.INTERNAL_SERVER_ERROR)


class TestDelete:
    """Tests for DELETE."""

    def test_removes_file(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"hello")

        response = dispatcher.dispatch(make_request("DELETE", "/notes.txt"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"File deleted"
        assert not (store_root / "notes.txt").exists()

    def test_missing_file(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request("DELETE", "/missing.txt"))

        assert_error_page(response, HTTPStatus.NOT_FOUND)

    def test_directory_not_removed(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "docs").mkdir()

        response = dispatcher.dispatch(make_request("DELETE", "/docs"))

        assert_error_page(response, HTTPStatus.NOT_FOUND)
        assert (store_root / "docs").is_dir()

    def test_trailing_slash_on_file(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"keep me")

        response = dispatcher.dispatch(make_request("DELETE", "/notes.txt/"))

        assert_error_page(response, HTTPStatus.NOT_FOUND)
        assert (store_root / "notes.txt").read_bytes() == b"keep me"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_removes_link_only(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"keep me")
        (store_root / "link.txt").symlink_to(store_root / "notes.txt")

        response = dispatcher.dispatch(make_request("DELETE", "/link.txt"))

        assert response.status == HTTPStatus.OK
        assert not (store_root / "link.txt").is_symlink()
        assert (store_root / "notes.txt").read_bytes() == b"keep me"


class TestOptions:
    """Tests for OPTIONS."""

    def test_plain_text_allows_post(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request("OPTIONS", "/notes.txt"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == b""
        assert response.extra_headers == {"Allow": "GET, HEAD, PUT, DELETE, POST"}

    def test_other_types_do_not_allow_post(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request("OPTIONS", "/index.html"))

        assert response.extra_headers == {"Allow": "GET, HEAD, PUT, DELETE"}

    def test_does_not_need_file(self, dispatcher: MethodDispatcher, store_root: Path):
        response = dispatcher.dispatch(make_request("OPTIONS", "/never-created.txt"))

        assert response.status == HTTPStatus.OK
        assert not (store_root / "never-created.txt").exists()

    def test_allow_header_on_the_wire(self, dispatcher: MethodDispatcher):
        raw = dispatcher.dispatch(make_request("OPTIONS", "/a.html")).to_bytes()

        assert raw == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"Allow: GET, HEAD, PUT, DELETE\r\n"
            b"\r\n"
        )

    def test_allowed_methods_helper(self):
        assert allowed_methods("/a.TXT")[-1] == "POST"
        assert "POST" not in allowed_methods("/a.md")


class TestUnsupportedMethods:
    """Tests for methods outside the table."""

    @pytest.mark.parametrize("method", ["PATCH", "TRACE", "CONNECT", "BREW"])
    def test_unknown_method(self, dispatcher: MethodDispatcher, method: str):
        response = dispatcher.dispatch(make_request(method, "/notes.txt"))

        assert_error_page(response, HTTPStatus.METHOD_NOT_ALLOWED)

    def test_missing_method(self, dispatcher: MethodDispatcher):
        response = dispatcher.dispatch(make_request(None, "/"))

        assert_error_page(response, HTTPStatus.METHOD_NOT_ALLOWED)

    def test_method_is_case_sensitive(self, dispatcher: MethodDispatcher, store_root: Path):
        (store_root / "notes.txt").write_bytes(b"hello")

        response = dispatcher.dispatch(make_request("get", "/notes.txt"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED

    def test_unknown_method_touches_nothing(self, dispatcher: MethodDispatcher, store_root: Path):
        dispatcher.dispatch(make_request("PATCH", "/notes.txt", b"data"))

        assert list(store_root.iterdir()) == []

    def test_supported_methods(self, dispatcher: MethodDispatcher):
        assert sorted(dispatcher.supported_methods) == [
            "DELETE", "GET", "HEAD", "OPTIONS", "POST", "PUT",
        ]


class TestPathTraversal:
    """Paths escaping the root are 404 for every method, with no side effects."""

    @pytest.mark.parametrize("method", ["GET", "PUT", "POST", "DELETE", "OPTIONS"])
    def test_rejected(self, dispatcher: MethodDispatcher, method: str):
        response = dispatcher.dispatch(make_request(method, "/../outside.txt", b"x"))

        assert_error_page(response, HTTPStatus.NOT_FOUND)

    def test_write_outside_root_never_happens(self, dispatcher: MethodDispatcher, tmp_path: Path):
        dispatcher.dispatch(make_request("PUT", "/../outside.txt", b"pwned"))
        dispatcher.dispatch(make_request("POST", "/../outside.txt", b"pwned"))

        assert not (tmp_path / "outside.txt").exists()

    def test_delete_outside_root_never_happens(self, dispatcher: MethodDispatcher, tmp_path: Path):
        victim = tmp_path / "victim.txt"
        victim.write_bytes(b"keep me")

        response = dispatcher.dispatch(make_request("DELETE", "/../victim.txt"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert victim.read_bytes() == b"keep me"

    def test_read_outside_root_never_happens(self, dispatcher: MethodDispatcher, tmp_path: Path):
        (tmp_path / "secret.txt").write_bytes(b"secret")

        response = dispatcher.dispatch(make_request("GET", "/../secret.txt"))

        assert b"secret" not in response.body


class TestErrorImageBase:
    """Tests for a custom error picture service."""

    def test_custom_base(self, store_root: Path):
        dispatcher = MethodDispatcher(
            FileSystem(), PathResolver(store_root), error_image_base="http://img.local"
        )

        response = dispatcher.dispatch(make_request("PATCH", "/a.txt"))

        assert b'<img src="http://img.local/405.jpg" />' in response.body

    def test_internal_error_page(self, dispatcher: MethodDispatcher):
        assert_error_page(dispatcher.internal_error(), HTTPStatus.INTERNAL_SERVER_ERROR)
