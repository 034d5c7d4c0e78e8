"""Tests for switchback.http.response — mutable Response and send()."""

import pytest

from switchback.http.request import Request
from switchback.http.response import (
    CONTENT_TYPES,
    Response,
    SetCookie,
    cache_headers,
    negotiate_content_type,
)


class TestHeaders:
    def test_set_header_overwrites(self) -> None:
        response = Response().set_header("X-Test", "a").set_header("x-test", "b")
        assert response.headers == {"X-Test": "b"}

    def test_add_header_never_overwrites(self) -> None:
        response = Response().set_header("Allow", "GET").add_header("allow", "POST")
        assert response.get_header("ALLOW") == "GET"

    def test_set_and_add_headers(self) -> None:
        response = Response().set_headers({"A": "1", "B": "2"}).add_headers({"A": "x", "C": "3"})
        assert response.headers == {"A": "1", "B": "2", "C": "3"}

    def test_remove_header(self) -> None:
        response = Response().set_header("Last-Modified", "now").remove_header("last-modified")
        assert not response.has_header("Last-Modified")
        assert response.headers == {}


class TestBody:
    @pytest.mark.parametrize(
        ("how", "expected"),
        [
            ("replace", "new"),
            ("append", "oldnew"),
            ("after", "oldnew"),
            ("prepend", "newold"),
            ("before", "newold"),
            ("unknown", "new"),
        ],
    )
    def test_set_body_modes(self, how: str, expected: str) -> None:
        response = Response("old").set_body("new", how)
        assert response.body == expected

    def test_non_string_body(self) -> None:
        assert Response().set_body(42).body == "42"

    def test_add_body_appends(self) -> None:
        assert Response("a").add_body("b").body == "ab"

    def test_body_bytes_uses_charset(self) -> None:
        assert Response("é", charset="latin-1").body_bytes == b"\xe9"


class TestContentType:
    def test_maybe_set_known(self) -> None:
        response = Response()
        assert response.maybe_set_content_type("json")
        assert response.content_type == "application/json"

    def test_maybe_set_unknown(self) -> None:
        response = Response()
        assert not response.maybe_set_content_type("pdf")
        assert response.content_type is None

    def test_set_request_uses_extension(self) -> None:
        response = Response().set_request(Request.create("GET", "feed.xml"))
        assert response.content_type == CONTENT_TYPES["xml"]

    def test_set_request_negotiates_accept(self) -> None:
        request = Request.create("GET", "feed", headers={"Accept": "application/json, text/html;q=0.5"})
        assert Response().set_request(request).content_type == "application/json"

    def test_set_request_xhr_headers(self) -> None:
        request = Request.create("GET", "x", headers={"X-Requested-With": "XMLHttpRequest"})
        response = Response().set_request(request)
        assert response.get_header("X-Content-Type-Options") == "nosniff"
        assert response.get_header("X-Frame-Options") == "DENY"
        assert response.get_header("Cache-Control") == "no-cache, must-revalidate, max-age=0"

    def test_negotiation(self) -> None:
        supported = list(CONTENT_TYPES.values())
        assert negotiate_content_type("", supported) is None
        assert negotiate_content_type("*/*", supported) == "text/html"
        assert negotiate_content_type("text/*;q=0.9, application/json", supported) == "application/json"
        assert negotiate_content_type("image/png", supported) is None
        assert negotiate_content_type("application/json;q=0", supported) is None


class TestCacheAndSecurity:
    def test_nocache(self) -> None:
        response = Response().set_header("Last-Modified", "yesterday").nocache()
        assert not response.has_header("Last-Modified")
        assert response.get_header("Pragma") == "no-cache"

    def test_cache_headers_with_lifetime(self) -> None:
        headers = cache_headers(3600)
        assert headers["Cache-Control"] == "public, max-age=3600"
        assert headers["Expires"].endswith("GMT")

    def test_set_cache_headers_keeps_existing(self) -> None:
        response = Response().set_header("Cache-Control", "private").set_cache_headers()
        assert response.get_header("Cache-Control") == "private"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("deny", "DENY"), (False, "DENY"), ("sameorigin", "SAMEORIGIN"), (True, "SAMEORIGIN")],
    )
    def test_frame_options(self, value: str | bool, expected: str) -> None:
        response = Response().set_frame_options_header(value)
        assert response.get_header("X-Frame-Options") == expected


class TestCookies:
    def test_set_cookie_header_value(self) -> None:
        cookie = SetCookie("session", "a b", max_age=60, secure=True)
        assert cookie.to_header_value() == (
            "session=a%20b; Max-Age=60; Path=/; Secure; HttpOnly; SameSite=Lax"
        )

    def test_delete_cookie_expires(self) -> None:
        response = Response().delete_cookie("session")
        value = response.cookies[0].to_header_value()
        assert "Max-Age=0" in value
        assert "Expires=Thu, 01 Jan 1970 00:00:00 GMT" in value

    def test_cookies_emitted_as_set_cookie(self) -> None:
        response = Response().set_cookie("a", "1", samesite=None, httponly=False).send()
        assert (b"set-cookie", b"a=1; Path=/") in response.raw_headers()


class TestSend:
    def test_defaults(self) -> None:
        response = Response("hi").send()
        assert response.status == 200
        assert response.content_type == "text/html"
        assert response.get_header("Cache-Control") == "no-cache, must-revalidate, max-age=0"
        assert response.sent

    def test_location_means_302(self) -> None:
        response = Response().set_header("Location", "/home").send()
        assert response.status == 302

    def test_explicit_status_kept(self) -> None:
        assert Response().set_status(201).send().status == 201

    def test_idempotent(self) -> None:
        response = Response().send()
        assert response.send() is response

    def test_mutation_after_send_raises(self) -> None:
        response = Response().send()
        with pytest.raises(RuntimeError, match="already sent"):
            response.set_body("late")
        with pytest.raises(RuntimeError):
            response.set_header("X", "y")

    def test_raw_headers_content_type_first(self) -> None:
        response = Response(default_content_type="text/plain").set_header("X-One", "1").send()
        raw = response.raw_headers()
        assert raw[0] == (b"content-type", b"text/plain; charset=UTF-8")
        assert (b"x-one", b"1") in raw
