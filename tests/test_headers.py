"""Tests for switchback.http.headers — case-insensitive request Headers."""

import pytest

from switchback.http.headers import Headers


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        headers = Headers({"Content-Type": "text/html"})
        assert headers["content-type"] == "text/html"
        assert headers["CONTENT-TYPE"] == "text/html"
        assert "Content-type" in headers

    def test_missing_key(self) -> None:
        with pytest.raises(KeyError):
            Headers()["X-Missing"]
        assert Headers().get("X-Missing") is None
        assert Headers().get("X-Missing", "d") == "d"

    def test_from_raw(self) -> None:
        headers = Headers.from_raw([(b"Accept", b"text/html"), (b"accept", b"application/json")])
        assert headers["accept"] == "text/html"
        assert headers.get_list("Accept") == ["text/html", "application/json"]

    def test_iteration_deduplicates(self) -> None:
        headers = Headers([("a", "1"), ("A", "2"), ("b", "3")])
        assert list(headers) == ["a", "b"]
        assert len(headers) == 2

    def test_non_string_key_not_contained(self) -> None:
        assert 1 not in Headers({"a": "1"})

    def test_repr(self) -> None:
        assert repr(Headers({"A": "1"})) == "Headers({'a': '1'})"
