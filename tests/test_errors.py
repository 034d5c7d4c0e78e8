"""Tests for switchback.errors — exception hierarchy and messages."""

import pytest

from switchback.errors import (
    ConfigurationError,
    HaltDispatch,
    HTTPError,
    MethodNotAllowed,
    MissingParam,
    SwitchbackError,
    UnknownRoute,
    UnknownRouteVarWarning,
    UnresolvableCallback,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [ConfigurationError, HTTPError, UnresolvableCallback, HaltDispatch],
    )
    def test_switchback_errors(self, cls: type) -> None:
        assert issubclass(cls, SwitchbackError)

    @pytest.mark.parametrize("cls", [UnknownRoute, MissingParam, MethodNotAllowed])
    def test_http_errors(self, cls: type) -> None:
        assert issubclass(cls, HTTPError)

    def test_warning_is_user_warning(self) -> None:
        assert issubclass(UnknownRouteVarWarning, UserWarning)


class TestHTTPError:
    def test_str_with_detail(self) -> None:
        assert str(HTTPError(403, "Forbidden")) == "403: Forbidden"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(500)) == "500"

    def test_is_frozen(self) -> None:
        exc = HTTPError(400)
        with pytest.raises(AttributeError):
            exc.status = 401  # type: ignore[misc]

    def test_unknown_route(self) -> None:
        exc = UnknownRoute()
        assert exc.status == 404
        assert exc.detail == "Unknown route"

    def test_missing_param(self) -> None:
        assert MissingParam("no id").status == 404


class TestMethodNotAllowed:
    def test_allow_header_in_route_order(self) -> None:
        exc = MethodNotAllowed("DELETE", ["GET", "POST", "HEAD"])
        assert exc.status == 405
        assert exc.allowed_methods == ("GET", "POST", "HEAD")
        assert exc.allowed_methods_string == "GET, POST, HEAD"
        assert exc.headers == (("Allow", "GET, POST, HEAD"),)

    def test_default_detail_mentions_methods(self) -> None:
        exc = MethodNotAllowed("PUT", ["GET"])
        assert "PUT" in exc.detail
        assert "GET" in exc.detail

    def test_custom_detail(self) -> None:
        assert MethodNotAllowed("PUT", ["GET"], "nope").detail == "nope"


class TestHaltDispatch:
    def test_carries_context(self) -> None:
        cause = UnknownRoute()
        halt = HaltDispatch(404, cause)
        assert halt.status == 404
        assert halt.exception is cause
        assert halt.route is None
        assert "404" in str(halt)
