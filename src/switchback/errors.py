"""Switchback exception hierarchy.

Shared across Router, EventContainer, Request, and App so every module
raises and catches the same types.
"""

from dataclasses import dataclass
from typing import Any


class SwitchbackError(Exception):
    """Base for all switchback-specific errors."""


class ConfigurationError(SwitchbackError):
    """Raised when routes, controllers, or app configuration are invalid."""


@dataclass(frozen=True, slots=True)
class HTTPError(SwitchbackError):
    """An error that maps directly to an HTTP status code.

    The router never raises these to the embedding application. They are
    handed to ``router.http.<status>`` listeners as the event payload.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class UnknownRoute(HTTPError):  # noqa: N818
    """404 — no route pattern matched the request URI."""

    def __init__(self, detail: str = "Unknown route") -> None:
        super().__init__(status=404, detail=detail)


class MissingParam(HTTPError):  # noqa: N818
    """404 — the matched callback requires a parameter the request lacks."""

    def __init__(self, detail: str = "Missing required route parameter") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — the URI matched a route but the HTTP method is not permitted.

    Carries the requested method and the route's allowed methods, in the
    order the route declares them, for the ``Allow`` header.
    """

    def __init__(
        self,
        requested_method: str,
        allowed_methods: tuple[str, ...] | list[str],
        detail: str = "",
    ) -> None:
        allowed = tuple(allowed_methods)
        allow_value = ", ".join(allowed)
        default_detail = (
            f"HTTP method {requested_method} is not permitted for this route. "
            f"Allowed methods for this route: {allow_value}"
        )
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
        object.__setattr__(self, "requested_method", requested_method)
        object.__setattr__(self, "allowed_methods", allowed)

    @property
    def allowed_methods_string(self) -> str:
        """Allowed methods joined for the ``Allow`` header."""
        return ", ".join(self.allowed_methods)


class UnresolvableCallback(SwitchbackError, RuntimeError):
    """A Route could not build a callable from its controller/action/callback."""


class HaltDispatch(SwitchbackError):
    """Control-flow signal raised by ``Router.error()``.

    The error event has already fired by the time this is raised. The
    request loop that called ``Router.dispatch`` catches it, stops
    processing, and flushes the response as-is.
    """

    def __init__(self, status: int, exception: BaseException, route: Any = None) -> None:
        super().__init__(f"Dispatch halted with status {status}")
        self.status = status
        self.exception = exception
        self.route = route


class UnknownRouteVarWarning(UserWarning):
    """A bare ``<name>`` placeholder refers to a var the router does not know."""
