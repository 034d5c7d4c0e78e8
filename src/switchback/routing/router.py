"""Router — pattern compilation, request matching, and dispatch.

Routes live in priority buckets (lower key matches first) and keep
insertion order within a bucket. Endpoints are URI-prefix scoped route
groups built lazily by a provider function on every dispatch that
reaches them.

Routing failures never propagate as exceptions to the caller. They fire
``router.http.<status>`` events through the shared EventContainer, then
``error()`` raises ``HaltDispatch`` to end the dispatch.
"""

from __future__ import annotations

import logging
import re
import time
import warnings
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, NoReturn, TypeAlias

from switchback.errors import (
    ConfigurationError,
    HaltDispatch,
    MethodNotAllowed,
    MissingParam,
    UnknownRoute,
    UnknownRouteVarWarning,
    UnresolvableCallback,
)
from switchback.events.container import DEFAULT_PRIORITY, FALLBACK_PRIORITY, EventContainer
from switchback.events.event import Event
from switchback.routing.callback import bind_params
from switchback.routing.controller import Controller
from switchback.routing.params import DEFAULT_VARS, ensure_group
from switchback.routing.route import Route

if TYPE_CHECKING:
    from switchback.http.request import Request
    from switchback.http.response import Response

logger = logging.getLogger("switchback.routing")

EVENT_PREFIX = "router."

EndpointProvider: TypeAlias = "Callable[[Router], Mapping[str, Mapping[str, Any]] | object]"

_PLACEHOLDER = re.compile(r"<(\w+)(?::(.+?))?>")


def parse_route(uri: str, registry: Mapping[str, str]) -> tuple[str, dict[str, str]]:
    """Compile placeholders in *uri* to regex against the var *registry*.

    Returns the regex source and the captured-var map, keyed the way
    parameters are recovered and ordered by placeholder position:

    - ``<id:int>`` with ``int`` registered: the var's regex, ``{"int": "id"}``
    - ``<year:\\d{4}>`` (inline regex): ``(\\d{4})``, ``{"year": "year"}``
    - ``<int>`` with ``int`` registered: the var's regex, ``{"int": "int"}``

    An unregistered bare ``<name>`` emits ``UnknownRouteVarWarning`` and is
    left in place, so the route matches nothing useful.
    """
    captured: dict[str, str] = {}

    def compile_placeholder(match: re.Match[str]) -> str:
        name, spec = match.group(1), match.group(2)
        if spec is None:
            if name not in registry:
                warnings.warn(f"Unknown route var {name!r}.", UnknownRouteVarWarning, stacklevel=4)
                return match.group(0)
            captured[name] = name
            return ensure_group(registry[name])
        if spec in registry:
            captured[spec] = name
            return ensure_group(registry[spec])
        captured[name] = name
        return f"({spec})"

    return _PLACEHOLDER.sub(compile_placeholder, uri), captured


class Router:
    """Matches requests to routes and runs the dispatch lifecycle.

    Usage::

        router = Router(events)
        router.add_var("slug", r"[a-z0-9-]+")
        router.add_route("user/<id:int>", {"controller": UserController, "action": "show"})
        router.add_route("posts/<slug>", {"callback": show_post, "methods": ["GET"]})
        route = router.dispatch(request, response)

    Lifecycle events (all prefixed ``router.``): ``dispatch:before``,
    ``dispatch``, ``dispatch:after`` with ``(route, request, response)``,
    and ``http.<status>`` with ``(exception, route, request, response)``.
    """

    __slots__ = (
        "_caught",
        "_endpoint_controller",
        "_endpoints",
        "_events",
        "_matched",
        "_request",
        "_response",
        "_route",
        "_routes",
        "_vars",
    )

    def __init__(self, events: EventContainer | None = None) -> None:
        self._events = events if events is not None else EventContainer()
        self._routes: dict[int, dict[str, Route]] = {}
        self._vars: dict[str, str] = dict(DEFAULT_VARS)
        self._endpoints: dict[str, EndpointProvider] = {}
        self._endpoint_controller: type | str | None = None
        self._request: Request | None = None
        self._response: Response | None = None
        self._route: Route | None = None
        self._matched: Route | None = None
        self._caught: object | None = None

        self.on("http.404", _default_not_found, FALLBACK_PRIORITY)

    # -- Accessors --

    @property
    def events(self) -> EventContainer:
        return self._events

    @property
    def request(self) -> Request | None:
        return self._request

    @property
    def response(self) -> Response | None:
        return self._response

    @property
    def route(self) -> Route | None:
        """The last matched Route."""
        return self._route

    @property
    def vars(self) -> dict[str, str]:
        return dict(self._vars)

    def get_routes(self, priority: int | None = None) -> dict[Any, Any]:
        """Routes keyed by URI for one priority, or all buckets by priority."""
        if priority is not None:
            return dict(self._routes.get(priority, {}))
        return {p: dict(group) for p, group in self._routes.items()}

    def get_regex(self, name: str) -> str:
        """The regex registered for var *name*, or ``""``."""
        return self._vars.get(name, "")

    def parse_route(self, uri: str) -> tuple[str, dict[str, str]]:
        """Compile *uri* against this router's vars. See ``parse_route()``."""
        return parse_route(uri, self._vars)

    # -- Registration --

    def add_var(self, name: str, regex: str) -> Router:
        self._vars[name] = regex
        return self

    def add_vars(self, registry: Mapping[str, str]) -> Router:
        for name, regex in registry.items():
            self.add_var(name, regex)
        return self

    def add_route(
        self,
        uri: str,
        args: Mapping[str, Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> Router:
        """Register one route; replaces a route with the same priority and URI."""
        self._routes.setdefault(priority, {})[uri] = Route(uri, args)
        return self

    def add_routes(
        self,
        routes: Mapping[str, Mapping[str, Any]],
        priority: int = DEFAULT_PRIORITY,
    ) -> Router:
        """Register a group of routes.

        Unlike ``add_route``, a URI already present in the bucket keeps its
        existing Route. New URIs are placed ahead of the existing ones.
        """
        objects = {uri: Route(uri, args) for uri, args in routes.items()}
        existing = self._routes.get(priority)
        if not existing:
            self._routes[priority] = objects
        else:
            self._routes[priority] = {**objects, **existing}
        return self

    def endpoint(self, path: str, provider: EndpointProvider) -> Router:
        """Register a lazily built route group under the URI prefix *path*.

        *provider* receives the router and returns a mapping of sub-URI to
        route definition, or any other object to take over the request.
        """
        self._endpoints[path] = provider
        return self

    def set_controller(self, controller: type | str) -> Router:
        """Default controller for routes built by the current endpoint provider."""
        self._endpoint_controller = controller
        return self

    # -- Events --

    def on(
        self,
        action: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> Router:
        """Attach *callback* to ``router.<action>``."""
        self._events.on(EVENT_PREFIX + action, callback, priority)
        return self

    def trigger(self, action: str, *args: Any) -> list[Any] | None:
        """Fire ``router.<action>`` with *args*."""
        return self._events.trigger_array(EVENT_PREFIX + action, args)

    # -- Dispatch --

    def dispatch(self, request: Request, response: Response) -> Route | object:
        """Match *request* and run the matched route.

        Returns the matched Route, or the object an endpoint provider
        returned in place of routes. Raises ``HaltDispatch`` after firing
        ``router.http.404`` / ``router.http.405`` (or ``404`` for a
        missing callback parameter).
        """
        started = time.perf_counter()
        self._request = request
        self._response = response
        self._matched = None
        self._caught = None

        if not self.match():
            self.error(404, UnknownRoute("Unknown route"), None)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if self._caught is not None:
            logger.debug(
                "%s /%s caught by endpoint (%.2f ms)", request.method, request.uri, elapsed_ms
            )
            return self._caught

        route = self._matched
        assert route is not None
        logger.debug("%s /%s matched %r (%.2f ms)", request.method, request.uri, route, elapsed_ms)

        callback = route.get_callback()
        if not callable(callback):
            msg = f"Route {route.uri!r} has no callable callback."
            raise UnresolvableCallback(msg)

        self.trigger("dispatch:before", route, request, response)

        try:
            kwargs = bind_params(
                callback,
                request.params,
                {"request": request, "response": response, "router": self},
            )
        except MissingParam as exc:
            self.error(404, exc, route)

        controller = getattr(callback, "__self__", None)
        if isinstance(controller, Controller):
            controller.init(request, response)

        result = callback(**kwargs)
        if isinstance(result, str):
            response.set_body(result)

        self.trigger("dispatch", route, request, response)
        self.trigger("dispatch:after", route, request, response)
        return route

    def error(self, code: int, exception: BaseException, route: Route | None = None) -> NoReturn:
        """Set the status, fire ``router.http.<code>``, and halt the dispatch."""
        assert self._response is not None
        if self._request is not None:
            logger.debug(
                "%d %s /%s: %s", code, self._request.method, self._request.uri, exception
            )
        self._response.set_status(code)
        self.trigger(f"http.{code}", exception, route, self._request, self._response)
        raise HaltDispatch(code, exception, route)

    # -- Matching --

    def match(self) -> bool:
        """Search endpoints, then static routes by ascending priority."""
        assert self._request is not None
        method = self._request.method
        uri = self._request.uri

        if self._endpoints and self.match_endpoints(uri, method):
            return True

        for priority in sorted(self._routes):
            for route in list(self._routes[priority].values()):
                if self.match_route(route, uri, method):
                    return True

        return False

    def match_endpoints(self, uri: str, method: str) -> bool:
        """Build and match the routes of every endpoint whose prefix fits *uri*."""
        path_uri = uri.strip("/")
        for path, provider in self._endpoints.items():
            if not path_uri.startswith(path.strip("/")):
                continue

            self._endpoint_controller = None
            try:
                routes = provider(self)
                if routes is None:
                    continue
                if not isinstance(routes, Mapping):
                    self._caught = routes
                    return True

                for sub_uri, definition in routes.items():
                    args = dict(definition)
                    if "action" not in args:
                        slug = sub_uri.strip("/")
                        if not (slug.isascii() and slug.isalpha()):
                            continue
                        args["action"] = slug

                    if self._endpoint_controller is not None and "controller" not in args:
                        args["controller"] = self._endpoint_controller

                    args["endpoint"] = path.strip("/")
                    if self.match_route(Route(path + sub_uri, args), uri, method):
                        return True
            finally:
                self._endpoint_controller = None

        return False

    def match_route(self, route: Route, uri: str, method: str) -> bool:
        """Match one route against *uri*.

        A URI match with a disallowed method is terminal: it fires
        ``router.http.405`` with an ``Allow`` header and halts.
        """
        pattern, captured = self.parse_route(route.uri)
        regex = f"^/?{pattern.strip('/')}/?$"
        match = re.match(regex, uri.strip("/"), re.IGNORECASE)
        if match is None:
            return False

        if not route.is_method_allowed(method):
            exc = MethodNotAllowed(method, route.get_methods())
            assert self._response is not None
            self._response.add_header("Allow", exc.allowed_methods_string)
            self.error(405, exc, route)

        self._route = self._matched = route

        groups = match.groups()
        if captured and groups:
            names = list(captured.values())
            if len(names) != len(groups):
                msg = (
                    f"Route {route.uri!r} declares {len(names)} vars but its pattern "
                    f"captures {len(groups)} groups."
                )
                raise ConfigurationError(msg)
            assert self._request is not None
            self._request.set_path_params(dict(zip(names, groups, strict=True)))

        return True


def _default_not_found(
    event: Event,
    exception: BaseException,
    route: Route | None,
    request: Request,
    response: Response,
) -> None:
    """Built-in 404 listener: write the message and send, unless prevented."""
    if not event.is_default_prevented():
        response.set_body(getattr(exception, "detail", "") or str(exception))
        response.send()
