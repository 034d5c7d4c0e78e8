"""Switchback application class.

Wires an AppConfig, one EventContainer, and one Router together and
exposes them as an ASGI 3 application. Routes, endpoints, and listeners
are registered with decorators at import time.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from switchback._internal.asgi import Receive, Scope, Send, read_body
from switchback.config import AppConfig
from switchback.errors import HaltDispatch, HTTPError
from switchback.events.container import DEFAULT_PRIORITY, FALLBACK_PRIORITY, EventContainer
from switchback.events.event import Event
from switchback.http.request import Request
from switchback.http.response import Response
from switchback.routing.route import Route
from switchback.routing.router import EndpointProvider, Router
from switchback.server.sender import send_response

logger = logging.getLogger("switchback.server")


class App:
    """The switchback application.

    Usage::

        app = App()

        @app.route("hello/<name:segment>", methods=["GET"])
        def hello(name: str) -> str:
            return f"Hello, {name}!"

        @app.error(404)
        def not_found(event, exc, route, request, response):
            event.prevent_default()
            response.set_body("Nothing here.")

        app.run()

    Requests are dispatched one at a time per event loop: ``handle`` is
    synchronous and the Router keeps the current request on itself.
    """

    __slots__ = ("_events", "_router", "_shutdown_hooks", "_startup_hooks", "config")

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        events: EventContainer | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._events = events if events is not None else EventContainer(self.config.event_order)
        self._router = Router(self._events)
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []

        self._router.on("http.500", self._default_server_error, FALLBACK_PRIORITY)

    @property
    def events(self) -> EventContainer:
        return self._events

    @property
    def router(self) -> Router:
        return self._router

    # -- Registration --

    def route(
        self,
        uri: str,
        *,
        methods: list[str] | None = None,
        priority: int = DEFAULT_PRIORITY,
        **attrs: Any,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register the decorated function as the callback for *uri*.

        Extra keyword arguments become route-definition keys (and are
        readable as attributes on the matched Route).
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            args: dict[str, Any] = {**attrs, "callback": func}
            if methods is not None:
                args["methods"] = methods
            self._router.add_route(uri, args, priority)
            return func

        return decorator

    def endpoint(self, prefix: str) -> Callable[[EndpointProvider], EndpointProvider]:
        """Register the decorated provider for URIs starting with *prefix*."""

        def decorator(provider: EndpointProvider) -> EndpointProvider:
            self._router.endpoint(prefix, provider)
            return provider

        return decorator

    def on(
        self, event_id: str, priority: int = DEFAULT_PRIORITY
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Attach the decorated listener to *event_id* (full id, no prefix)."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._events.on(event_id, func, priority)
            return func

        return decorator

    def error(
        self, code: int, priority: int = DEFAULT_PRIORITY
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Attach the decorated listener to ``router.http.<code>``.

        Listeners receive ``(event, exception, route, request, response)``.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._router.on(f"http.{code}", func, priority)
            return func

        return decorator

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook for ASGI lifespan startup."""
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook for ASGI lifespan shutdown."""
        self._shutdown_hooks.append(func)
        return func

    # -- Request handling --

    def new_response(self) -> Response:
        return Response(
            charset=self.config.charset,
            default_content_type=self.config.default_content_type,
        )

    def handle(self, request: Request) -> Response:
        """Dispatch *request* and return the finalised Response.

        ``HaltDispatch`` ends the dispatch normally: the routing error's
        listeners have already written the response. An ``HTTPError``
        raised by a callback is routed through ``router.http.<status>``
        the same way. Anything else becomes a 500.
        """
        response = self.new_response()
        response.set_request(request)

        try:
            result = self._router.dispatch(request, response)
        except HaltDispatch as halt:
            logger.debug("Dispatch halted with %d for %r", halt.status, request)
        except HTTPError as exc:
            self._http_error(exc, request, response)
        except Exception as exc:
            logger.exception("500 %s /%s", request.method, request.uri)
            self._server_error(exc, request, response)
        else:
            if isinstance(result, Response):
                return result.send()
            if isinstance(result, str):
                response.set_body(result)

        return response.send()

    def _http_error(self, exc: HTTPError, request: Request, response: Response) -> None:
        if response.sent:
            return
        for name, value in exc.headers:
            response.set_header(name, value)
        response.set_body(exc.detail)
        try:
            self._router.error(exc.status, exc, self._router.route)
        except HaltDispatch:
            logger.debug("%d %s /%s: %s", exc.status, request.method, request.uri, exc.detail)

    def _server_error(self, exc: Exception, request: Request, response: Response) -> None:
        if response.sent:
            return
        response.set_status(500)
        self._router.trigger("http.500", exc, self._router.route, request, response)

    def _default_server_error(
        self,
        event: Event,
        exception: BaseException,
        route: Route | None,
        request: Request,
        response: Response,
    ) -> None:
        """Built-in 500 listener. Shows the traceback in debug mode."""
        if event.is_default_prevented():
            return
        if self.config.debug:
            detail = "".join(traceback.format_exception(exception))
            response.set_content_type("text/html")
            response.set_body(f"<pre>{html.escape(detail)}</pre>")
        else:
            response.set_body("Internal Server Error")

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point: lifespan and HTTP scopes."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            logger.debug("Ignoring unsupported ASGI scope %r", scope["type"])
            return

        try:
            body = await read_body(receive, limit=self.config.max_content_length)
            request = Request.from_asgi(scope, body, config=self.config)
        except HTTPError as exc:
            response = Response(exc.detail, exc.status, charset=self.config.charset)
        except ValueError as exc:
            logger.debug("400 %s %s: %s", scope["method"], scope["path"], exc)
            response = Response("Bad Request", 400, charset=self.config.charset)
        else:
            response = self.handle(request)

        await send_response(response, send, method=scope["method"])

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run startup/shutdown hooks and report back to the server."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await _run_hooks(self._startup_hooks)
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await _run_hooks(self._shutdown_hooks)
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        await _run_hooks(self._startup_hooks)

    async def shutdown(self) -> None:
        await _run_hooks(self._shutdown_hooks)

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with the pounce development server."""
        from switchback.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_dirs=self.config.reload_dirs,
        )


async def _run_hooks(hooks: list[Callable[..., Any]]) -> None:
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result
