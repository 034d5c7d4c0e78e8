"""Switchback: an event-driven router for Python web applications.

Routes are URI patterns with typed placeholders, matched by priority.
Every step of a dispatch, including routing failures, fires an event
that application listeners can hook.

Basic usage::

    from switchback import App

    app = App()

    @app.route("user/<id:int>")
    def show_user(id: int) -> str:
        return f"User {id}"

    @app.error(404)
    def not_found(event, exc, route, request, response):
        event.prevent_default()
        response.set_body("No such page")

    app.run()

The router and event container also work standalone::

    from switchback import EventContainer, Router

    router = Router(EventContainer())
    router.add_route("posts/<slug:segment>", {"callback": show_post})
    router.dispatch(request, response)
"""

from importlib import import_module

__version__ = "0.1.0"

# Public name -> defining module, imported on first access.
_EXPORTS: dict[str, str] = {
    "App": "switchback.app",
    "AppConfig": "switchback.config",
    "Event": "switchback.events.event",
    "EventContainer": "switchback.events.container",
    "SortOrder": "switchback.events.container",
    "Controller": "switchback.routing.controller",
    "Route": "switchback.routing.route",
    "Router": "switchback.routing.router",
    "Request": "switchback.http.request",
    "Response": "switchback.http.response",
    "ConfigurationError": "switchback.errors",
    "HTTPError": "switchback.errors",
    "HaltDispatch": "switchback.errors",
    "MethodNotAllowed": "switchback.errors",
    "MissingParam": "switchback.errors",
    "SwitchbackError": "switchback.errors",
    "UnknownRoute": "switchback.errors",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> object:
    try:
        module_name = _EXPORTS[name]
    except KeyError:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from None
    value = getattr(import_module(module_name), name)
    globals()[name] = value
    return value
