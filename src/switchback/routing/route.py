"""Route — one URI pattern plus the handler binding that answers it."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pkgutil import resolve_name
from typing import Any

from switchback.errors import ConfigurationError, UnresolvableCallback

DEFAULT_METHODS: tuple[str, ...] = ("GET", "POST", "HEAD")

# Route-definition keys with a dedicated attribute; anything else lands in ``extra``
_CORE_KEYS = frozenset({"callback", "controller", "action", "methods", "init_on_match", "endpoint"})


class Route:
    """A URI pattern, its allowed methods, and a lazily built callback.

    Built from a route-definition mapping::

        Route("user/<id:int>", {"controller": UserController, "action": "show"})
        Route("about", {"callback": about_page, "methods": ["GET"]})

    Unknown definition keys are kept in ``extra`` and readable as attributes.
    """

    __slots__ = (
        "_built",
        "_methods",
        "action",
        "callback",
        "controller",
        "endpoint",
        "extra",
        "init_on_match",
        "uri",
    )

    def __init__(self, uri: str, args: Mapping[str, Any] | None = None) -> None:
        args = dict(args or {})
        self.uri = uri
        self.callback: Any = args.get("callback")
        self.controller: type | str | None = args.get("controller")
        self.action: str | None = args.get("action")
        self.endpoint: str | None = args.get("endpoint")
        self.init_on_match: bool = bool(args.get("init_on_match", True))
        self.extra: dict[str, Any] = {k: v for k, v in args.items() if k not in _CORE_KEYS}

        methods = args.get("methods") or DEFAULT_METHODS
        # dict keys: O(1) membership, declaration order kept for the Allow header
        self._methods: dict[str, None] = dict.fromkeys(m.upper() for m in methods)
        self._built = False

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that aren't slots; unset slots must not recurse
        if name == "extra" or name.startswith("__"):
            raise AttributeError(name)
        try:
            return self.extra[name]
        except KeyError:
            msg = f"{type(self).__name__!r} object has no attribute {name!r}"
            raise AttributeError(msg) from None

    def __repr__(self) -> str:
        return f"Route({self.uri!r}, methods={self.get_methods()!r})"

    def get_uri(self) -> str:
        return self.uri

    def get_methods(self) -> list[str]:
        """Allowed methods, in declaration order."""
        return list(self._methods)

    def is_method_allowed(self, method: str) -> bool:
        return method in self._methods

    def get_callback(self) -> Callable[..., Any] | Any:
        """Return the route's callable, building it on first use.

        With ``init_on_match`` and a ``controller``, one controller instance
        is created and its ``action`` (or string ``callback``) method bound.
        The result is cached for the life of this Route.

        Raises ``UnresolvableCallback`` when a controller is set but no
        method name is available.
        """
        if self._built:
            return self.callback

        if self.init_on_match and self.controller is not None:
            cls = self._controller_class()
            if self.action is not None:
                method_name = self.action
            elif isinstance(self.callback, str):
                method_name = self.callback
            else:
                msg = f"Cannot create callback for route {self.uri!r}: no action or method name."
                raise UnresolvableCallback(msg)
            self.callback = getattr(cls(), method_name)

        self._built = True
        return self.callback

    def _controller_class(self) -> type:
        controller = self.controller
        if isinstance(controller, str):
            try:
                resolved = resolve_name(controller)
            except (ImportError, AttributeError, ValueError) as exc:
                msg = f"Cannot import controller {controller!r} for route {self.uri!r}."
                raise ConfigurationError(msg) from exc
            if not isinstance(resolved, type):
                msg = f"Controller {controller!r} for route {self.uri!r} is not a class."
                raise ConfigurationError(msg)
            return resolved
        assert controller is not None
        return controller
