"""Controller base class.

Controllers are instantiated lazily when a route bound to them matches,
then initialised with the in-flight request and response.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class Controller:
    """Base class for route controllers.

    Subclasses define action methods; the router calls ``init()`` with the
    current request and response before invoking the action.
    """

    request: Any = None
    response: Any = None

    def get(self, name: str) -> Any:
        """Return attribute *name*, or ``None`` if unset."""
        return getattr(self, name, None)

    def set(self, name: str, value: Any) -> Controller:
        setattr(self, name, value)
        return self

    def attach(self, obj: Any, name: str = "") -> Controller:
        """Attach *obj* under *name*, defaulting to its class name."""
        return self.set(name or type(obj).__name__, obj)

    def init(self, request: Any, response: Any) -> Controller:
        """Attach the request and response for the current dispatch."""
        self.set("request", request)
        self.set("response", response)
        return self

    def transfer(self, controller: Controller, exclude: Iterable[str] | None = None) -> Controller:
        """Copy this controller's instance attributes onto *controller*."""
        skip = set(exclude or ())
        for name, value in vars(self).items():
            if name not in skip:
                controller.set(name, value)
        return self

    def forward(self, controller: Controller, method: str, *args: Any) -> Any:
        """Hand the request to *controller*'s *method*.

        Returns ``None`` if the target has no such callable.
        """
        self.transfer(controller)
        target = getattr(controller, method, None)
        if callable(target):
            return target(*args)
        return None
