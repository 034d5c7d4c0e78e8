"""Eventable protocol — objects that expose ``on`` and ``trigger``.

Both EventContainer and Router satisfy it structurally.
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Eventable(Protocol):
    """Something listeners can be attached to and events fired through."""

    def on(self, event_id: str, callback: Callable[..., Any], priority: int = ...) -> Any: ...
    def trigger(self, event_id: Any, *args: Any) -> list[Any] | None: ...
