"""Listener — a callback bound to an event id and a priority."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from switchback.events.event import Event


@dataclass(frozen=True, slots=True)
class Listener:
    """An immutable ``(event_id, callback, priority)`` triple.

    Callbacks follow the ``(event, *args) -> result`` contract. A callback
    that cannot be called fails at invocation time with whatever error the
    call itself raises.
    """

    event_id: str
    callback: Callable[..., Any]
    priority: int

    def invoke(self, event: Event, args: Sequence[Any] = ()) -> Any:
        """Call the callback with *event* prepended to *args*."""
        return self.callback(event, *args)

    def __call__(self, event: Event, args: Sequence[Any] = ()) -> Any:
        return self.invoke(event, args)
