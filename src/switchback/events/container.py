"""EventContainer — binds callbacks to event ids and triggers them.

Registrations store plain ``(callback, priority)`` pairs. Listener objects
are built on every trigger, sorted by priority, and called in order with
the same Event and argument list. The last Event and result list per id
are kept for later inspection.

Usage::

    events = EventContainer()
    events.on("user.saved", send_welcome, priority=5)
    events.trigger("user.saved", user)
    events.result("user.saved")  # [<return of send_welcome>]
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from switchback.events.event import Event
from switchback.events.listener import Listener

logger = logging.getLogger("switchback.events")

DEFAULT_PRIORITY = 10

# Runs after every other listener, whatever the sort order
FALLBACK_PRIORITY = sys.maxsize


class SortOrder(IntEnum):
    """Listener priority ordering."""

    LOW_TO_HIGH = 1
    HIGH_TO_LOW = 2


@dataclass(frozen=True, slots=True)
class _Completed:
    event: Event
    result: list[Any]


class EventContainer:
    """Priority-ordered pub/sub with "last event wins" tracking per id.

    Duplicate registrations are allowed and all fire. Listeners with equal
    priority run in registration order in both sort modes.
    """

    __slots__ = ("_completed", "_listeners", "_order")

    def __init__(self, order: SortOrder | int = SortOrder.LOW_TO_HIGH) -> None:
        self._listeners: dict[str, list[tuple[Callable[..., Any], int]]] = {}
        self._completed: dict[str, _Completed] = {}
        self._order = SortOrder.LOW_TO_HIGH
        self.order_by(order)

    @property
    def order(self) -> SortOrder:
        return self._order

    def on(
        self,
        event_id: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> EventContainer:
        """Register *callback* for *event_id*."""
        self._listeners.setdefault(event_id, []).append((callback, priority))
        return self

    def order_by(self, order: SortOrder | int) -> EventContainer:
        """Set the listener sort direction.

        Raises ``ValueError`` unless *order* is ``LOW_TO_HIGH`` (1) or
        ``HIGH_TO_LOW`` (2).
        """
        try:
            self._order = SortOrder(order)
        except ValueError:
            msg = f"Invalid sort order {order!r}; expected 1 (LOW_TO_HIGH) or 2 (HIGH_TO_LOW)."
            raise ValueError(msg) from None
        return self

    def trigger(self, event: Event | str, *args: Any) -> list[Any] | None:
        """Trigger *event* with positional *args*.

        Returns the listeners' return values in call order, or ``None`` when
        nothing is registered for the event id.
        """
        return self.trigger_array(event, args)

    def trigger_array(self, event: Event | str, args: Sequence[Any] = ()) -> list[Any] | None:
        """Trigger *event* with an explicit argument sequence."""
        prepared = self._prepare(event)
        if prepared is None:
            return None
        evt, listeners = prepared
        return self._execute(evt, listeners, tuple(args))

    def event(self, event_id: str) -> Event | None:
        """Return the last completed Event for *event_id*, if any."""
        completed = self._completed.get(event_id)
        return completed.event if completed is not None else None

    def result(self, event_id: str) -> list[Any] | None:
        """Return the result list of the last completed trigger of *event_id*."""
        completed = self._completed.get(event_id)
        return completed.result if completed is not None else None

    def has_listeners(self, event_id: str) -> bool:
        return bool(self._listeners.get(event_id))

    # -- Internal --

    def _prepare(self, event: Event | str) -> tuple[Event, list[Listener]] | None:
        if not isinstance(event, Event):
            if not isinstance(event, str):
                msg = f"Event must be a string or an Event instance, {type(event).__name__} given."
                raise TypeError(msg)
            event = Event(event)

        registered = self._listeners.get(event.id)
        if registered is None:
            return None

        listeners = [Listener(event.id, callback, priority) for callback, priority in registered]
        return event, listeners

    def _execute(self, event: Event, listeners: list[Listener], args: tuple[Any, ...]) -> list[Any]:
        # sorted() is stable: equal priorities keep registration order
        sign = -1 if self._order is SortOrder.HIGH_TO_LOW else 1
        ordered = sorted(
            listeners,
            key=lambda listener: (
                listener.priority == FALLBACK_PRIORITY,
                sign * listener.priority,
            ),
        )
        logger.debug("Triggering %s with %d listeners", event.id, len(ordered))

        result: list[Any] = []
        for listener in ordered:
            result.append(listener(event, args))
            if event.is_propagation_stopped():
                logger.debug("Propagation of %s stopped after %d listeners", event.id, len(result))
                break

        self._completed[event.id] = _Completed(event, result)
        return result
