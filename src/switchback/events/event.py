"""Event objects passed through a chain of listeners."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Event:
    """A named occurrence with mutable signal flags and ad hoc data.

    The two flags are the only fixed state. Anything a trigger wants to
    attach travels in ``data`` and is reachable with item access::

        event = Event("user.saved")
        event["user"] = user
        "user" in event  # True
    """

    id: str
    data: dict[str, Any] = field(default_factory=dict)
    _default_prevented: bool = field(default=False, repr=False)
    _propagation_stopped: bool = field(default=False, repr=False)

    def prevent_default(self) -> Event:
        """Ask whoever triggered the event to skip its default behaviour."""
        self._default_prevented = True
        return self

    def is_default_prevented(self) -> bool:
        return self._default_prevented

    def stop_propagation(self) -> Event:
        """Halt the remaining listeners in the current trigger."""
        self._propagation_stopped = True
        return self

    def is_propagation_stopped(self) -> bool:
        return self._propagation_stopped

    # -- Item access to the data bag --

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(slots=True)
class ErrorEvent(Event):
    """An event that collects exceptions raised along the way."""

    exceptions: list[BaseException] = field(default_factory=list)

    def attach_exception(self, exception: BaseException) -> None:
        self.exceptions.append(exception)

    def get_exceptions(self) -> list[BaseException]:
        return self.exceptions


@dataclass(slots=True)
class InvokableEvent(Event):
    """An event that carries a callable the last listener can run."""

    _call: Callable[..., Any] | None = field(default=None, repr=False)

    def on_invoke(self, call: Callable[..., Any]) -> None:
        """Attach the callable run by ``__call__``.

        Raises ``TypeError`` if *call* is not callable.
        """
        if not callable(call):
            msg = f"Cannot attach uncallable {type(call).__name__} to invokable event."
            raise TypeError(msg)
        self._call = call

    def __call__(self, *args: Any) -> Any:
        if self._call is None:
            return None
        return self._call(*args)
