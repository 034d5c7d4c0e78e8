"""Tests for switchback.events.event and switchback.events.listener."""

import pytest

from switchback.events.event import ErrorEvent, Event, InvokableEvent
from switchback.events.listener import Listener


class TestEvent:
    def test_flags_start_false(self) -> None:
        event = Event("x")
        assert not event.is_default_prevented()
        assert not event.is_propagation_stopped()

    def test_prevent_default(self) -> None:
        event = Event("x").prevent_default()
        assert event.is_default_prevented()
        assert not event.is_propagation_stopped()

    def test_stop_propagation(self) -> None:
        event = Event("x").stop_propagation()
        assert event.is_propagation_stopped()

    def test_data_bag(self) -> None:
        event = Event("x")
        event["user"] = "ada"
        assert "user" in event
        assert event["user"] == "ada"
        assert event.get("missing", 3) == 3
        del event["user"]
        assert "user" not in event

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            Event("x")["nope"]


class TestErrorEvent:
    def test_collects_exceptions(self) -> None:
        event = ErrorEvent("errors")
        first = ValueError("one")
        event.attach_exception(first)
        event.attach_exception(KeyError("two"))
        assert event.get_exceptions()[0] is first
        assert len(event.exceptions) == 2

    def test_is_an_event(self) -> None:
        event = ErrorEvent("errors")
        event.prevent_default()
        assert isinstance(event, Event)
        assert event.is_default_prevented()


class TestInvokableEvent:
    def test_calls_attached_callable(self) -> None:
        event = InvokableEvent("render")
        event.on_invoke(lambda a, b: a * b)
        assert event(6, 7) == 42

    def test_without_callable_returns_none(self) -> None:
        assert InvokableEvent("render")() is None

    def test_rejects_uncallable(self) -> None:
        with pytest.raises(TypeError, match="uncallable"):
            InvokableEvent("render").on_invoke("not callable")  # type: ignore[arg-type]


class TestListener:
    def test_invoke_prepends_event(self) -> None:
        listener = Listener("x", lambda event, a: (event.id, a), 5)
        assert listener.invoke(Event("x"), (1,)) == ("x", 1)
        assert listener(Event("x"), [2]) == ("x", 2)

    def test_is_immutable(self) -> None:
        listener = Listener("x", print, 5)
        with pytest.raises(AttributeError):
            listener.priority = 1  # type: ignore[misc]
