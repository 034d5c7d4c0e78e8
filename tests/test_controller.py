"""Tests for switchback.routing.controller — Controller base class."""

from switchback.http.request import Request
from switchback.http.response import Response
from switchback.routing.controller import Controller


class Source(Controller):
    pass


class Target(Controller):
    def greet(self, suffix: str) -> str:
        return f"{self.get('name')}{suffix}"


class Widget:
    pass


class TestController:
    def test_get_and_set(self) -> None:
        ctrl = Source().set("name", "ada")
        assert ctrl.get("name") == "ada"
        assert ctrl.get("missing") is None

    def test_attach_defaults_to_class_name(self) -> None:
        widget = Widget()
        ctrl = Source().attach(widget)
        assert ctrl.get("Widget") is widget
        assert Source().attach(widget, "w").get("w") is widget

    def test_init_sets_request_and_response(self) -> None:
        request, response = Request.create("GET", "x"), Response()
        ctrl = Source().init(request, response)
        assert ctrl.request is request
        assert ctrl.response is response

    def test_transfer_copies_instance_attributes(self) -> None:
        source = Source().set("name", "ada").set("secret", "s")
        target = Target()
        source.transfer(target, exclude=["secret"])
        assert target.get("name") == "ada"
        assert target.get("secret") is None

    def test_forward_calls_target_method(self) -> None:
        source = Source().set("name", "ada")
        assert source.forward(Target(), "greet", "!") == "ada!"

    def test_forward_to_missing_method(self) -> None:
        assert Source().forward(Target(), "nope") is None
