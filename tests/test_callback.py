"""Tests for switchback.routing.callback — binding request params to callbacks."""

import pytest

from switchback.errors import MissingParam
from switchback.routing.callback import bind_params


class TestBindParams:
    def test_converts_scalar_annotations(self) -> None:
        def handler(id: int, ratio: float, name: str, flag: bool) -> None: ...

        kwargs = bind_params(handler, {"id": "7", "ratio": "0.5", "name": "x", "flag": "yes"})
        assert kwargs == {"id": 7, "ratio": 0.5, "name": "x", "flag": True}

    def test_bad_conversion_keeps_raw_value(self) -> None:
        def handler(id: int) -> None: ...

        assert bind_params(handler, {"id": "abc"}) == {"id": "abc"}

    def test_injectables_win_over_params(self) -> None:
        marker = object()

        def handler(request) -> None: ...  # noqa: ANN001

        assert bind_params(handler, {"request": "param"}, {"request": marker}) == {
            "request": marker
        }

    def test_defaults_left_out(self) -> None:
        def handler(page: int = 1) -> None: ...

        assert bind_params(handler, {}) == {}

    def test_missing_required(self) -> None:
        def handler(slug: str) -> None: ...

        with pytest.raises(MissingParam, match="slug"):
            bind_params(handler, {})

    def test_var_args_ignored(self) -> None:
        def handler(*args: str, **kwargs: str) -> None: ...

        assert bind_params(handler, {"a": "1"}) == {}

    def test_unannotated_passes_through(self) -> None:
        def handler(tags) -> None: ...  # noqa: ANN001

        assert bind_params(handler, {"tags": ["a", "b"]}) == {"tags": ["a", "b"]}
