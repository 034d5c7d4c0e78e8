"""Callback parameter binding.

Matches a route callback's signature against the request parameters so
handlers can declare what they need by name::

    def show(id: int, request: Request) -> str: ...

Resolution order per parameter:

1. ``request``, ``response``, ``router`` by name
2. Request params (query, body, path) by name, converted to the annotated type
3. The parameter's default

A required parameter with no value raises ``MissingParam``.
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from switchback.errors import MissingParam


def bind_params(
    callback: Callable[..., Any],
    params: Mapping[str, Any],
    injectables: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build keyword arguments for *callback* from *params*."""
    injectables = injectables or {}
    try:
        sig = inspect.signature(callback, eval_str=True)
    except (TypeError, ValueError, NameError):
        # Builtins and unresolvable annotations: fall back to no binding
        return {}

    kwargs: dict[str, Any] = {}
    for name, param in sig.parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            if param.default is inspect.Parameter.empty:
                msg = f"Missing required route parameter {name!r} (positional-only)."
                raise MissingParam(msg)
            continue

        if name in injectables:
            kwargs[name] = injectables[name]
        elif name in params:
            kwargs[name] = _convert(params[name], param.annotation)
        elif param.default is inspect.Parameter.empty:
            msg = f"Missing required route parameter {name!r}."
            raise MissingParam(msg)

    return kwargs


def _convert(value: Any, annotation: Any) -> Any:
    """Convert *value* to a scalar annotation, leaving it as-is on failure."""
    if annotation in (int, float, str):
        try:
            return annotation(value)
        except (TypeError, ValueError):
            return value
    if annotation is bool and isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return value
