"""ASGI type aliases and request-body reading.

Internal only. Applications deal with Request and Response.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

from switchback.errors import HTTPError

Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]


async def read_body(receive: Receive, *, limit: int) -> bytes:
    """Drain ``http.request`` messages into one body.

    Raises ``HTTPError(413)`` once more than *limit* bytes arrive.
    """
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        if chunk:
            size += len(chunk)
            if size > limit:
                raise HTTPError(413, "Request body too large")
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)
