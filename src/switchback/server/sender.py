"""ASGI response sending: a finalised Response becomes two ASGI messages."""

import logging

from switchback._internal.asgi import Send
from switchback.http.response import Response

logger = logging.getLogger("switchback.server")


def _body_allowed(status: int, method: str) -> bool:
    # 1xx, 204, 304 and HEAD responses carry no body
    return method != "HEAD" and not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response*, calling ``Response.send()`` first if nobody did."""
    response.send()
    assert response.status is not None

    body = response.body_bytes if _body_allowed(response.status, method) else b""
    headers = response.raw_headers()
    headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": headers,
        }
    )
    await send({"type": "http.response.body", "body": body})
