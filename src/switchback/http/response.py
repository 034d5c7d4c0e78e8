"""HTTP response built up in place during a dispatch.

Router listeners, controllers, and callbacks all write to the same
Response. ``send()`` finalises it; after that it is read-only and the
ASGI sender turns it into messages.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from email.utils import formatdate
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

if TYPE_CHECKING:
    from switchback.http.request import Request

CONTENT_TYPES: dict[str, str] = {
    "html": "text/html",
    "xml": "text/xml",
    "jsonp": "text/javascript",
    "json": "application/json",
}

_EPOCH_EXPIRES = "Thu, 01 Jan 1970 00:00:00 GMT"


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` header. ``max_age=0`` deletes the cookie."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "Lax"

    def to_header_value(self) -> str:
        parts = [f"{self.name}={quote(self.value, safe='')}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
            if self.max_age <= 0:
                parts.append(f"Expires={_EPOCH_EXPIRES}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        return "; ".join(parts)


def cache_headers(expires_offset: int) -> dict[str, str]:
    """Cache headers for a lifetime of *expires_offset* seconds (0 = no cache)."""
    if expires_offset <= 0:
        return {
            "Cache-Control": "no-cache, must-revalidate, max-age=0",
            "Expires": _EPOCH_EXPIRES,
            "Pragma": "no-cache",
        }
    return {
        "Cache-Control": f"public, max-age={expires_offset}",
        "Expires": formatdate(time.time() + expires_offset, usegmt=True),
    }


class Response:
    """A mutable HTTP response.

    ``status`` stays ``None`` until something sets it; ``send()`` fills in
    200 (or 302 when a ``Location`` header is present). Header names are
    matched case-insensitively and keep the spelling they were first set
    with.

    Usage::

        response = Response()
        response.set_status(201).set_header("Location", "/posts/7")
        response.set_body("created")
        response.send()
    """

    __slots__ = (
        "_header_names",
        "_sent",
        "body",
        "charset",
        "content_type",
        "cookies",
        "default_content_type",
        "headers",
        "status",
    )

    def __init__(
        self,
        body: str = "",
        status: int | None = None,
        *,
        content_type: str | None = None,
        charset: str = "UTF-8",
        default_content_type: str = "text/html",
    ) -> None:
        self.body = body
        self.status = status
        self.content_type = content_type
        self.charset = charset
        self.default_content_type = default_content_type
        self.headers: dict[str, str] = {}
        self.cookies: list[SetCookie] = []
        self._header_names: dict[str, str] = {}
        self._sent = False

    def __repr__(self) -> str:
        return f"<Response {self.status} {self.content_type}>"

    @property
    def sent(self) -> bool:
        return self._sent

    def _check_not_sent(self) -> None:
        if self._sent:
            msg = "Response already sent; it can no longer be modified."
            raise RuntimeError(msg)

    # -- Status and headers --

    def set_status(self, status: int) -> Response:
        self._check_not_sent()
        self.status = int(status)
        return self

    def get_header(self, name: str) -> str | None:
        key = self._header_names.get(name.lower())
        return self.headers[key] if key is not None else None

    def has_header(self, name: str) -> bool:
        return name.lower() in self._header_names

    def set_header(self, name: str, value: str, overwrite: bool = True) -> Response:
        """Set a header. With ``overwrite=False`` an existing value is kept."""
        self._check_not_sent()
        key = self._header_names.get(name.lower())
        if key is not None:
            if not overwrite:
                return self
        else:
            key = self._header_names[name.lower()] = name
        self.headers[key] = str(value)
        return self

    def set_headers(self, headers: dict[str, str], overwrite: bool = True) -> Response:
        for name, value in headers.items():
            self.set_header(name, value, overwrite)
        return self

    def add_header(self, name: str, value: str) -> Response:
        return self.set_header(name, value, overwrite=False)

    def add_headers(self, headers: dict[str, str]) -> Response:
        return self.set_headers(headers, overwrite=False)

    def remove_header(self, name: str) -> Response:
        self._check_not_sent()
        key = self._header_names.pop(name.lower(), None)
        if key is not None:
            del self.headers[key]
        return self

    # -- Body --

    def set_body(self, value: Any, how: str = "replace") -> Response:
        """Set the body, or add to it.

        *how* is ``replace`` (default), ``append``/``after`` or
        ``prepend``/``before``. Unknown modes replace.
        """
        self._check_not_sent()
        value = value if isinstance(value, str) else str(value)
        how = how.lower()
        if how in ("append", "after"):
            self.body += value
        elif how in ("prepend", "before"):
            self.body = value + self.body
        else:
            self.body = value
        return self

    def add_body(self, value: Any, how: str = "append") -> Response:
        return self.set_body(value, how)

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode(self.charset)

    # -- Content type --

    def set_content_type(self, content_type: str) -> Response:
        self._check_not_sent()
        self.content_type = content_type
        return self

    def maybe_set_content_type(self, short: str) -> bool:
        """Set the content type from a short name (``json``, ``xml``...).

        Returns ``False`` if the name is unknown.
        """
        mime = CONTENT_TYPES.get(short)
        if mime is None:
            return False
        self.set_content_type(mime)
        return True

    def set_request(self, request: Request) -> Response:
        """Adapt defaults to *request*.

        The content type comes from the URI extension, else the best
        match in the ``Accept`` header. XHR responses are never cached,
        never sniffed and never framed.
        """
        if request.content_type is None or not self.maybe_set_content_type(request.content_type):
            negotiated = negotiate_content_type(
                request.headers.get("accept", ""), list(CONTENT_TYPES.values())
            )
            if negotiated is not None:
                self.set_content_type(negotiated)

        if request.is_xhr:
            self.nocache()
            self.nosniff()
            self.deny_iframes()
        return self

    # -- Cookies --

    def set_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str | None = "Lax",
    ) -> Response:
        self._check_not_sent()
        self.cookies.append(
            SetCookie(name, value, max_age, path, domain, secure, httponly, samesite)
        )
        return self

    def delete_cookie(self, name: str, path: str = "/", domain: str | None = None) -> Response:
        return self.set_cookie(name, "", max_age=0, path=path, domain=domain)

    # -- Cache and security headers --

    def set_cache_headers(self, expires_offset: int = 86400) -> Response:
        """Add cache headers. Existing cache headers are left alone.

        A zero offset means no caching and drops ``Last-Modified``.
        """
        if expires_offset <= 0:
            self.remove_header("Last-Modified")
        return self.add_headers(cache_headers(expires_offset))

    def nocache(self) -> Response:
        return self.set_cache_headers(0)

    def nosniff(self) -> Response:
        return self.set_header("X-Content-Type-Options", "nosniff")

    def set_frame_options_header(self, value: str | bool) -> Response:
        """``DENY`` for ``"deny"`` or ``False``, ``SAMEORIGIN`` otherwise."""
        if value is False or (isinstance(value, str) and value.lower() == "deny"):
            return self.set_header("X-Frame-Options", "DENY")
        return self.set_header("X-Frame-Options", "SAMEORIGIN")

    def deny_iframes(self) -> Response:
        return self.set_frame_options_header("DENY")

    # -- Sending --

    def send(self) -> Response:
        """Finalise defaults and lock the response. Idempotent."""
        if self._sent:
            return self
        if not self.has_header("Cache-Control"):
            self.nocache()
        if self.status is None:
            self.status = 302 if self.has_header("Location") else 200
        if self.content_type is None:
            self.content_type = self.default_content_type
        self._sent = True
        return self

    def content_type_header(self) -> str:
        content_type = self.content_type or self.default_content_type
        if self.charset and "charset=" not in content_type:
            return f"{content_type}; charset={self.charset}"
        return content_type

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        """Header pairs for ASGI, ``content-type`` first, then cookies last."""
        raw = [(b"content-type", self.content_type_header().encode("latin-1"))]
        raw.extend(
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self.headers.items()
            if name.lower() != "content-type"
        )
        raw.extend(
            (b"set-cookie", cookie.to_header_value().encode("latin-1")) for cookie in self.cookies
        )
        return raw


def negotiate_content_type(accept: str, supported: list[str]) -> str | None:
    """Pick the supported media type the ``Accept`` header prefers.

    Highest ``q`` wins; ties go to the order in *accept*. ``*/*`` and
    ``type/*`` ranges match the first supported type they cover.
    """
    ranked: list[tuple[float, int, str]] = []
    for position, item in enumerate(accept.split(",")):
        media, _, params = item.strip().partition(";")
        media = media.strip().lower()
        if not media:
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            ranked.append((-quality, position, media))

    for _, _, media in sorted(ranked):
        for candidate in supported:
            if media in (candidate, "*/*") or (
                media.endswith("/*") and candidate.startswith(media[:-1])
            ):
                return candidate
    return None
