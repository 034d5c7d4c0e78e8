"""HTTP request as seen by the router.

Built once per request from an ASGI scope (or directly with ``create``),
then mutated exactly once per dispatch when the router pushes the
matched path parameters.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, unquote

from switchback.config import AppConfig
from switchback.http.forms import UploadFile, parse_body
from switchback.http.headers import Headers

if TYPE_CHECKING:
    from switchback._internal.asgi import Scope

_DEFAULT_CONFIG = AppConfig()

_METHOD_CHECKS = frozenset({"GET", "POST", "PUT", "HEAD", "DELETE", "OPTIONS", "PATCH"})


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict."""
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep:
            cookies[key.strip()] = unquote(value.strip())
    return cookies


def strip_extension(uri: str, extensions: Iterable[str]) -> tuple[str, str | None]:
    """Remove a trailing ``.ext`` or ``/ext`` from *uri*.

    Returns the stripped URI and the extension, or ``(uri, None)``.
    """
    alternatives = "|".join(re.escape(ext.lstrip(".")) for ext in extensions)
    if not alternatives:
        return uri, None
    match = re.search(rf"[./]({alternatives})$", uri)
    if match is None:
        return uri, None
    return uri[: match.start()], match.group(1)


class Request:
    """A mutable HTTP request.

    ``params`` is the merged view the router and callbacks read: query
    params, then body params, then path params, later sources winning.

    The URI carries no leading or trailing slash and no query string. A
    recognised extension (``posts.json``) is stripped and recorded as the
    requested ``content_type``.
    """

    __slots__ = (
        "_allowed_content_types",
        "body_params",
        "content_type",
        "cookies",
        "files",
        "headers",
        "method",
        "params",
        "path_params",
        "query",
        "query_params",
        "uri",
    )

    def __init__(self) -> None:
        self.method = "GET"
        self.uri = ""
        self.query = ""
        self.headers = Headers()
        self.cookies: dict[str, str] = {}
        self.files: dict[str, UploadFile] = {}
        self.query_params: dict[str, Any] = {}
        self.body_params: dict[str, Any] = {}
        self.path_params: dict[str, str] = {}
        self.params: dict[str, Any] = {}
        self.content_type: str | None = None
        self._allowed_content_types: frozenset[str] = frozenset(
            _DEFAULT_CONFIG.allowed_content_types
        )

    def __repr__(self) -> str:
        return f"<Request {self.method} /{self.uri}>"

    # -- Factories --

    @classmethod
    def create(
        cls,
        method: str,
        uri: str,
        query: str = "",
        headers: Mapping[str, str] | Headers | None = None,
        body_params: Mapping[str, Any] | None = None,
        cookies: Mapping[str, str] | None = None,
        files: Mapping[str, UploadFile] | None = None,
        *,
        config: AppConfig | None = None,
    ) -> Request:
        """Build a request from already-decoded parts."""
        config = config or _DEFAULT_CONFIG
        request = cls()
        request._allowed_content_types = frozenset(config.allowed_content_types)

        path, _, inline_query = uri.partition("?")
        path, extension = strip_extension(path.strip("/"), config.strip_extensions)
        request.uri = path
        request.content_type = extension

        request.headers = headers if isinstance(headers, Headers) else Headers(headers or {})
        request.cookies = dict(cookies or {})
        request.files = dict(files or {})

        request.query = query or inline_query
        request.query_params = dict(parse_qsl(request.query, keep_blank_values=True))
        request.body_params = dict(body_params or {})
        request.params = {**request.query_params, **request.body_params}

        method = method.upper()
        if method == "POST":
            override = request.headers.get("x-http-method-override")
            if config.allow_method_override_header and override:
                method = override
            if config.allow_method_override_parameter and "_method" in request.query_params:
                method = request.query_params["_method"]
        request.method = method.upper()

        return request

    @classmethod
    def from_asgi(cls, scope: Scope, body: bytes = b"", *, config: AppConfig | None = None) -> Request:
        """Build a request from an ASGI HTTP scope and the full body."""
        headers = Headers.from_raw(scope.get("headers", ()))
        parsed = parse_body(body, headers.get("content-type"))
        return cls.create(
            scope["method"],
            scope["path"],
            scope.get("query_string", b"").decode("latin-1"),
            headers,
            parsed.params,
            parse_cookies(headers.get("cookie", "")),
            parsed.files,
            config=config,
        )

    # -- Router boundary --

    def set_path_params(self, params: Mapping[str, str]) -> Request:
        """Record the matched path parameters and merge them into ``params``."""
        self.path_params = dict(params)
        self.params = {**self.params, **self.path_params}
        return self

    # -- Params --

    def get_param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def param_exists(self, name: str) -> bool:
        return name in self.params

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    # -- Content type --

    def is_content_type_allowed(self, content_type: str) -> bool:
        return content_type in self._allowed_content_types

    def set_content_type(self, content_type: str) -> bool:
        """Set the requested content type if it is allowed."""
        if content_type in self._allowed_content_types:
            self.content_type = content_type
            return True
        return False

    # -- Predicates --

    @property
    def is_xhr(self) -> bool:
        """True for ``X-Requested-With: XMLHttpRequest`` requests."""
        return self.headers.get("x-requested-with") == "XMLHttpRequest"

    def is_(self, thing: str) -> bool | None:
        """Check the method (``"get"``, ``"post"``, ...) or ``"xhr"``/``"ajax"``.

        Returns ``None`` for anything unrecognised.
        """
        thing = thing.upper()
        if thing in _METHOD_CHECKS:
            return self.method == thing
        if thing in ("XHR", "AJAX"):
            return self.is_xhr
        return None
