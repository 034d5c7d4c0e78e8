"""Development server.

Runs a live switchback App under pounce, single worker, reloading on
file changes when ``debug`` is on.
"""

from collections.abc import Awaitable, Callable
from typing import TypeAlias

from switchback._internal.asgi import Receive, Scope, Send
from switchback.errors import ConfigurationError

ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]


def run_dev_server(
    app: ASGIApp,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_dirs: tuple[str, ...] = (),
) -> None:
    """Serve *app* on *host*:*port* with pounce.

    pounce's ``run()`` wants an import string; ``Server`` accepts the
    ASGI callable directly, so that is used here.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = (
            "Running the development server requires 'pounce'. "
            "Install it with: pip install switchback[server]"
        )
        raise ConfigurationError(msg) from None

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_dirs=reload_dirs,
    )
    Server(config, app).run()
