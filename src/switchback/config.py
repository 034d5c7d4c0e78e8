"""Settings shared by the App, its Request factory, and its Responses.

One frozen dataclass, built once at startup and passed down explicitly.
"""

from dataclasses import dataclass

from switchback.events.container import SortOrder


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Frozen application settings.

    Every field has a default, so only the differences need spelling out::

        config = AppConfig(debug=True, port=3000, event_order=SortOrder.HIGH_TO_LOW)
    """

    # Dev server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False  # also turns on reload and traceback 500 pages
    reload_dirs: tuple[str, ...] = ()

    # Listener sort direction for the app's EventContainer
    event_order: SortOrder = SortOrder.LOW_TO_HIGH

    # Request building
    strip_extensions: tuple[str, ...] = ("html", "jsonp", "json", "xml", "php")
    allowed_content_types: tuple[str, ...] = ("html", "json", "jsonp", "xml")
    allow_method_override_header: bool = True  # X-Http-Method-Override, POST only
    allow_method_override_parameter: bool = False  # ?_method=, POST only

    # Response defaults
    default_content_type: str = "text/html"
    charset: str = "UTF-8"

    # Bodies above this many bytes get a 413 before routing
    max_content_length: int = 16 * 1024 * 1024
