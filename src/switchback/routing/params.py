"""Built-in route vars.

Each var is a regex fragment with one capture group, used for
``<name:var>`` and ``<var>`` placeholders like ``<id:int>``.
"""

import re

DEFAULT_VARS: dict[str, str] = {
    "segment": r"([^_/][^/]+)",
    "words": r"(\w\-+)",
    "int": r"(\d+)",
    "str": r"(.+?)",
    "any": r"(.?.+?)",
}


def ensure_group(regex: str) -> str:
    """Wrap *regex* in a capture group unless it already captures.

    Built-in vars carry their own group; user vars such as ``\\d{4}``
    usually don't.
    """
    try:
        groups = re.compile(regex).groups
    except re.error:
        return f"({regex})"
    return regex if groups else f"({regex})"
