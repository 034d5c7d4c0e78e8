"""Request body parsing — URL-encoded, multipart, and JSON.

Produces the flat ``body_params`` mapping the Request merges into its
params, plus uploaded files for multipart bodies.

Multipart parsing uses ``python-multipart``. URL-encoded bodies use
stdlib ``urllib.parse``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl

from python_multipart.multipart import MultipartParser, parse_options_header


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart form submission.

    Held in memory as bytes (suitable for typical web uploads).
    """

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def save(self, path: Path) -> None:
        """Write the file content to *path*. Parent directories must exist."""
        path.write_bytes(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


@dataclass(frozen=True, slots=True)
class ParsedBody:
    """Fields and files decoded from a request body."""

    params: dict[str, Any]
    files: dict[str, UploadFile]


def parse_body(body: bytes, content_type: str | None) -> ParsedBody:
    """Decode *body* according to *content_type*.

    - ``multipart/form-data``: fields and files
    - ``application/json``: the top-level object (non-objects are ignored)
    - anything else: URL-encoded pairs, last value wins

    Raises ``ValueError`` for malformed JSON or a multipart body without a
    boundary.
    """
    if not body:
        return ParsedBody({}, {})

    media_type = (content_type or "").lower().split(";")[0].strip()

    if media_type == "multipart/form-data":
        return _parse_multipart(body, content_type or "")

    if media_type == "application/json" or media_type.endswith("+json"):
        decoded = json.loads(body)
        return ParsedBody(decoded if isinstance(decoded, dict) else {}, {})

    return ParsedBody(dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True)), {})


def _parse_multipart(body: bytes, content_type: str) -> ParsedBody:
    """Parse multipart form data using python-multipart."""
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    fields: dict[str, Any] = {}
    files: dict[str, UploadFile] = {}

    # Per-part state, reset on every part boundary
    part: dict[str, Any] = {}

    def on_part_begin() -> None:
        part.clear()
        part.update(headers={}, data=bytearray(), name=None, filename=None, pending="")

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        part["data"].extend(chunk[start:end])

    def on_part_end() -> None:
        name = part.get("name")
        if name is None:
            return
        if part["filename"] is not None:
            files[name] = UploadFile(
                filename=part["filename"],
                content_type=part["headers"].get("content-type", "application/octet-stream"),
                content=bytes(part["data"]),
            )
        else:
            fields[name] = part["data"].decode("utf-8", errors="replace")

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        part["pending"] += chunk[start:end].decode("latin-1").lower()

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        field = part["pending"]
        part["headers"][field] = part["headers"].get(field, "") + chunk[start:end].decode("latin-1")

    def on_header_end() -> None:
        field = part["pending"]
        part["pending"] = ""
        if field != "content-disposition":
            return
        _, params = parse_options_header(part["headers"][field].encode("latin-1"))
        name = params.get(b"name")
        if name is not None:
            part["name"] = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is not None:
            part["filename"] = filename.decode("utf-8")

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
        "on_header_end": on_header_end,
    }

    parser = MultipartParser(boundary, callbacks)
    parser.write(body)
    parser.finalize()

    return ParsedBody(fields, files)
