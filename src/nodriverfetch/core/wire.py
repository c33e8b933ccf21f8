"""wire-format helpers for `Fetch.*` commands.

pure functions, no session access:
- `headers_array()`: header mapping -> ordered `HeaderEntry` list (one entry per value)
- `normalize_response_headers()`: lowercase names + stringify values for fulfill
- `string_to_base64()` / `bytes_to_base64()`: bodies always travel base64-encoded
- `get_response()`: byte length + base64 form of a synthetic body
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Mapping

from nodriver import cdp


HeaderValue = str | list[str]


@dataclass(frozen=True)
class ParsedBody:
    """a response body ready for the wire.

    - content_length: length in bytes (utf-8 for text bodies)
    - base64: the body encoded for `Fetch.fulfillRequest`
    """
    content_length: int
    base64: str


def string_to_base64(text: str) -> str:
    """utf-8 encode `text` then base64 it."""
    return bytes_to_base64(text.encode("utf-8"))


def bytes_to_base64(data: bytes | bytearray | memoryview) -> str:
    return base64.b64encode(bytes(data)).decode()


def get_response(body: str | bytes | bytearray | memoryview) -> ParsedBody:
    """measure and encode a synthetic body.

    :param body: text (encoded as utf-8) or raw bytes.
    :raises TypeError: anything else (e.g. an int, which `bytes()` would zero-fill).
    :rtype: ParsedBody
    """
    if isinstance(body, str):
        raw = body.encode("utf-8")
    elif isinstance(body, (bytes, bytearray, memoryview)):
        raw = bytes(body)
    else:
        raise TypeError(f"response body must be str or bytes, not {type(body).__name__}")
    return ParsedBody(content_length=len(raw), base64=bytes_to_base64(raw))


def _stringify(value: Any) -> str:
    # match how chrome's own clients render booleans in headers
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_response_headers(headers: Mapping[str, Any] | None) -> dict[str, HeaderValue]:
    """fold header names to lowercase and stringify values.

    names that differ only in case collapse into one entry; the last one
    (in mapping order) wins. list/tuple values stay multi-valued.
    `None` values are dropped, same as `headers_array()`.

    :param headers: caller supplied headers, values may be str, numbers or lists.
    :return: new dict keyed by lowercase name.
    """
    normalized: dict[str, HeaderValue] = {}
    if not headers:
        return normalized
    for name, value in headers.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            normalized[name.lower()] = [_stringify(item) for item in value]
        else:
            normalized[name.lower()] = _stringify(value)
    return normalized


def headers_array(headers: Mapping[str, Any]) -> list[cdp.fetch.HeaderEntry]:
    """flatten a header mapping into the wire's ordered name/value pairs.

    a list value becomes one entry per item (same name repeated).
    `None` values are dropped.
    """
    entries: list[cdp.fetch.HeaderEntry] = []
    for name, value in headers.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        entries.extend(
            cdp.fetch.HeaderEntry(name=name, value=_stringify(item))
            for item in values
        )
    return entries


__all__ = [
    "HeaderValue",
    "ParsedBody",
    "string_to_base64",
    "bytes_to_base64",
    "get_response",
    "normalize_response_headers",
    "headers_array",
]
