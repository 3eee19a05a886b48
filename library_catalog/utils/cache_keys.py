"""Deterministic cache-key construction for catalogue queries.

A key is the operation name followed by its normalised parameters, joined
with ``:``.  Every predicate lookup in the catalogue is case-insensitive,
so string parameters are stripped and case-folded: ``"Tolkien "`` and
``"tolkien"`` are the same query and must share one cache entry.

    cache_key("authorsByName", "Tolkien")   -> "authorsByName:tolkien"
    cache_key("bookById", 7)                -> "bookById:7"
    cache_key("allBooks")                   -> "allBooks"
"""

from __future__ import annotations

from typing import Any

KEY_SEPARATOR = ":"
_NONE_TOKEN = "~"


def _normalise(param: Any) -> str:
    if param is None:
        return _NONE_TOKEN
    text = param.strip().casefold() if isinstance(param, str) else str(param)
    # Escape the separator and the None token so ("a:b",) never collides with
    # ("a", "b") and "~" never collides with None.
    text = text.replace("\\", "\\\\")
    for reserved in (KEY_SEPARATOR, _NONE_TOKEN):
        text = text.replace(reserved, "\\" + reserved)
    return text


def cache_key(operation: str, *params: Any) -> str:
    """Build the cache key for *operation* called with *params*."""
    if not operation:
        msg = "Cache key operation name must not be empty"
        raise ValueError(msg)
    return KEY_SEPARATOR.join([operation, *(_normalise(p) for p in params)])
