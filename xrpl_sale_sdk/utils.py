"""Utilities: URL building, Retry-After parsing, request-ID helpers, safe logging."""

from __future__ import annotations

import re
import uuid
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote

QueryParams = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

REDACTED = "***REDACTED***"

_BEARER_RE = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
_LONG_HEX_RE = re.compile(r"\b[0-9a-fA-F]{24,}\b")


def generate_request_id() -> str:
    """Generate a short UUID4 hex string for X-Request-ID."""
    return uuid.uuid4().hex[:12]


def encode_query_value(value: Any) -> str:
    """Render a scalar query value as its wire string."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(endpoint: str, params: Optional[QueryParams] = None) -> str:
    """Append percent-encoded query pairs to ``endpoint``.

    ``params`` is an ordered sequence of ``(key, value)`` pairs; a mapping is
    read in its insertion order. Output order always equals input order, so
    the same pairs always produce the same URL.
    """
    if not params:
        return endpoint
    pairs = params.items() if isinstance(params, Mapping) else params
    query = "&".join(
        f"{quote(str(key), safe='')}={quote(encode_query_value(value), safe='')}"
        for key, value in pairs
    )
    if not query:
        return endpoint
    return f"{endpoint}?{query}"


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse a Retry-After header given as integer seconds.

    HTTP-date values and garbage yield None.
    """
    if value is None:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def redact_text(text: str) -> str:
    """Redact bearer tokens and long hex strings from a log line."""
    if not text:
        return text
    result = _BEARER_RE.sub(r"\1" + REDACTED, text)
    return _LONG_HEX_RE.sub(REDACTED, result)
