"""Query-string and JSON body encoding for request parameters."""

from __future__ import annotations

import json
import math
from decimal import Decimal
from operator import itemgetter
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode, urlsplit, urlunsplit

if TYPE_CHECKING:
    from collections.abc import Mapping


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def to_str(value: Any) -> str:
    """Stringify a parameter value for use in a query string.

    Scalars get their plain text form (``True`` -> ``true``, ``1.5e20`` ->
    ``150000000000000000000``); containers and other objects are rendered
    as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def encode_query(params: Mapping[str, Any]) -> str:
    """Form-encode ``params`` with keys in sorted order."""
    pairs = sorted(((k, to_str(v)) for k, v in params.items()), key=itemgetter(0))
    return urlencode(pairs)


def with_query(url: str, params: Mapping[str, Any]) -> str:
    """Return ``url`` with its query string replaced by ``params``.

    Any query already on the URL is dropped. Raises ValueError for a
    malformed URL.
    """
    parts = urlsplit(url)
    # Touch the port so a malformed authority fails here rather than at send time
    _ = parts.port
    return urlunsplit(parts._replace(query=encode_query(params)))


def encode_json(params: Mapping[str, Any]) -> bytes:
    """Compact, key-sorted UTF-8 JSON body for ``params``."""
    return json.dumps(
        params,
        separators=(",", ":"),
        sort_keys=True,
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")
