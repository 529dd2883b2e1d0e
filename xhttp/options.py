"""Per-request parameters and the options that configure them."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from xhttp.config import DEFAULT_HEADERS, DEFAULT_TIMEOUT, Method

if TYPE_CHECKING:
    import logging
    import ssl

    from xhttp.decoding import Ref

BeforeRequest = Callable[["Parameter"], None]


@dataclass
class Parameter:
    """Mutable settings for a single request.

    One instance is built per call and thrown away afterwards.
    """

    url: str = ""
    method: Method = Method.GET
    timeout: float = DEFAULT_TIMEOUT
    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    params: dict[str, Any] = field(default_factory=dict)
    before_request: list[BeforeRequest] = field(default_factory=list)
    body: bytes | None = None
    tls_config: ssl.SSLContext | bool = True
    response: Ref | None = None
    logger: logging.Logger | logging.LoggerAdapter[Any] | None = None
    delete_uri_flag: bool = True
    deadline: float | None = None

    def set_body(self, body: bytes | None) -> None:
        self.body = body


class Option:
    """A named mutation of :class:`Parameter`."""

    __slots__ = ("_fn", "name")

    def __init__(self, name: str, fn: Callable[[Parameter], None]) -> None:
        self.name = name
        self._fn = fn

    def apply(self, p: Parameter) -> None:
        self._fn(p)

    def __repr__(self) -> str:
        return f"Option({self.name})"


def with_url(url: str) -> Option:
    def _apply(p: Parameter) -> None:
        p.url = url

    return Option("url", _apply)


def with_method(method: Method | str) -> Option:
    verb = Method(method.upper() if isinstance(method, str) else method)

    def _apply(p: Parameter) -> None:
        p.method = verb

    return Option("method", _apply)


def with_timeout(seconds: float) -> Option:
    """Round-trip timeout in seconds."""

    def _apply(p: Parameter) -> None:
        p.timeout = float(seconds)

    return Option("timeout", _apply)


def with_deadline(seconds: float) -> Option:
    """Absolute deadline ``seconds`` from now, shared by every later phase."""
    when = time.monotonic() + seconds

    def _apply(p: Parameter) -> None:
        p.deadline = when

    return Option("deadline", _apply)


def with_params(params: Mapping[str, Any] | None) -> Option:
    """Merge ``params`` into the query/body parameters key by key."""
    snapshot = dict(params) if params else {}

    def _apply(p: Parameter) -> None:
        p.params.update(snapshot)

    return Option("params", _apply)


def with_headers(headers: Mapping[str, str] | None) -> Option:
    """Merge ``headers`` into the request headers key by key."""
    snapshot = dict(headers) if headers else {}

    def _apply(p: Parameter) -> None:
        p.headers.update(snapshot)

    return Option("headers", _apply)


def with_before_request(hook: BeforeRequest) -> Option:
    """Register a hook run just before the request is built."""

    def _apply(p: Parameter) -> None:
        p.before_request.append(hook)

    return Option(f"before_request:{getattr(hook, '__name__', 'hook')}", _apply)


def with_tls_config(verify: ssl.SSLContext | bool) -> Option:
    """Replace TLS settings: an SSLContext, or a bool toggling verification."""

    def _apply(p: Parameter) -> None:
        p.tls_config = verify

    return Option("tls_config", _apply)


def with_response(ref: Ref) -> Option:
    """Capture the full response into ``ref.value``."""

    def _apply(p: Parameter) -> None:
        p.response = ref

    return Option("response", _apply)


def with_logger(logger: logging.Logger | logging.LoggerAdapter[Any]) -> Option:
    def _apply(p: Parameter) -> None:
        p.logger = logger

    return Option("logger", _apply)


def with_delete_uri_flag(flag: bool) -> Option:
    """Whether DELETE also sends its parameters in the query string."""

    def _apply(p: Parameter) -> None:
        p.delete_uri_flag = flag

    return Option("delete_uri_flag", _apply)
