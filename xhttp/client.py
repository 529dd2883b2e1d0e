"""Request executor and the GET/POST/PUT/DELETE facade."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from xhttp.config import Method, client_options_from_config
from xhttp.decoding import MSG_NOT_SETTABLE, assign_text, decode_into, parse_json
from xhttp.encoding import encode_json, with_query
from xhttp.errors import (
    BodyReadError,
    CloseError,
    DecodeError,
    HookError,
    OptionError,
    RequestConstructionError,
    TransportError,
    XHTTPError,
)
from xhttp.options import Parameter, with_before_request, with_method, with_params, with_url

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from xhttp.options import BeforeRequest, Option

logger = logging.getLogger(__name__)


class Client:
    """HTTP client applying options and hooks around every request.

    ``options`` are defaults applied to each call before the verb's own
    options and the caller's. The client holds no other state, so one
    instance can be shared between threads.

    Usage::

        c = Client(with_timeout(10))
        out = Ref(dict)
        c.get("http://x/a", out, with_params({"q": "1"}))
    """

    def __init__(self, *options: Option) -> None:
        self.options: tuple[Option, ...] = options

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> Client:
        """Client whose defaults come from the config file (or ``config``)."""
        return cls(*client_options_from_config(config))

    # ── verbs ─────────────────────────────────────────────────────────

    def get(self, url: str, result: Any, *opts: Option) -> None:
        """GET ``url`` with the parameters encoded into the query string."""

        def build_query(p: Parameter) -> None:
            p.url = with_query(p.url, p.params)
            if p.logger is not None:
                p.logger.info("Get url %s %s", p.headers, p.url)

        return self._request(url, result, with_method(Method.GET), with_before_request(build_query), *opts)

    def post(self, url: str, params: Mapping[str, Any] | None, result: Any, *opts: Option) -> None:
        """POST ``params`` as a JSON body."""
        return self._send_json(Method.POST, url, params, result, opts)

    def put(self, url: str, params: Mapping[str, Any] | None, result: Any, *opts: Option) -> None:
        """PUT ``params`` as a JSON body."""
        return self._send_json(Method.PUT, url, params, result, opts)

    def delete(self, url: str, params: Mapping[str, Any] | None, result: Any, *opts: Option) -> None:
        """DELETE with ``params`` as a JSON body and, unless disabled, in the query string."""
        verb_opts = [with_method(Method.DELETE), with_params(params)]
        if params is not None:
            verb_opts.append(with_before_request(_json_body_hook("Delete", also_query=True)))
        return self._request(url, result, *verb_opts, *opts)

    def _send_json(
        self,
        method: Method,
        url: str,
        params: Mapping[str, Any] | None,
        result: Any,
        opts: tuple[Option, ...],
    ) -> None:
        verb_opts = [with_method(method), with_params(params)]
        if params is not None:
            verb_opts.append(with_before_request(_json_body_hook(method.value.title())))
        return self._request(url, result, *verb_opts, *opts)

    # ── pipeline ──────────────────────────────────────────────────────

    def _apply(self, opts: tuple[Option, ...]) -> Parameter:
        p = Parameter()
        try:
            for o in opts:
                o.apply(p)
        except Exception as e:
            raise OptionError(f"request with_opt err, opts: {list(opts)!r}", url=p.url or None) from e
        return p

    def _request(self, url: str, result: Any, *opts: Option) -> None:
        p = self._apply((with_url(url), *self.options, *opts))

        for hook in p.before_request:
            try:
                hook(p)
            except Exception as e:
                raise HookError(f"request callback err, hook: {getattr(hook, '__name__', hook)!r}: {e}", url=p.url) from e

        deadline = time.monotonic() + p.timeout
        if p.deadline is not None:
            deadline = min(deadline, p.deadline)
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TransportError("request do err, deadline exceeded before send", url=p.url)

        logger.debug("%s %s timeout=%.3fs", p.method.value, p.url, remaining)
        with httpx.Client(verify=p.tls_config) as client:
            try:
                req = client.build_request(
                    p.method.value,
                    p.url,
                    content=p.body,
                    headers=p.headers,
                    timeout=httpx.Timeout(remaining),
                )
            except (httpx.InvalidURL, httpx.UnsupportedProtocol, TypeError, ValueError) as e:
                raise RequestConstructionError(f"request build err, body: {p.body!r}: {e}", url=p.url) from e

            try:
                resp = client.send(req, stream=True)
            except httpx.HTTPError as e:
                raise TransportError(f"request do err, method: {p.method.value}: {e}", url=p.url) from e
            logger.debug("%s %s -> %d", p.method.value, p.url, resp.status_code)
            resp.stream = _DeadlineStream(resp.stream, deadline, p.url)

            pending: XHTTPError | None = None
            try:
                _handle_response(p, resp, result)
            except XHTTPError as e:
                pending = e
                raise
            finally:
                _close(p, resp, pending)


class _DeadlineStream(httpx.SyncByteStream):
    """Response stream that gives up once the round-trip deadline passes."""

    def __init__(self, stream: httpx.SyncByteStream, deadline: float, url: str) -> None:
        self._stream = stream
        self._deadline = deadline
        self._url = url

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._stream:
            if time.monotonic() > self._deadline:
                raise TransportError("request do err, timeout exceeded while reading response", url=self._url)
            yield chunk

    def close(self) -> None:
        self._stream.close()


def _json_body_hook(label: str, *, also_query: bool = False) -> BeforeRequest:
    def encode_body(p: Parameter) -> None:
        data = encode_json(p.params)
        p.set_body(data)
        if p.logger is not None:
            p.logger.info("%s url %s %s %s", label, p.headers, p.url, data.decode("utf-8"))

        if also_query and p.delete_uri_flag:
            p.url = with_query(p.url, p.params)
            if p.logger is not None:
                p.logger.info("%s url %s", label, p.url)

    return encode_body


def _read(p: Parameter, resp: httpx.Response, what: str) -> bytes:
    try:
        return resp.read()
    except (httpx.HTTPError, httpx.StreamError) as e:
        raise BodyReadError(f"{what}: {e}", url=p.url) from e


def _handle_response(p: Parameter, resp: httpx.Response, result: Any) -> None:
    body: bytes | None = None
    if p.response is not None:
        if p.response.readonly:
            raise DecodeError(f"response capture: {MSG_NOT_SETTABLE}", url=p.url)
        body = _read(p, resp, "request read err")
        p.response.value = resp

    if result is None:
        # Drain so the connection can be released cleanly
        _read(p, resp, "resp body clear err")
        return

    if body is None:
        body = _read(p, resp, "request read err")

    if not body:
        return

    ok, data = parse_json(body)
    if ok:
        decode_into(result, data)
        return
    assign_text(result, resp.text)


def _close(p: Parameter, resp: httpx.Response, pending: XHTTPError | None) -> None:
    try:
        resp.close()
    except (httpx.HTTPError, httpx.StreamError, OSError) as e:
        raise CloseError(f"resp body close err: {e}", url=p.url, prior=pending) from e
    logger.debug("closed %s", p.url)


# ============================================================================
# Module-level convenience functions
# ============================================================================

default_client = Client()


def get(url: str, result: Any, *opts: Option, client: Client | None = None) -> None:
    return (client or default_client).get(url, result, *opts)


def post(url: str, params: Mapping[str, Any] | None, result: Any, *opts: Option, client: Client | None = None) -> None:
    return (client or default_client).post(url, params, result, *opts)


def put(url: str, params: Mapping[str, Any] | None, result: Any, *opts: Option, client: Client | None = None) -> None:
    return (client or default_client).put(url, params, result, *opts)


def delete(url: str, params: Mapping[str, Any] | None, result: Any, *opts: Option, client: Client | None = None) -> None:
    return (client or default_client).delete(url, params, result, *opts)
