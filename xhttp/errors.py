"""Exceptions raised by the request pipeline.

Every failure surfaces as a subclass of :class:`XHTTPError`. The underlying
httpx, json or pydantic exception is chained as ``__cause__``.
"""

from __future__ import annotations


class XHTTPError(Exception):
    """Base class for all xhttp errors."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url

    def __str__(self) -> str:
        if self.url:
            return f"{self.message}, url: {self.url}"
        return self.message


class OptionError(XHTTPError):
    """An option could not be applied to the request parameters."""


class HookError(XHTTPError):
    """A before-request hook raised."""


class RequestConstructionError(XHTTPError):
    """Method, URL and body could not be assembled into a request."""


class TransportError(XHTTPError):
    """Network, TLS or timeout failure while talking to the server."""


class BodyReadError(XHTTPError):
    """The response body could not be read."""


class DecodeError(XHTTPError):
    """The response body could not be stored into the result target."""


class CloseError(XHTTPError):
    """Closing the response failed.

    ``prior`` holds the pipeline error that was already pending when the
    close was attempted, if any.
    """

    def __init__(self, message: str, *, url: str | None = None, prior: XHTTPError | None = None) -> None:
        super().__init__(message, url=url)
        self.prior = prior

    def __str__(self) -> str:
        text = super().__str__()
        if self.prior is not None:
            return f"{text} (after: {self.prior})"
        return text
