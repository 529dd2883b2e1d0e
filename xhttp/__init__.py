"""xhttp: option-driven HTTP client with before-request hooks."""

__version__ = "0.1.0"

from xhttp.client import Client, default_client, delete, get, post, put
from xhttp.config import DEFAULT_HEADERS, DEFAULT_TIMEOUT, Method
from xhttp.decoding import Ref
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
from xhttp.options import (
    Option,
    Parameter,
    with_before_request,
    with_deadline,
    with_delete_uri_flag,
    with_headers,
    with_logger,
    with_method,
    with_params,
    with_response,
    with_timeout,
    with_tls_config,
    with_url,
)

__all__ = [
    "DEFAULT_HEADERS",
    "DEFAULT_TIMEOUT",
    "BodyReadError",
    "Client",
    "CloseError",
    "DecodeError",
    "HookError",
    "Method",
    "Option",
    "OptionError",
    "Parameter",
    "Ref",
    "RequestConstructionError",
    "TransportError",
    "XHTTPError",
    "default_client",
    "delete",
    "get",
    "post",
    "put",
    "with_before_request",
    "with_deadline",
    "with_delete_uri_flag",
    "with_headers",
    "with_logger",
    "with_method",
    "with_params",
    "with_response",
    "with_timeout",
    "with_tls_config",
    "with_url",
]
