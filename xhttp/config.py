"""Configuration, constants, and enums for xhttp."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from xhttp.options import Option

# ============================================================================
# XDG Base Directory Configuration
# ============================================================================

# Config: ~/.config/xhttp/config.toml
CONFIG_DIR = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "xhttp"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# ============================================================================
# Request defaults
# ============================================================================

DEFAULT_TIMEOUT = 3.0  # seconds

DEFAULT_HEADERS: dict[str, str] = {
    "Connection": "close",
    "Content-Type": "application/json",
}

TRUTHY = ("1", "true", "yes", "on")


class Method(str, Enum):
    """HTTP verbs the client issues."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


# ============================================================================
# Config Functions
# ============================================================================


def load_config() -> dict[str, Any]:
    """Load configuration from TOML config file."""
    if CONFIG_FILE.exists():
        with CONFIG_FILE.open("rb") as f:
            return tomllib.load(f)
    return {}


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to TOML config file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    # Top-level scalars must precede any table header
    for key, value in config.items():
        if not isinstance(value, dict):
            lines.append(f"{key} = {_toml_value(value)}")
    for key, value in config.items():
        if isinstance(value, dict):
            if lines:
                lines.append("")
            lines.append(f"[{key}]")
            for k, v in value.items():
                name = k if k.replace("_", "").replace("-", "").isalnum() else _toml_value(k)
                lines.append(f"{name} = {_toml_value(v)}")

    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def get_timeout(config: dict[str, Any] | None = None) -> float:
    """Resolve the default timeout from XHTTP_TIMEOUT or the config file."""
    env_timeout = os.environ.get("XHTTP_TIMEOUT")
    if env_timeout:
        return float(env_timeout)

    cfg = load_config() if config is None else config
    client_section = cfg.get("client", {})
    if isinstance(client_section, dict) and "timeout" in client_section:
        return float(client_section["timeout"])
    return DEFAULT_TIMEOUT


def get_verify(config: dict[str, Any] | None = None) -> bool:
    """Resolve whether certificates are verified (XHTTP_INSECURE wins)."""
    if os.environ.get("XHTTP_INSECURE", "").lower() in TRUTHY:
        return False

    cfg = load_config() if config is None else config
    client_section = cfg.get("client", {})
    if isinstance(client_section, dict) and "verify" in client_section:
        return bool(client_section["verify"])
    return True


def client_options_from_config(config: dict[str, Any] | None = None) -> list[Option]:
    """Translate the config file into default options for a Client."""
    from xhttp.options import with_delete_uri_flag, with_headers, with_timeout, with_tls_config  # noqa: PLC0415

    cfg = load_config() if config is None else config
    opts: list[Option] = [with_timeout(get_timeout(cfg)), with_tls_config(get_verify(cfg))]

    headers = cfg.get("headers", {})
    if isinstance(headers, dict) and headers:
        opts.append(with_headers({str(k): str(v) for k, v in headers.items()}))

    client_section = cfg.get("client", {})
    if isinstance(client_section, dict) and "delete_uri_flag" in client_section:
        opts.append(with_delete_uri_flag(bool(client_section["delete_uri_flag"])))
    return opts
