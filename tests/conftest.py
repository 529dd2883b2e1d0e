"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest
import respx

from xhttp import Client

BASE_URL = "http://x"


@pytest.fixture()
def mock_api():
    """Activate respx mock for the test host."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as rsps:
        yield rsps


@pytest.fixture()
def client(mock_api: respx.MockRouter) -> Client:  # noqa: ARG001
    """Client with default options, wired to the mocked transport."""
    return Client()


@pytest.fixture()
def config_home(tmp_path, monkeypatch):
    """Point the config file at a temporary directory."""
    config_dir = tmp_path / "xhttp"
    monkeypatch.setattr("xhttp.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("xhttp.config.CONFIG_FILE", config_dir / "config.toml")
    monkeypatch.setattr("xhttp.cli.CONFIG_FILE", config_dir / "config.toml")
    monkeypatch.delenv("XHTTP_TIMEOUT", raising=False)
    monkeypatch.delenv("XHTTP_INSECURE", raising=False)
    return config_dir
