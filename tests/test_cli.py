"""Tests for the xhttp command line."""

from __future__ import annotations

import json

import httpx
import pytest
import respx
from typer.testing import CliRunner

from xhttp.cli import app
from xhttp.config import load_config
from tests.conftest import BASE_URL

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(config_home):
    return config_home


class TestRequestCommands:
    def test_get_prints_json(self, mock_api: respx.MockRouter):
        route = mock_api.get("/a").respond(json={"k": "v"})
        result = runner.invoke(app, ["get", f"{BASE_URL}/a", "-p", "q=1"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"k": "v"}
        assert str(route.calls.last.request.url) == "http://x/a?q=1"

    def test_get_plain_text(self, mock_api: respx.MockRouter):
        mock_api.get("/t").respond(text="hello [world]")
        result = runner.invoke(app, ["get", f"{BASE_URL}/t"])
        assert result.exit_code == 0
        assert "hello [world]" in result.output

    def test_include_headers(self, mock_api: respx.MockRouter):
        mock_api.get("/a").respond(status_code=202, json={}, headers={"X-Req": "42"})
        result = runner.invoke(app, ["get", f"{BASE_URL}/a", "-i"])
        assert result.exit_code == 0
        assert "202" in result.output
        assert "x-req" in result.output.lower()

    def test_post_data_and_params(self, mock_api: respx.MockRouter):
        route = mock_api.post("/b").respond(json={})
        result = runner.invoke(app, ["post", f"{BASE_URL}/b", "-d", '{"n": 1}', "-p", "name=x"])
        assert result.exit_code == 0, result.output
        assert route.calls.last.request.content == b'{"n":1,"name":"x"}'

    def test_post_without_params_sends_no_body(self, mock_api: respx.MockRouter):
        route = mock_api.post("/b").respond(json={})
        result = runner.invoke(app, ["post", f"{BASE_URL}/b"])
        assert result.exit_code == 0
        assert route.calls.last.request.content == b""

    def test_put_with_header(self, mock_api: respx.MockRouter):
        route = mock_api.put("/c").respond(json={})
        result = runner.invoke(app, ["put", f"{BASE_URL}/c", "-p", "a=1", "-H", "X-Token: abc"])
        assert result.exit_code == 0
        assert route.calls.last.request.headers["X-Token"] == "abc"

    def test_delete_query_toggle(self, mock_api: respx.MockRouter):
        route = mock_api.delete("/d").respond(json={})
        runner.invoke(app, ["delete", f"{BASE_URL}/d", "-p", "id=3"])
        assert str(route.calls.last.request.url) == "http://x/d?id=3"
        runner.invoke(app, ["delete", f"{BASE_URL}/d", "-p", "id=3", "--no-delete-query"])
        assert str(route.calls.last.request.url) == "http://x/d"
        assert route.calls.last.request.content == b'{"id":"3"}'

    def test_bad_data(self):
        result = runner.invoke(app, ["post", f"{BASE_URL}/b", "-d", "{nope"])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_bad_param(self):
        result = runner.invoke(app, ["get", f"{BASE_URL}/a", "-p", "novalue"])
        assert result.exit_code == 1
        assert "KEY=VALUE" in result.output

    def test_transport_error(self, mock_api: respx.MockRouter):
        mock_api.get("/fail").mock(side_effect=httpx.ConnectError("refused"))
        result = runner.invoke(app, ["get", f"{BASE_URL}/fail"])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert "refused" in result.output

    def test_configured_headers_applied(self, mock_api: respx.MockRouter):
        runner.invoke(app, ["config", "--set-header", "X-App=saved"])
        route = mock_api.get("/a").respond(json={})
        result = runner.invoke(app, ["get", f"{BASE_URL}/a"])
        assert result.exit_code == 0
        assert route.calls.last.request.headers["X-App"] == "saved"


class TestConfigCommand:
    def test_show_defaults(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Timeout:" in result.output
        assert "3.0s" in result.output
        assert "Connection: close" in result.output

    def test_set_timeout(self):
        result = runner.invoke(app, ["config", "--set-timeout", "5"])
        assert result.exit_code == 0
        assert load_config()["client"]["timeout"] == 5.0

    def test_set_timeout_rejects_zero(self):
        result = runner.invoke(app, ["config", "--set-timeout", "0"])
        assert result.exit_code == 1

    def test_set_header(self):
        result = runner.invoke(app, ["config", "--set-header", "Authorization=Bearer abc"])
        assert result.exit_code == 0
        assert load_config()["headers"] == {"Authorization": "Bearer abc"}

    def test_insecure_toggle(self):
        runner.invoke(app, ["config", "--insecure"])
        assert load_config()["client"]["verify"] is False
        runner.invoke(app, ["config", "--secure"])
        assert load_config()["client"]["verify"] is True


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("xhttp ")
