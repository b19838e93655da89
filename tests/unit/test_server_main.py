"""Tests for the server entry point and composition root."""

import io
import json
import subprocess
import sys
from unittest.mock import patch

import pytest

from kiket_mcp.bootstrap import create_runtime
from kiket_mcp.server.config import ServerConfig
from kiket_mcp.server.main import _parse_args, create_transport, main, serve
from kiket_mcp.transports import StdioTransport, WebSocketTransport


def make_config(**overrides) -> ServerConfig:
    return ServerConfig(api_url="https://kiket.example.com", api_key="token", **overrides)


class TestParseArgs:
    """Tests for _parse_args function."""

    def test_default_values(self):
        """Should return default values when no args provided."""
        args = _parse_args([])

        assert args.transport is None
        assert args.host is None
        assert args.port is None
        assert args.health_port is None
        assert args.config is None
        assert args.log_file is None

    def test_all_options_combined(self):
        """Should parse all options together."""
        args = _parse_args(
            [
                "--transport",
                "websocket",
                "--host",
                "127.0.0.1",
                "--port",
                "8080",
                "--health-port",
                "8081",
                "--config",
                "/path/to/config.yaml",
                "--log-file",
                "/var/log/kiket.log",
            ]
        )

        assert args.transport == "websocket"
        assert args.host == "127.0.0.1"
        assert args.port == 8080
        assert args.health_port == 8081
        assert args.config == "/path/to/config.yaml"
        assert args.log_file == "/var/log/kiket.log"

    def test_unknown_transport_rejected(self):
        """Should exit on an unsupported transport."""
        with pytest.raises(SystemExit):
            _parse_args(["--transport", "smoke-signals"])


class TestCreateTransport:
    """Tests for create_transport()."""

    def test_stdio_default(self):
        """Should build a stdio transport by default."""
        assert isinstance(create_transport(make_config()), StdioTransport)

    def test_websocket(self):
        """Should build a websocket transport when configured."""
        assert isinstance(create_transport(make_config(transport="websocket")), WebSocketTransport)


class TestCreateRuntime:
    """Tests for the composition root."""

    def test_registry_order_and_defaults(self, fake_client):
        """Should wire issues, projects and users registries in that order."""
        runtime = create_runtime(make_config(project_key="KIKET"), client=fake_client)

        assert [registry.domain for registry in runtime.registries] == ["issues", "projects", "users"]
        assert runtime.router.registries == runtime.registries
        assert runtime.executor.config == runtime.config.retry

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self, fake_client):
        """Should close the remote client."""
        runtime = create_runtime(make_config(), client=fake_client)

        await runtime.aclose()

        assert fake_client.closed is True


class TestMain:
    """Tests for main()."""

    def test_configuration_error_exits_1(self):
        """Should return 1 when credentials are missing."""
        with patch.dict("os.environ", {}, clear=True), patch("kiket_mcp.server.main.setup_logging"):
            assert main([]) == 1

    @pytest.mark.asyncio
    async def test_serve_until_stdin_eof(self, fake_client, executor):
        """Should answer every line and shut down cleanly on EOF."""
        runtime = create_runtime(make_config(), client=fake_client, executor=executor)
        stdin = io.BytesIO(
            (
                json.dumps({"jsonrpc": "2.0", "id": 1, "method": "ping"})
                + "\n"
                + json.dumps({"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "getCurrentUser"}})
                + "\n"
            ).encode()
        )
        stdout = io.StringIO()

        await serve(runtime, StdioTransport(stdin=stdin, stdout=stdout))

        responses = {msg["id"]: msg for msg in map(json.loads, stdout.getvalue().splitlines())}
        assert responses[1]["result"] == "pong"
        assert responses[2]["result"]["user"]["id"] == 7
        assert fake_client.closed is True


class TestPackageImports:
    """Tests for import order independence of the packages."""

    @pytest.mark.parametrize(
        "module",
        ["kiket_mcp.bootstrap", "kiket_mcp.bootstrap.runtime", "kiket_mcp.server", "kiket_mcp.server.main"],
    )
    def test_imports_in_fresh_interpreter(self, module):
        """Should import each package first thing in a new interpreter."""
        result = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 0, result.stderr
