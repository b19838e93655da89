"""Tests for the protocol router."""

import json

import pytest

from kiket_mcp import __version__
from kiket_mcp.application.operations import (
    create_issue_registry,
    create_project_registry,
    create_user_registry,
    Operation,
    OperationRegistry,
)
from kiket_mcp.domain.events import ToolCallCompleted, ToolCallFailed
from kiket_mcp.domain.exceptions import ErrorKind, KiketError
from kiket_mcp.domain.model import CurrentUserInput
from kiket_mcp.server.router import ProtocolRouter


@pytest.fixture
def router(fake_client, executor, event_bus):
    registries = [
        create_issue_registry(fake_client, executor, default_project_key="KIKET"),
        create_project_registry(fake_client, executor),
        create_user_registry(fake_client, executor),
    ]
    return ProtocolRouter(registries, event_bus=event_bus)


class CountingRegistry(OperationRegistry):
    """Registry that counts dispatch attempts."""

    def __init__(self, domain, operations):
        super().__init__(domain, operations)
        self.attempts = 0

    async def try_dispatch(self, name, raw_args):
        self.attempts += 1
        return await super().try_dispatch(name, raw_args)


class TestScenarios:
    """End-to-end envelope scenarios."""

    @pytest.mark.asyncio
    async def test_ping(self, router):
        """Should answer ping with pong, echoing the id."""
        response = await router.handle_message({"method": "ping", "id": 7})

        assert response == {"jsonrpc": "2.0", "id": 7, "result": "pong"}

    @pytest.mark.asyncio
    async def test_get_issue(self, router):
        """Should wrap the issue under result.issue."""
        response = await router.handle_message(
            {"method": "tools/call", "id": 9, "params": {"name": "getIssue", "arguments": {"id": "KIKET-1"}}}
        )

        assert response["jsonrpc"] == "2.0"
        assert response["id"] == 9
        assert response["result"]["issue"]["key"] == "KIKET-1"

    @pytest.mark.asyncio
    async def test_unknown_method(self, router):
        """Should return METHOD_NOT_FOUND naming the method."""
        response = await router.handle_message({"method": "bogus", "id": 3})

        assert response["id"] == 3
        assert response["error"]["code"] == -32601
        assert "bogus" in response["error"]["message"]

    @pytest.mark.asyncio
    async def test_missing_method_produces_no_response(self, router):
        """Should treat an envelope without method as a notification."""
        assert await router.handle_message({"id": 4}) is None

    @pytest.mark.asyncio
    async def test_client_notification_dropped(self, router):
        """Should drop notifications/* envelopes that carry no id."""
        assert await router.handle_message({"method": "notifications/initialized"}) is None


class TestInitializeAndList:
    """Tests for initialize and tools/list."""

    @pytest.mark.asyncio
    async def test_initialize(self, router):
        """Should return static capability metadata."""
        response = await router.handle_message({"method": "initialize", "id": 1})

        assert response["result"] == {
            "protocolVersion": "0.1",
            "serverInfo": {"name": "kiket-mcp-server", "version": __version__},
            "capabilities": {"tools": {"list": True, "call": True}},
        }

    @pytest.mark.asyncio
    async def test_tools_list_order(self, router):
        """Should list issues, then projects, then users tools."""
        response = await router.handle_message({"method": "tools/list", "id": 2})
        names = [tool["name"] for tool in response["result"]["tools"]]

        assert names[0] == "listIssues"
        assert names[9] == "listProjects"
        assert names[14] == "listUsers"
        assert len(names) == 17

    @pytest.mark.asyncio
    async def test_listed_names_are_dispatchable(self, router, fake_client):
        """Should list exactly the names tools/call can dispatch, without duplicates."""
        response = await router.handle_message({"method": "tools/list", "id": 2})
        names = [tool["name"] for tool in response["result"]["tools"]]
        dispatchable = {name for registry in router.registries for name in registry.names}

        assert len(names) == len(set(names))
        assert set(names) == dispatchable

        for name in names:
            reply = await router.handle_message({"method": "tools/call", "id": name, "params": {"name": name}})
            assert reply["id"] == name
            assert "error" not in reply or reply["error"]["code"] != -32601

    @pytest.mark.asyncio
    async def test_tool_definitions_have_schemas(self, router):
        """Should expose an object schema per tool."""
        for tool in router.list_tools():
            assert tool["inputSchema"]["type"] == "object"
            assert tool["description"]


class TestToolsCall:
    """Tests for tools/call dispatch."""

    @pytest.mark.asyncio
    async def test_third_registry_fallthrough(self, event_bus):
        """Should reach the third registry without invoking earlier registries' calls twice."""
        calls = []

        async def side_effect(_):
            calls.append("first")
            return {}

        async def who_am_i(_):
            calls.append("third")
            return {"user": {"id": 1}}

        first = CountingRegistry("issues", [Operation("createIssue", "c", CurrentUserInput, side_effect)])
        second = CountingRegistry("projects", [])
        third = CountingRegistry("users", [Operation("getCurrentUser", "me", CurrentUserInput, who_am_i)])
        router = ProtocolRouter([first, second, third], event_bus=event_bus)

        response = await router.handle_message(
            {"method": "tools/call", "id": 1, "params": {"name": "getCurrentUser", "arguments": {}}}
        )

        assert response["result"] == {"user": {"id": 1}}
        assert calls == ["third"]
        assert (first.attempts, second.attempts, third.attempts) == (1, 1, 1)

    @pytest.mark.asyncio
    async def test_failure_short_circuits(self):
        """Should not try later registries once one fails."""

        async def boom(_):
            raise KiketError(ErrorKind.NOT_FOUND, "Resource not found: Unknown tool", status_code=404)

        first = CountingRegistry("issues", [Operation("getUser", "g", CurrentUserInput, boom)])
        second = CountingRegistry("users", [Operation("getUser", "g", CurrentUserInput, boom)])
        router = ProtocolRouter([first, second])

        response = await router.handle_message({"method": "tools/call", "id": 5, "params": {"name": "getUser"}})

        assert response["error"]["code"] == -32003
        assert second.attempts == 0

    @pytest.mark.asyncio
    async def test_unknown_tool(self, router):
        """Should return METHOD_NOT_FOUND when no registry has the tool."""
        response = await router.handle_message(
            {"method": "tools/call", "id": 6, "params": {"name": "launchRocket", "arguments": {}}}
        )

        assert response["error"] == {"code": -32601, "message": "Unknown tool: launchRocket"}

    @pytest.mark.asyncio
    async def test_validation_error_envelope(self, router, fake_client):
        """Should map validation failures to -32004 with field errors as data."""
        response = await router.handle_message(
            {"method": "tools/call", "id": 8, "params": {"name": "createIssue", "arguments": {}}}
        )

        assert response["error"]["code"] == -32004
        assert "title" in response["error"]["data"]["errors"]
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_remote_error_envelope(self, make_client, executor):
        """Should map remote failures through the taxonomy."""
        client = make_client(get_issue=[KiketError(ErrorKind.AUTHENTICATION, "Invalid token", status_code=401)])
        router = ProtocolRouter([create_issue_registry(client, executor)])

        response = await router.handle_message(
            {"method": "tools/call", "id": 10, "params": {"name": "getIssue", "arguments": {"id": 1}}}
        )

        assert response["error"] == {"code": -32001, "message": "Invalid token"}

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_internal(self):
        """Should turn a defect inside an operation into INTERNAL_ERROR."""

        async def broken(_):
            raise ZeroDivisionError("division by zero")

        registry = OperationRegistry("users", [Operation("getCurrentUser", "me", CurrentUserInput, broken)])
        router = ProtocolRouter([registry])

        response = await router.handle_message({"method": "tools/call", "id": 11, "params": {"name": "getCurrentUser"}})

        assert response["error"]["code"] == -32603
        assert response["error"]["message"] == "division by zero"

    @pytest.mark.asyncio
    async def test_missing_arguments_default_to_empty(self, router, fake_client):
        """Should treat missing arguments as an empty object."""
        response = await router.handle_message({"method": "tools/call", "id": 12, "params": {"name": "listProjects"}})

        assert len(response["result"]["projects"]) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [None, {"arguments": {}}, {"name": 42}, {"name": "getIssue", "arguments": [1]}, ["getIssue"]],
    )
    async def test_invalid_params(self, router, params):
        """Should reject malformed tools/call params with INVALID_PARAMS."""
        response = await router.handle_message({"method": "tools/call", "id": 13, "params": params})

        assert response["error"]["code"] == -32602

    @pytest.mark.asyncio
    async def test_events_published(self, router, event_bus):
        """Should publish completion and failure events."""
        seen = []
        event_bus.subscribe(ToolCallCompleted, seen.append)
        event_bus.subscribe(ToolCallFailed, seen.append)

        await router.handle_message(
            {"method": "tools/call", "id": 1, "params": {"name": "getUser", "arguments": {"id": 7}}}
        )
        await router.handle_message({"method": "tools/call", "id": 2, "params": {"name": "getUser", "arguments": {}}})

        assert isinstance(seen[0], ToolCallCompleted)
        assert seen[0].registry == "users"
        assert isinstance(seen[1], ToolCallFailed)
        assert seen[1].error_code == -32004


class TestHandleRaw:
    """Tests for raw text handling."""

    @pytest.mark.asyncio
    async def test_parse_error(self, router):
        """Should answer undecodable input with PARSE_ERROR and a null id."""
        response = await router.handle_raw("{not json")

        assert response == {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}

    @pytest.mark.asyncio
    async def test_non_object(self, router):
        """Should answer a non-object with INVALID_REQUEST."""
        response = await router.handle_raw("[1, 2]")

        assert response["error"]["code"] == -32600
        assert response["id"] is None

    @pytest.mark.asyncio
    async def test_round_trip_serializable(self, router):
        """Should produce JSON serializable responses."""
        response = await router.handle_raw(
            json.dumps({"method": "tools/call", "id": "a", "params": {"name": "listIssues"}})
        )

        decoded = json.loads(json.dumps(response))
        assert decoded["result"]["issues"][0]["labels"] == ["bug"]
