"""Protocol router: one inbound envelope in, at most one outbound envelope out.

The router is transport agnostic. Transports hand it raw text through
``handle_raw`` (or decoded objects through ``handle_message``) and serialize
whatever it returns. It never raises to its caller: every failure becomes an
error envelope.
"""

import json
import time
from typing import Any, Mapping, Sequence

from .. import __version__
from ..application.operations import OperationRegistry
from ..domain.error_mapping import to_protocol_code
from ..domain.events import ToolCallCompleted, ToolCallFailed
from ..domain.exceptions import JsonRpcErrorCode, KiketError
from ..infrastructure.event_bus import EventBus
from ..logging_config import get_logger

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

JSONRPC_VERSION = "2.0"

PROTOCOL_VERSION = "0.1"
"""Protocol version announced by initialize."""

SERVER_NAME = "kiket-mcp-server"

NOTIFICATION_PREFIX = "notifications/"

Envelope = dict[str, Any]


def success_envelope(request_id: Any, result: Any) -> Envelope:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_envelope(request_id: Any, code: int, message: str, data: Any = None) -> Envelope:
    """Build an error envelope; ``data`` is omitted when None."""
    error: dict[str, Any] = {"code": int(code), "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


class ProtocolRouter:
    """Resolves envelopes against the operation registries.

    Registries are consulted in the order given (issues, projects, users);
    that order is also the tools/list order.
    """

    def __init__(
        self,
        registries: Sequence[OperationRegistry],
        *,
        event_bus: EventBus | None = None,
        server_name: str = SERVER_NAME,
        server_version: str = __version__,
    ):
        self._registries = tuple(registries)
        self._event_bus = event_bus
        self._server_name = server_name
        self._server_version = server_version

    @property
    def registries(self) -> tuple[OperationRegistry, ...]:
        return self._registries

    def list_tools(self) -> list[dict[str, Any]]:
        """Concatenated tool definitions of all registries."""
        tools: list[dict[str, Any]] = []
        for registry in self._registries:
            tools.extend(registry.list())
        return tools

    async def handle_raw(self, raw: str | bytes) -> Envelope | None:
        """Decode one serialized envelope and handle it."""
        try:
            message = json.loads(raw)
        except (ValueError, TypeError) as e:
            logger.warning("envelope_parse_failed", error=str(e))
            return error_envelope(None, JsonRpcErrorCode.PARSE_ERROR, "Parse error")

        if not isinstance(message, dict):
            return error_envelope(None, JsonRpcErrorCode.INVALID_REQUEST, "Invalid Request: expected an object")

        return await self.handle_message(message)

    async def handle_message(self, message: Mapping[str, Any]) -> Envelope | None:
        """Handle one decoded envelope.

        Returns:
            The response envelope, or None for notifications (no ``method``,
            or a ``notifications/*`` method without an ``id``).
        """
        request_id = message.get("id")
        method = message.get("method")

        try:
            if method is None:
                return None
            if not isinstance(method, str):
                return error_envelope(
                    request_id, JsonRpcErrorCode.INVALID_REQUEST, "Invalid Request: method must be a string"
                )
            if "id" not in message and method.startswith(NOTIFICATION_PREFIX):
                logger.debug("notification_dropped", method=method)
                return None

            if method == "initialize":
                return success_envelope(request_id, self._initialize_result())
            if method == "tools/list":
                return success_envelope(request_id, {"tools": self.list_tools()})
            if method == "tools/call":
                return await self._call_tool(request_id, message.get("params"))
            if method == "ping":
                return success_envelope(request_id, "pong")

            return error_envelope(request_id, JsonRpcErrorCode.METHOD_NOT_FOUND, f"Method {method} not implemented")

        except Exception as e:
            logger.error("router_unhandled_error", method=str(method), error=str(e), exc_info=True)
            return error_envelope(request_id, JsonRpcErrorCode.INTERNAL_ERROR, str(e) or "Internal error")

    def _initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": self._server_name, "version": self._server_version},
            "capabilities": {"tools": {"list": True, "call": True}},
        }

    async def _call_tool(self, request_id: Any, params: Any) -> Envelope:
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            return error_envelope(request_id, JsonRpcErrorCode.INVALID_PARAMS, "Invalid params: expected an object")

        name = params.get("name")
        if not isinstance(name, str) or not name:
            return error_envelope(request_id, JsonRpcErrorCode.INVALID_PARAMS, "Invalid params: tool name is required")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            return error_envelope(
                request_id, JsonRpcErrorCode.INVALID_PARAMS, "Invalid params: arguments must be an object"
            )

        started = time.perf_counter()
        for registry in self._registries:
            outcome = await registry.try_dispatch(name, arguments)
            if outcome.is_not_in_registry:
                continue

            duration_ms = (time.perf_counter() - started) * 1000
            if outcome.is_found:
                logger.debug(
                    "tool_call_completed", tool=name, registry=registry.domain, duration_ms=round(duration_ms, 2)
                )
                self._publish(ToolCallCompleted(tool_name=name, registry=registry.domain, duration_ms=duration_ms))
                return success_envelope(request_id, outcome.result)

            return self._failure(request_id, name, outcome.error, duration_ms)

        logger.info("tool_not_found", tool=name)
        return error_envelope(request_id, JsonRpcErrorCode.METHOD_NOT_FOUND, f"Unknown tool: {name}")

    def _failure(self, request_id: Any, name: str, error: BaseException, duration_ms: float) -> Envelope:
        code = to_protocol_code(error)
        if isinstance(error, KiketError):
            message, data = error.message, error.details
            logger.info("tool_call_failed", tool=name, **error.to_dict())
        else:
            message, data = str(error) or type(error).__name__, None
            logger.error("tool_call_crashed", tool=name, error=message, exc_info=error)

        self._publish(ToolCallFailed(tool_name=name, error_code=code, error_message=message, duration_ms=duration_ms))
        return error_envelope(request_id, code, message, data)

    def _publish(self, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)


__all__ = [
    "JSONRPC_VERSION",
    "PROTOCOL_VERSION",
    "ProtocolRouter",
    "SERVER_NAME",
    "error_envelope",
    "success_envelope",
]
