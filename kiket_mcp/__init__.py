"""Kiket MCP server - Kiket issue tracker tools over a JSON-RPC gateway.

This package exposes the Kiket issues, comments, projects and users API as a
fixed catalogue of tools, reachable over stdio or websocket transports.

Preferred imports:
- Error taxonomy from kiket_mcp.domain.exceptions
- Composition root from kiket_mcp.bootstrap
- Entry point from kiket_mcp.server
"""

__version__ = "0.1.0"

from .domain.exceptions import (  # noqa: E402
    ConfigurationError,
    ErrorKind,
    JsonRpcErrorCode,
    KiketError,
    OperationNotFoundError,
)
from .domain.value_objects import DispatchOutcome, RetryConfig  # noqa: E402

__all__ = [
    "__version__",
    "ConfigurationError",
    "DispatchOutcome",
    "ErrorKind",
    "JsonRpcErrorCode",
    "KiketError",
    "OperationNotFoundError",
    "RetryConfig",
]
