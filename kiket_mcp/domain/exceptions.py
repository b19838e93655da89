"""Domain exceptions and error taxonomy for the Kiket MCP gateway.

Every failure surfaced to an RPC caller is either a KiketError carrying one of
the ErrorKind values or falls back to the generic internal code.
"""

from enum import Enum, IntEnum
from typing import Any


class ErrorKind(str, Enum):
    """Cause of a classified failure."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"
    INTERNAL = "internal"


class JsonRpcErrorCode(IntEnum):
    """JSON-RPC error codes used on the wire.

    The standard codes come from JSON-RPC 2.0, the -320xx range carries the
    application specific taxonomy kinds.
    """

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    AUTHENTICATION = -32001
    AUTHORIZATION = -32002
    NOT_FOUND = -32003
    VALIDATION = -32004
    RATE_LIMIT = -32005
    SERVER = -32006


class KiketError(Exception):
    """A classified failure.

    Constructed once where the failure is detected (response inspection,
    transport failure or input validation) and propagated unchanged until the
    router maps it to a protocol code.

    Attributes:
        kind: Taxonomy kind.
        message: Human readable description.
        status_code: HTTP status code, if the failure came from a response.
        details: Optional structured data forwarded as the error's ``data``.
        retry_after_seconds: Server supplied backoff hint (rate limits only).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        details: Any = None,
        retry_after_seconds: float | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.details = details
        self.retry_after_seconds = retry_after_seconds if kind is ErrorKind.RATE_LIMIT else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.status_code is not None:
            data["status_code"] = self.status_code
        if self.details is not None:
            data["details"] = self.details
        if self.retry_after_seconds is not None:
            data["retry_after_seconds"] = self.retry_after_seconds
        return data

    def __repr__(self) -> str:
        return f"KiketError(kind={self.kind.value!r}, message={self.message!r}, status_code={self.status_code!r})"


class OperationNotFoundError(LookupError):
    """Raised by a registry that does not declare the requested operation.

    Deliberately not a KiketError: the router falls through to the next
    registry on this type and on nothing else.
    """

    def __init__(self, name: str, domain: str):
        super().__init__(f"Unknown tool in {domain} registry: {name}")
        self.name = name
        self.domain = domain


class ConfigurationError(Exception):
    """Startup configuration is missing or invalid."""


__all__ = [
    "ConfigurationError",
    "ErrorKind",
    "JsonRpcErrorCode",
    "KiketError",
    "OperationNotFoundError",
]
