"""Classification of remote failures and mapping to JSON-RPC codes."""

from collections.abc import Mapping
import math
from typing import Any

from .exceptions import ErrorKind, JsonRpcErrorCode, KiketError

# =============================================================================
# Constants
# =============================================================================

DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "Invalid or missing authentication credentials",
    ErrorKind.AUTHORIZATION: "Insufficient permissions to perform this operation",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.VALIDATION: "Validation failed",
    ErrorKind.RATE_LIMIT: "Rate limit exceeded",
    ErrorKind.SERVER: "Internal server error occurred",
    ErrorKind.NETWORK: "Network request failed",
    ErrorKind.INTERNAL: "Request failed",
}

_PROTOCOL_CODES: dict[ErrorKind, JsonRpcErrorCode] = {
    ErrorKind.AUTHENTICATION: JsonRpcErrorCode.AUTHENTICATION,
    ErrorKind.AUTHORIZATION: JsonRpcErrorCode.AUTHORIZATION,
    ErrorKind.NOT_FOUND: JsonRpcErrorCode.NOT_FOUND,
    ErrorKind.VALIDATION: JsonRpcErrorCode.VALIDATION,
    ErrorKind.RATE_LIMIT: JsonRpcErrorCode.RATE_LIMIT,
    ErrorKind.SERVER: JsonRpcErrorCode.SERVER,
    ErrorKind.NETWORK: JsonRpcErrorCode.INTERNAL_ERROR,
    ErrorKind.INTERNAL: JsonRpcErrorCode.INTERNAL_ERROR,
}

TRANSIENT_NETWORK_MARKERS: tuple[str, ...] = (
    "timeout",
    "timed out",
    "econnreset",
    "econnrefused",
    "enotfound",
    "connection reset",
    "connection refused",
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
)
"""Lower-case fragments that mark a network failure as worth retrying."""


# =============================================================================
# Classification
# =============================================================================


def classify(status_code: int | None, message: str, raw_body: Any = None) -> KiketError:
    """Classify a failed remote call.

    Args:
        status_code: HTTP status code, or None for a transport level failure.
        message: Message extracted from the response (may be empty).
        raw_body: Decoded response body, used for field errors and rate limit hints.

    Returns:
        A KiketError of the matching kind.
    """
    if status_code is None:
        return network_error(message)

    if status_code == 401:
        return _simple(ErrorKind.AUTHENTICATION, message, status_code)
    if status_code == 403:
        return _simple(ErrorKind.AUTHORIZATION, message, status_code)
    if status_code == 404:
        return KiketError(
            ErrorKind.NOT_FOUND,
            f"Resource not found: {message}" if message else DEFAULT_MESSAGES[ErrorKind.NOT_FOUND],
            status_code=status_code,
        )
    if status_code == 422:
        field_errors = _body_value(raw_body, "errors")
        return KiketError(
            ErrorKind.VALIDATION,
            message or DEFAULT_MESSAGES[ErrorKind.VALIDATION],
            status_code=status_code,
            details=field_errors,
        )
    if status_code == 429:
        retry_after = _parse_retry_after(_body_value(raw_body, "retry_after"))
        return KiketError(
            ErrorKind.RATE_LIMIT,
            message or DEFAULT_MESSAGES[ErrorKind.RATE_LIMIT],
            status_code=status_code,
            details={"retryAfter": retry_after},
            retry_after_seconds=retry_after,
        )
    if status_code >= 500:
        return _simple(ErrorKind.SERVER, message, status_code)

    return KiketError(
        ErrorKind.INTERNAL,
        message or f"Request failed with status {status_code}",
        status_code=status_code,
        details=raw_body,
    )


def network_error(message: str) -> KiketError:
    """Build the classified error for a failure without any HTTP response."""
    return KiketError(ErrorKind.NETWORK, message or DEFAULT_MESSAGES[ErrorKind.NETWORK])


def is_transient_network_message(message: str) -> bool:
    """Check whether a failure message indicates a timeout or connection problem."""
    lowered = message.lower()
    return any(marker in lowered for marker in TRANSIENT_NETWORK_MARKERS)


def to_protocol_code(error: BaseException) -> int:
    """Map a failure to its JSON-RPC error code.

    Anything that is not a KiketError, or carries an unrecognised kind,
    resolves to INTERNAL_ERROR.
    """
    kind = getattr(error, "kind", None) if isinstance(error, KiketError) else None
    return int(_PROTOCOL_CODES.get(kind, JsonRpcErrorCode.INTERNAL_ERROR))


# =============================================================================
# Helpers
# =============================================================================


def _simple(kind: ErrorKind, message: str, status_code: int) -> KiketError:
    return KiketError(kind, message or DEFAULT_MESSAGES[kind], status_code=status_code)


def _body_value(raw_body: Any, key: str) -> Any:
    if isinstance(raw_body, Mapping):
        return raw_body.get(key)
    return None


def _parse_retry_after(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


__all__ = [
    "DEFAULT_MESSAGES",
    "TRANSIENT_NETWORK_MARKERS",
    "classify",
    "is_transient_network_message",
    "network_error",
    "to_protocol_code",
]
