"""Domain layer: error taxonomy, events, value objects and remote models."""

from .error_mapping import classify, is_transient_network_message, network_error, to_protocol_code
from .exceptions import ConfigurationError, ErrorKind, JsonRpcErrorCode, KiketError, OperationNotFoundError
from .value_objects import DispatchOutcome, DispatchStatus, RetryConfig, RetryState

__all__ = [
    "ConfigurationError",
    "DispatchOutcome",
    "DispatchStatus",
    "ErrorKind",
    "JsonRpcErrorCode",
    "KiketError",
    "OperationNotFoundError",
    "RetryConfig",
    "RetryState",
    "classify",
    "is_transient_network_message",
    "network_error",
    "to_protocol_code",
]
