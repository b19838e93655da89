"""Value objects for retry behaviour and registry dispatch.

Contains:
- RetryConfig - bounds for the resilience executor
- RetryState - per-invocation attempt bookkeeping
- DispatchOutcome - result variant returned by an operation registry
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class RetryConfig:
    """Retry and backoff bounds.

    Attributes:
        max_retries: Retries after the first attempt (0 means a single attempt).
        base_delay_ms: Delay before the first retry, doubled on every retry.
        max_delay_ms: Upper bound for any single delay.
    """

    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30_000

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be positive")
        if self.max_delay_ms <= 0:
            raise ValueError("max_delay_ms must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RetryConfig":
        """Create RetryConfig from a dictionary.

        Args:
            data: Configuration dictionary. If None, returns default config.

        Returns:
            RetryConfig instance.

        Raises:
            ValueError: If configuration values are invalid.
        """
        if not data:
            return cls()

        return cls(
            max_retries=int(data.get("max_retries", 3)),
            base_delay_ms=int(data.get("base_delay_ms", 1000)),
            max_delay_ms=int(data.get("max_delay_ms", 30_000)),
        )


@dataclass
class RetryState:
    """Bookkeeping for a single executor invocation.

    Lives only as long as one call to the executor.
    """

    attempt: int = 0
    last_error: BaseException | None = None


class DispatchStatus(Enum):
    """How a registry responded to a dispatch request."""

    FOUND = "found"
    NOT_IN_REGISTRY = "not_in_registry"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of offering a call to one registry.

    Exactly one of ``result`` (FOUND) or ``error`` (FAILED) is meaningful;
    NOT_IN_REGISTRY carries neither and tells the caller to try elsewhere.
    """

    status: DispatchStatus
    result: Any = None
    error: BaseException | None = None

    @classmethod
    def found(cls, result: Any) -> "DispatchOutcome":
        return cls(status=DispatchStatus.FOUND, result=result)

    @classmethod
    def not_in_registry(cls) -> "DispatchOutcome":
        return cls(status=DispatchStatus.NOT_IN_REGISTRY)

    @classmethod
    def failed(cls, error: BaseException) -> "DispatchOutcome":
        return cls(status=DispatchStatus.FAILED, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is DispatchStatus.FOUND

    @property
    def is_not_in_registry(self) -> bool:
        return self.status is DispatchStatus.NOT_IN_REGISTRY

    @property
    def is_failed(self) -> bool:
        return self.status is DispatchStatus.FAILED


__all__ = [
    "DispatchOutcome",
    "DispatchStatus",
    "RetryConfig",
    "RetryState",
]
