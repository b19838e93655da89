"""Domain events for the Kiket MCP gateway.

Events report retries, terminal failures and tool calls to observability
subscribers. Publishing them never changes the outcome of a call.
"""

from abc import ABC
from dataclasses import dataclass
import time
from typing import Any
import uuid


class DomainEvent(ABC):
    """
    Base class for all domain events.

    Note: Not a dataclass to avoid inheritance issues.
    Subclasses should be dataclasses.
    """

    def __init__(self):
        self.event_id: str = str(uuid.uuid4())
        self.occurred_at: float = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {"event_type": self.__class__.__name__, **self.__dict__}


# Resilience Events


@dataclass
class RetryScheduled(DomainEvent):
    """Published when a failed attempt will be retried after a delay."""

    label: str
    attempt: int  # 1-based number of the attempt that failed
    max_retries: int
    delay_ms: float
    error_kind: str
    error_message: str

    def __post_init__(self):
        super().__init__()


@dataclass
class OperationFailed(DomainEvent):
    """Published when an operation fails for good (not retriable or out of retries)."""

    label: str
    attempts: int
    retriable: bool
    error_kind: str
    error_message: str

    def __post_init__(self):
        super().__init__()


# Tool Call Events


@dataclass
class ToolCallCompleted(DomainEvent):
    """Published when a tools/call dispatch succeeds."""

    tool_name: str
    registry: str
    duration_ms: float

    def __post_init__(self):
        super().__init__()


@dataclass
class ToolCallFailed(DomainEvent):
    """Published when a tools/call dispatch produces an error envelope."""

    tool_name: str
    error_code: int
    error_message: str
    duration_ms: float

    def __post_init__(self):
        super().__init__()
