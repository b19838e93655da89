"""Logging event handler - logs all domain events."""

import logging

from ...domain.events import DomainEvent, OperationFailed, RetryScheduled, ToolCallCompleted, ToolCallFailed
from ...logging_config import get_logger

logger = get_logger(__name__)


class LoggingEventHandler:
    """
    Event handler that logs all domain events in structured format.

    Gives an audit trail of retries, terminal failures and tool calls.
    """

    def __init__(self, log_level: int = logging.INFO):
        """
        Initialize the logging handler.

        Args:
            log_level: Logging level for events without a dedicated level (default: INFO)
        """
        self.log_level = log_level

    def handle(self, event: DomainEvent) -> None:
        """
        Handle a domain event by logging it.

        Args:
            event: The domain event to log
        """
        if isinstance(event, (OperationFailed, ToolCallFailed)):
            level = logging.WARNING
        elif isinstance(event, RetryScheduled):
            level = logging.INFO
        elif isinstance(event, ToolCallCompleted):
            level = logging.DEBUG
        else:
            level = self.log_level

        data = event.to_dict()
        event_type = data.pop("event_type")
        logger.log(level, "domain_event", event_type=event_type, **data)
