"""Event handlers subscribed to the event bus."""

from .logging_handler import LoggingEventHandler

__all__ = ["LoggingEventHandler"]
