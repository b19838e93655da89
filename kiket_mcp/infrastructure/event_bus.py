"""Event bus for publish/subscribe pattern.

The event bus decouples the components that detect retries and failures from
the handlers that record them. There is no global instance: the composition
root creates one and passes it to whoever publishes.
"""

import threading
from typing import Callable

from ..domain.events import DomainEvent
from ..logging_config import get_logger

logger = get_logger(__name__)

EventCallback = Callable[[DomainEvent], None]


class EventBus:
    """
    Thread-safe event bus for publishing and subscribing to domain events.

    Supports multiple subscribers per event type.
    Handlers are called synchronously in order of subscription.
    """

    def __init__(self):
        self._handlers: dict[type[DomainEvent], list[EventCallback]] = {}
        self._lock = threading.Lock()
        self._error_handlers: list[Callable[[Exception, DomainEvent], None]] = []

    def subscribe(self, event_type: type[DomainEvent], handler: EventCallback) -> None:
        """
        Subscribe to a specific event type.

        Args:
            event_type: The type of event to subscribe to
            handler: Callable that takes the event as parameter
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

        logger.debug("event_handler_subscribed", event_type=event_type.__name__)

    def subscribe_to_all(self, handler: EventCallback) -> None:
        """Subscribe to all event types."""
        self.subscribe(DomainEvent, handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventCallback) -> None:
        """Unsubscribe a handler from an event type."""
        with self._lock:
            if event_type in self._handlers:
                self._handlers[event_type].remove(handler)

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event to all subscribed handlers.

        If a handler fails, the exception is logged and remaining handlers
        are still called. Publishing never raises.

        Args:
            event: The domain event to publish
        """
        with self._lock:
            specific_handlers = list(self._handlers.get(type(event), []))
            all_handlers = list(self._handlers.get(DomainEvent, []))
        handlers = specific_handlers + all_handlers

        # Call handlers outside the lock
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "event_handler_failed",
                    event_type=event.__class__.__name__,
                    error=str(e),
                    exc_info=True,
                )
                for error_handler in self._error_handlers:
                    try:
                        error_handler(e, event)
                    except Exception as eh:
                        logger.error(
                            "event_error_handler_failed",
                            event_type=event.__class__.__name__,
                            error=str(eh),
                        )

    def on_error(self, handler: Callable[[Exception, DomainEvent], None]) -> None:
        """Register a handler for errors that occur during event handling."""
        self._error_handlers.append(handler)
