"""Infrastructure: event bus, resilience executor, HTTP client and ASGI hosting."""

from .asgi_service import UvicornService
from .event_bus import EventBus
from .kiket_client import KiketClient
from .resilience import is_retriable, ResilienceExecutor

__all__ = [
    "EventBus",
    "KiketClient",
    "ResilienceExecutor",
    "UvicornService",
    "is_retriable",
]
