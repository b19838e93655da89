"""Transports carrying envelopes to and from the router."""

from .base import MessageHandler, Transport
from .stdio import StdioTransport
from .websocket import WebSocketTransport

__all__ = [
    "MessageHandler",
    "StdioTransport",
    "Transport",
    "WebSocketTransport",
]
