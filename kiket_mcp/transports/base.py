"""Transport abstraction shared by the stdio and websocket transports."""

from abc import ABC, abstractmethod
import asyncio
from typing import Any, Awaitable, Callable

MessageHandler = Callable[[str | bytes], Awaitable[dict[str, Any] | None]]
"""Receives one raw envelope and returns the response envelope, if any."""


class Transport(ABC):
    """Carries serialized envelopes between clients and the router."""

    name: str = "transport"

    @abstractmethod
    async def start(self, handler: MessageHandler) -> None:
        """Start accepting messages and route each one through ``handler``."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop accepting messages and release resources."""

    @abstractmethod
    async def send(self, envelope: dict[str, Any] | None) -> None:
        """Deliver an envelope to the connected client(s). None is ignored."""

    async def wait_closed(self) -> None:
        """Block until the transport has no more input. Defaults to never."""
        await asyncio.Event().wait()


__all__ = ["MessageHandler", "Transport"]
