"""Bootstrap helpers for wiring runtime dependencies.

This module is the composition root: it builds the event bus, the resilience
executor, the HTTP client, the three operation registries and the router from
one ServerConfig. Nothing here starts a transport or touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..application.event_handlers import LoggingEventHandler
from ..application.operations import (
    create_issue_registry,
    create_project_registry,
    create_user_registry,
    OperationRegistry,
)
from ..domain.contracts import IssueTrackerClient
from ..infrastructure.event_bus import EventBus
from ..infrastructure.kiket_client import KiketClient
from ..infrastructure.resilience import ResilienceExecutor
from ..server.config import ServerConfig
from ..server.router import ProtocolRouter


@dataclass(frozen=True)
class Runtime:
    """Container for runtime dependencies."""

    config: ServerConfig
    event_bus: EventBus
    executor: ResilienceExecutor
    client: IssueTrackerClient
    registries: tuple[OperationRegistry, ...]
    router: ProtocolRouter

    async def aclose(self) -> None:
        """Release the HTTP client, if it owns a connection pool."""
        close = getattr(self.client, "aclose", None)
        if close is not None:
            await close()


def create_runtime(
    config: ServerConfig,
    *,
    client: Optional[IssueTrackerClient] = None,
    event_bus: Optional[EventBus] = None,
    executor: Optional[ResilienceExecutor] = None,
) -> Runtime:
    """Create runtime dependencies explicitly.

    Args:
        config: Resolved server configuration.
        client: Optional client override (useful for tests).
        event_bus: Optional event bus override.
        executor: Optional executor override (tests inject a no-op sleep).

    Returns:
        Runtime container.
    """
    eb = event_bus or EventBus()
    eb.subscribe_to_all(LoggingEventHandler().handle)

    ex = executor or ResilienceExecutor(config.retry, event_bus=eb)
    api = client or KiketClient(
        config.api_url,
        config.api_key,
        verify_ssl=config.verify_ssl,
        timeout=config.request_timeout_s,
    )

    registries = (
        create_issue_registry(api, ex, default_project_key=config.project_key),
        create_project_registry(api, ex),
        create_user_registry(api, ex),
    )
    router = ProtocolRouter(registries, event_bus=eb)

    return Runtime(
        config=config,
        event_bus=eb,
        executor=ex,
        client=api,
        registries=registries,
        router=router,
    )
