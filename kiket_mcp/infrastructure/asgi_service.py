"""Embedded uvicorn server for in-process ASGI apps.

The websocket transport and the health server both run inside the main event
loop. Signal handling stays with the process entry point, so the embedded
server never installs its own handlers.
"""

import asyncio
import contextlib
from typing import Any

import uvicorn

from ..logging_config import get_logger

logger = get_logger(__name__)


class _EmbeddedServer(uvicorn.Server):
    """uvicorn.Server that leaves process signals alone."""

    def install_signal_handlers(self) -> None:  # uvicorn < 0.29
        pass

    @contextlib.contextmanager
    def capture_signals(self):  # uvicorn >= 0.29
        yield


class UvicornService:
    """Start and stop an ASGI app as a background task."""

    def __init__(self, app: Any, host: str, port: int, *, name: str = "asgi"):
        self._app = app
        self._host = host
        self._port = port
        self._name = name
        self._server: _EmbeddedServer | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start serving and return once the socket is bound."""
        if self.is_running:
            return

        config = uvicorn.Config(
            self._app,
            host=self._host,
            port=self._port,
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        self._server = _EmbeddedServer(config)
        self._task = asyncio.create_task(self._server.serve(), name=f"{self._name}-server")

        while not self._server.started:
            if self._task.done():
                # Surface bind errors (port in use etc.)
                self._task.result()
                raise RuntimeError(f"{self._name} server exited before startup")
            await asyncio.sleep(0.05)

        logger.info("asgi_server_started", name=self._name, host=self._host, port=self._port)

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for it."""
        if self._server is None or self._task is None:
            return

        self._server.should_exit = True
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._server = None
            self._task = None

        logger.info("asgi_server_stopped", name=self._name)


__all__ = ["UvicornService"]
