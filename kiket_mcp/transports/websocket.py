"""WebSocket transport served by starlette on an embedded uvicorn server."""

import json
from typing import Any

from starlette.applications import Starlette
from starlette.routing import WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..infrastructure.asgi_service import UvicornService
from ..logging_config import get_logger
from .base import MessageHandler, Transport

logger = get_logger(__name__)


class WebSocketTransport(Transport):
    """
    Accepts websocket clients at ``/``.

    Every text or binary frame is one envelope; its response goes back on the same
    socket. ``send`` broadcasts to every open socket.
    """

    name = "websocket"

    def __init__(self, host: str = "0.0.0.0", port: int = 3001):
        self._host = host
        self._port = port
        self._handler: MessageHandler | None = None
        self._clients: set[WebSocket] = set()
        self._app = Starlette(routes=[WebSocketRoute("/", self._endpoint)])
        self._service: UvicornService | None = None

    @property
    def app(self) -> Starlette:
        """The ASGI app, for mounting or testing without a socket."""
        return self._app

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def attach(self, handler: MessageHandler) -> None:
        """Set the message handler without starting the server."""
        self._handler = handler

    async def start(self, handler: MessageHandler) -> None:
        self.attach(handler)
        if self._service is None:
            self._service = UvicornService(self._app, self._host, self._port, name="websocket")
        await self._service.start()
        logger.info("websocket_transport_started", host=self._host, port=self._port)

    async def stop(self) -> None:
        for websocket in list(self._clients):
            try:
                await websocket.close(code=1001)
            except Exception as e:
                logger.debug("websocket_close_failed", error=str(e))
        self._clients.clear()

        if self._service is not None:
            await self._service.stop()
            self._service = None
        logger.info("websocket_transport_stopped")

    async def send(self, envelope: dict[str, Any] | None) -> None:
        if envelope is None:
            return
        text = json.dumps(envelope, default=str)
        for websocket in list(self._clients):
            try:
                await websocket.send_text(text)
            except Exception as e:
                logger.warning("websocket_send_failed", error=str(e))
                self._clients.discard(websocket)

    async def _endpoint(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._clients.add(websocket)
        logger.info("websocket_client_connected", clients=len(self._clients))
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                if self._handler is None:
                    continue
                response = await self._handler(raw)
                if response is not None:
                    await websocket.send_text(json.dumps(response, default=str))
        except WebSocketDisconnect:
            pass
        finally:
            self._clients.discard(websocket)
            logger.info("websocket_client_disconnected", clients=len(self._clients))


__all__ = ["WebSocketTransport"]
