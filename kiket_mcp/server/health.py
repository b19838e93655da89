"""Liveness and readiness endpoints for orchestrators."""

from datetime import datetime, timezone
import time
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..domain.contracts import IssueTrackerClient
from ..domain.model import IssueListFilters
from ..infrastructure.asgi_service import UvicornService
from ..logging_config import get_logger

logger = get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthServer:
    """Serves /health, /ready and /health/details on a separate port."""

    def __init__(self, port: int, client: IssueTrackerClient, *, host: str = "0.0.0.0"):
        self._port = port
        self._host = host
        self._client = client
        self._started_at = time.monotonic()
        self._app = Starlette(
            routes=[
                Route("/health", self._health, methods=["GET"]),
                Route("/ready", self._ready, methods=["GET"]),
                Route("/health/details", self._details, methods=["GET"]),
            ]
        )
        self._service = UvicornService(self._app, host, port, name="health")

    @property
    def app(self) -> Starlette:
        return self._app

    async def start(self) -> None:
        await self._service.start()

    async def stop(self) -> None:
        await self._service.stop()

    async def check_api(self) -> dict[str, Any]:
        """Probe the remote API with the cheapest list call."""
        started = time.perf_counter()
        try:
            await self._client.list_issues(IssueListFilters(per_page=1))
        except Exception as e:
            logger.warning("health_api_check_failed", error=str(e))
            return {"healthy": False, "error": str(e) or "Unknown error"}
        return {"healthy": True, "latency_ms": round((time.perf_counter() - started) * 1000, 2)}

    async def _health(self, request: Request) -> JSONResponse:
        """Liveness endpoint (cheap ping)."""
        return JSONResponse(
            {
                "status": "ok",
                "timestamp": _timestamp(),
                "uptime": round(time.monotonic() - self._started_at, 3),
            }
        )

    async def _ready(self, request: Request) -> JSONResponse:
        """Readiness endpoint: ready once the remote API answers."""
        check = await self.check_api()
        if check["healthy"]:
            return JSONResponse({"ready": True, "timestamp": _timestamp()})
        return JSONResponse(
            {"ready": False, "error": check["error"], "timestamp": _timestamp()},
            status_code=503,
        )

    async def _details(self, request: Request) -> JSONResponse:
        checks = {"api": await self.check_api()}
        healthy = all(check["healthy"] for check in checks.values())
        return JSONResponse(
            {
                "status": "healthy" if healthy else "unhealthy",
                "timestamp": _timestamp(),
                "checks": checks,
            },
            status_code=200 if healthy else 503,
        )


__all__ = ["HealthServer"]
