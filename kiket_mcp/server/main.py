"""Command line entry point: configuration, logging and process lifecycle.

Usage:
    kiket-mcp-server --transport websocket --port 3001
    python -m kiket_mcp.server.main
"""

import argparse
import asyncio
import signal
import sys
from typing import Optional, Sequence

from ..bootstrap import create_runtime, Runtime
from ..domain.exceptions import ConfigurationError
from ..logging_config import get_logger, setup_logging
from ..transports import StdioTransport, Transport, WebSocketTransport
from .config import load_config, ServerConfig
from .health import HealthServer

logger = get_logger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Kiket MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "websocket"],
        default=None,
        help="Transport to serve (default: stdio)",
    )
    parser.add_argument("--host", type=str, default=None, help="WebSocket host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="WebSocket port (default: 3001)")
    parser.add_argument("--health-port", type=int, default=None, help="Health server port (disabled if unset)")
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml file")
    parser.add_argument("--log-file", type=str, default=None, help="Additional log file")
    return parser.parse_args(argv)


def create_transport(config: ServerConfig) -> Transport:
    """Build the transport selected by the configuration."""
    if config.transport == "websocket":
        return WebSocketTransport(host=config.host, port=config.port)
    return StdioTransport()


async def serve(runtime: Runtime, transport: Transport, health: Optional[HealthServer] = None) -> None:
    """Run until SIGINT/SIGTERM or until the transport runs out of input."""
    loop = asyncio.get_running_loop()
    shutdown = asyncio.Event()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform / loop
            pass

    await transport.start(runtime.router.handle_raw)
    if health is not None:
        await health.start()

    logger.info(
        "kiket_mcp_ready",
        transport=transport.name,
        tools=len(runtime.router.list_tools()),
        health_port=runtime.config.health_port,
    )

    shutdown_task = asyncio.create_task(shutdown.wait())
    closed_task = asyncio.create_task(transport.wait_closed())
    try:
        await asyncio.wait({shutdown_task, closed_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (shutdown_task, closed_task):
            task.cancel()
        logger.info("kiket_mcp_shutting_down")
        await transport.stop()
        if health is not None:
            await health.stop()
        await runtime.aclose()
        logger.info("kiket_mcp_stopped")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the Kiket MCP server."""
    args = _parse_args(argv)

    try:
        config = load_config(
            config_path=args.config,
            transport=args.transport,
            host=args.host,
            port=args.port,
            health_port=args.health_port,
            log_file=args.log_file,
        )
    except ConfigurationError as e:
        setup_logging()
        logger.error("configuration_error", error=str(e))
        return 1

    setup_logging(level=config.log_level, json_format=config.json_logs, log_file=config.log_file)
    logger.info(
        "kiket_mcp_starting",
        transport=config.transport,
        api_url=config.api_url,
        project_key=config.project_key,
        max_retries=config.retry.max_retries,
    )

    runtime = create_runtime(config)
    transport = create_transport(config)
    health = HealthServer(config.health_port, runtime.client, host=config.host) if config.health_port else None

    try:
        asyncio.run(serve(runtime, transport, health))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.error("kiket_mcp_fatal", error=str(e), error_type=type(e).__name__, exc_info=True)
        return 1
    return 0


__all__ = [
    "create_transport",
    "main",
    "serve",
]


if __name__ == "__main__":
    sys.exit(main())
