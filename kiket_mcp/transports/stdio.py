"""Line-delimited JSON over stdin/stdout."""

import asyncio
import io
import json
import sys
from typing import Any, BinaryIO, TextIO

from ..logging_config import get_logger
from .base import MessageHandler, Transport

logger = get_logger(__name__)

MAX_LINE_BYTES = 16 * 1024 * 1024


class StdioTransport(Transport):
    """
    Reads one envelope per line from stdin and writes one response per line to stdout.

    Each line is handled as its own task, so a slow tool call does not block
    the next request. Responses may therefore be written out of order.

    Lines are passed to the handler as raw bytes; undecodable input becomes a
    parse error response rather than ending the read loop.
    """

    name = "stdio"

    def __init__(self, stdin: BinaryIO | None = None, stdout: TextIO | None = None):
        """
        Args:
            stdin: Binary input stream (defaults to sys.stdin.buffer).
            stdout: Output stream (defaults to sys.stdout).
        """
        self._stdin = stdin or sys.stdin.buffer
        self._stdout = stdout or sys.stdout
        self._handler: MessageHandler | None = None
        self._reader: asyncio.Task | None = None
        self._pipe: asyncio.ReadTransport | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()
        self._closed = asyncio.Event()

    async def start(self, handler: MessageHandler) -> None:
        if self._reader is not None:
            return
        self._handler = handler
        self._closed.clear()
        self._reader = asyncio.create_task(self._read_loop(), name="stdio-reader")
        logger.info("stdio_transport_started")

    async def stop(self) -> None:
        if self._reader is not None:
            if not self._reader.done():
                self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error("stdio_reader_failed", error=str(e), error_type=type(e).__name__)
        self._close_pipe()
        await self._drain()
        self._reader = None
        self._closed.set()
        logger.info("stdio_transport_stopped")

    async def send(self, envelope: dict[str, Any] | None) -> None:
        if envelope is None:
            return
        line = json.dumps(envelope, default=str)
        async with self._write_lock:
            self._stdout.write(line + "\n")
            self._stdout.flush()

    async def wait_closed(self) -> None:
        """Wait until stdin reaches EOF and in-flight requests are answered."""
        await self._closed.wait()

    async def _open_reader(self) -> asyncio.StreamReader:
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
        try:
            self._pipe, _ = await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), self._stdin)
        except (ValueError, OSError, io.UnsupportedOperation):
            # Regular files and in-memory buffers cannot be watched by the loop, but never block either
            reader.feed_data(await asyncio.to_thread(self._stdin.read))
            reader.feed_eof()
        return reader

    async def _read_loop(self) -> None:
        try:
            reader = await self._open_reader()
            while True:
                try:
                    line = await reader.readline()
                except ValueError as e:
                    logger.warning("stdio_line_too_long", error=str(e), limit=MAX_LINE_BYTES)
                    continue
                if not line:
                    logger.info("stdio_transport_eof")
                    break
                line = line.strip()
                if not line:
                    continue
                task = asyncio.create_task(self._process(line))
                self._in_flight.add(task)
                task.add_done_callback(self._in_flight.discard)
            await self._drain()
        finally:
            self._close_pipe()
            self._closed.set()

    async def _process(self, line: bytes) -> None:
        try:
            response = await self._handler(line)
            await self.send(response)
        except Exception as e:
            logger.error("stdio_message_failed", error=str(e), exc_info=True)

    async def _drain(self) -> None:
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _close_pipe(self) -> None:
        if self._pipe is not None:
            self._pipe.close()
            self._pipe = None


__all__ = ["StdioTransport"]
