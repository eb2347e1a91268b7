# services/transport.py: the line-in / line-out channel a session talks through
import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class SessionClosed(Exception):
    """The client went away; the session should stop."""


class LineTransport(Protocol):
    async def read_line(self) -> str: ...

    async def write_line(self, text: str) -> None: ...


class StreamTransport:
    """LineTransport over an asyncio stream pair (one TCP connection)."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.reader = reader
        self.writer = writer
        peer = writer.get_extra_info("peername")
        self.peer = f"{peer[0]}:{peer[1]}" if isinstance(peer, tuple) else str(peer)

    async def read_line(self) -> str:
        try:
            data = await self.reader.readline()
        except (ConnectionError, asyncio.IncompleteReadError) as e:
            raise SessionClosed(str(e)) from e
        except (ValueError, asyncio.LimitOverrunError) as e:
            logger.warning("%s sent a line over the stream limit", self.peer)
            raise SessionClosed("line too long") from e
        if not data:
            raise SessionClosed("end of stream")
        text = data.decode("utf-8", errors="replace").strip()
        logger.debug("%s sent: %s", self.peer, text)
        return text

    async def write_line(self, text: str) -> None:
        try:
            self.writer.write((text + "\n").encode("utf-8"))
            await self.writer.drain()
        except ConnectionError as e:
            raise SessionClosed(str(e)) from e

    async def close(self) -> None:
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except ConnectionError:
            pass
