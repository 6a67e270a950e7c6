"""One accepted TCP connection."""

import asyncio
import contextlib
from typing import Optional, Tuple

from actserver.ports.outbound import ListenerPort


class Session:
    """Connection state owned by the listener.

    ``directive_consumed`` is set once the first inbound payload has been
    handed to the parser; later payloads are never parsed.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        listener: Optional[ListenerPort] = None,
    ):
        self.reader = reader
        self.writer = writer
        self.listener = listener
        self.directive_consumed = False
        # Set once CLOSE has sent FIN; inbound data is still read after that
        self.output_closed = False
        self.peer: Optional[Tuple[str, int]] = writer.get_extra_info("peername")

    @property
    def peer_label(self) -> str:
        if not self.peer:
            return "unknown"
        return f"{self.peer[0]}:{self.peer[1]}"

    @property
    def is_closing(self) -> bool:
        return self.output_closed or self.writer.is_closing()

    def consume_directive(self) -> bool:
        """Mark the session's directive as taken. False if it already was."""
        if self.directive_consumed:
            return False
        self.directive_consumed = True
        return True

    async def write(self, data: bytes) -> None:
        if self.is_closing:
            raise ConnectionResetError("Cannot write to a closed connection")
        self.writer.write(data)
        await self.writer.drain()

    async def close(self) -> None:
        """End the outbound side (FIN) and wait until it is flushed.

        The inbound side stays open; the listener releases the socket once
        the peer has closed its side too.
        """
        if self.output_closed:
            return
        if self.writer.is_closing():
            raise ConnectionResetError("Connection already closed")
        self.output_closed = True
        self.writer.write_eof()
        await self.writer.drain()

    def abort(self) -> None:
        """Drop the connection without flushing (RST)."""
        self.writer.transport.abort()

    async def release(self) -> None:
        """Close quietly once the connection is finished with."""
        if not self.writer.is_closing():
            self.writer.close()
        with contextlib.suppress(Exception):
            await self.writer.wait_closed()
