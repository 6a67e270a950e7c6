"""TCP listener and per-connection session handling."""

import asyncio
from typing import Optional, Set

from actserver.adapters.tcp.session import Session
from actserver.domain.action_parser import parse_request
from actserver.domain.models import Directive, ExecutionResult
from actserver.executor import ActionExecutor
from actserver.infrastructure.log import log

READ_CHUNK = 64 * 1024


class Listener:
    """Accepts connections and runs one directive per session.

    With a global directive every session runs it once on connect and
    inbound data is ignored. Otherwise the first inbound payload of a
    session is parsed and executed; later payloads are only logged.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 0,
        global_directive: Optional[Directive] = None,
        executor: Optional[ActionExecutor] = None,
    ):
        self.host = host
        self.port = port
        self.global_directive = global_directive
        self.executor = executor or ActionExecutor()
        self.sessions: Set[Session] = set()
        self._server: Optional[asyncio.AbstractServer] = None
        self._session_tasks: Set[asyncio.Task] = set()
        self._stopped: Optional[asyncio.Event] = None

    @property
    def is_listening(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, useful when started with port 0."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self._stopped = asyncio.Event()
        self._server = await asyncio.start_server(self._on_connection, self.host, self.port)
        self.port = self.bound_port
        log("Server listening at port", self.port)

    async def shutdown(self) -> None:
        """Stop accepting new connections. Open sessions stay as they are."""
        if self._server is None or not self._server.is_serving():
            return
        self._server.close()
        log("Server stopped listening")
        self._stopped.set()

    async def serve_until_stopped(self) -> None:
        """Block until the listener is stopped and every session has ended."""
        if self._server is None:
            await self.start()
        await self._stopped.wait()
        while self._session_tasks:
            await asyncio.gather(*list(self._session_tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop listening and drop every open session."""
        await self.shutdown()
        for session in list(self.sessions):
            session.abort()
        while self._session_tasks:
            await asyncio.gather(*list(self._session_tasks), return_exceptions=True)

    # ── Connection handling ─────────────────────────────────

    async def _on_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        self._session_tasks.add(task)
        session = Session(reader, writer, listener=self)
        self.sessions.add(session)
        try:
            await self._run_session(session)
        finally:
            self.sessions.discard(session)
            self._session_tasks.discard(task)

    async def _run_session(self, session: Session) -> None:
        log("Socket connected", session.peer_label)
        running: Optional[asyncio.Task] = None

        if self.global_directive is not None:
            running = asyncio.ensure_future(self.executor.execute(session, self.global_directive))

        try:
            while True:
                data = await session.reader.read(READ_CHUNK)
                if not data:
                    break
                if self.global_directive is not None:
                    continue
                started = self._handle_inbound(session, data)
                if started is not None:
                    running = started
        except OSError as e:
            log("Socket Error", session.peer_label, e)

        try:
            if running is not None:
                await running
        finally:
            await session.release()
            log("Socket Closed", session.peer_label)

    def _handle_inbound(self, session: Session, data: bytes) -> Optional["asyncio.Future[ExecutionResult]"]:
        log("Socket IN:", data.decode("utf-8", errors="replace"))
        if not session.consume_directive():
            return None

        directive = parse_request(data)
        if directive is None:
            log("Request incorrect")
            session.writer.close()
            return None

        return asyncio.ensure_future(self.executor.execute(session, directive))
