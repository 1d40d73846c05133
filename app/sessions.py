"""
Session table for the streamable HTTP transport (/mcp).
Each session owns one MCP server and one StreamableHTTPServerTransport, run as a
task inside the table's task group. A session is removed when its transport closes
(client DELETE, termination) or, when an idle timeout is configured, by the sweeper.
"""
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Optional

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport

log = logging.getLogger(__name__)


class SessionNotFound(Exception):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class InvalidRequest(Exception):
    """Request without a session id that is not an initialize request."""


@dataclass
class Session:
    session_id: str
    transport: StreamableHTTPServerTransport
    server: Server
    last_seen: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        self.last_seen = time.monotonic()


class SessionTable:
    def __init__(
        self,
        server_factory: Callable[[], Server],
        idle_timeout: Optional[float] = None,
        json_response: bool = False,
    ):
        self._server_factory = server_factory
        self.idle_timeout = idle_timeout
        self.json_response = json_response
        self._sessions: dict[str, Session] = {}
        self._task_group: Optional[TaskGroup] = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    @asynccontextmanager
    async def run(self) -> AsyncIterator["SessionTable"]:
        """Open the task group that hosts session tasks. Sessions die with it."""
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            if self.idle_timeout:
                tg.start_soon(self._sweep)
            try:
                yield self
            finally:
                tg.cancel_scope.cancel()
                self._task_group = None
                self._sessions.clear()

    def get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        session.touch()
        return session

    async def create(self) -> Session:
        if self._task_group is None:
            raise RuntimeError("SessionTable.run() must be entered before creating sessions")
        session_id = str(uuid.uuid4())
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=self.json_response,
        )
        session = Session(session_id, transport, self._server_factory())
        self._sessions[session_id] = session
        await self._task_group.start(self._run_session, session)
        log.info("session_created", extra={"session_id": session_id})
        return session

    async def _run_session(self, session: Session, *, task_status: TaskStatus = anyio.TASK_STATUS_IGNORED) -> None:
        async with session.transport.connect() as (read_stream, write_stream):
            task_status.started()
            try:
                await session.server.run(
                    read_stream,
                    write_stream,
                    session.server.create_initialization_options(),
                )
            except Exception as e:
                log.error("session_error", extra={"session_id": session.session_id, "error": str(e)[:200]})
            finally:
                self._sessions.pop(session.session_id, None)
                log.info("session_closed", extra={"session_id": session.session_id})

    async def discard(self, session: Session) -> None:
        """Drop a session from the table and close its transport."""
        self._sessions.pop(session.session_id, None)
        if not session.transport.is_terminated:
            await session.transport.terminate()

    async def sweep_idle(self, now: Optional[float] = None) -> int:
        """Terminate sessions idle longer than idle_timeout. Returns how many were dropped."""
        if not self.idle_timeout:
            return 0
        now = time.monotonic() if now is None else now
        idle = [s for s in list(self._sessions.values()) if now - s.last_seen > self.idle_timeout]
        for session in idle:
            log.info("session_idle_timeout", extra={"session_id": session.session_id})
            await self.discard(session)
        return len(idle)

    async def _sweep(self) -> None:
        interval = max(self.idle_timeout / 2, 1.0)
        while True:
            await anyio.sleep(interval)
            await self.sweep_idle()
