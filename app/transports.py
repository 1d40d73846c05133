"""
ASGI endpoints binding MCP servers to HTTP, plus the stdio runner.
- SSEEndpoint: GET opens an event stream with a fresh server; POST delivers client messages.
- StreamableHTTPEndpoint: session-routed streamable HTTP backed by SessionTable.
"""
import json
import logging
from typing import Callable

from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

from app.sessions import InvalidRequest, Session, SessionNotFound, SessionTable

log = logging.getLogger(__name__)

SSE_PATH = "/sse"
MCP_PATH = "/mcp"


async def run_stdio(server: Server) -> None:
    """Serve one MCP server over stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


class SSEEndpoint:
    def __init__(self, server_factory: Callable[[], Server], path: str = SSE_PATH):
        self._server_factory = server_factory
        self.transport = SseServerTransport(path)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["method"] == "POST":
            await self.transport.handle_post_message(scope, receive, send)
            return
        if scope["method"] != "GET":
            await PlainTextResponse("Method Not Allowed", status_code=405)(scope, receive, send)
            return

        # No continuity across reconnects: every stream gets its own server.
        server = self._server_factory()
        try:
            async with self.transport.connect_sse(scope, receive, send) as (read_stream, write_stream):
                await server.run(read_stream, write_stream, server.create_initialization_options())
        except Exception as e:
            log.error("sse_connection_error", extra={"error": str(e)[:200]})


def _is_initialize(body: bytes) -> bool:
    try:
        message = json.loads(body)
    except ValueError:
        return False
    return isinstance(message, dict) and message.get("method") == "initialize"


def _replay(body: bytes, receive: Receive) -> Receive:
    """Receive callable that yields an already-read body once, then defers to the original."""
    sent = False

    async def _receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return _receive


class StreamableHTTPEndpoint:
    def __init__(self, sessions: SessionTable):
        self.sessions = sessions

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        try:
            if session_id:
                await self._handle_existing(self.sessions.get(session_id), scope, receive, send)
                return

            if request.method != "POST":
                raise InvalidRequest()
            body = await request.body()
            if not _is_initialize(body):
                raise InvalidRequest()
        except SessionNotFound:
            log.info("session_not_found", extra={"session_id": session_id})
            await PlainTextResponse("Session not found", status_code=404)(scope, receive, send)
            return
        except InvalidRequest:
            await PlainTextResponse("Invalid request", status_code=400)(scope, receive, send)
            return

        await self._handle_initialize(body, scope, receive, send)

    async def _handle_existing(self, session: Session, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await session.transport.handle_request(scope, receive, send)
        except Exception as e:
            log.error(
                "streamable_http_connection_error",
                extra={"session_id": session.session_id, "error": str(e)[:200]},
            )
        if session.transport.is_terminated:
            await self.sessions.discard(session)

    async def _handle_initialize(self, body: bytes, scope: Scope, receive: Receive, send: Send) -> None:
        """Start a session for an initialize request; keep it only if the transport accepted it."""
        status = {}
        header = MCP_SESSION_ID_HEADER.encode()

        async def _send(message: Message) -> None:
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
                if not 200 <= message["status"] < 300:
                    message = {
                        **message,
                        "headers": [(k, v) for k, v in message.get("headers", []) if k.lower() != header],
                    }
            await send(message)

        session = None
        try:
            session = await self.sessions.create()
            await session.transport.handle_request(scope, _replay(body, receive), _send)
        except Exception as e:
            log.error("streamable_http_connection_error", extra={"error": str(e)[:200]})

        if session is not None and not 200 <= status.get("code", 0) < 300:
            log.info("session_rejected", extra={"session_id": session.session_id, "status": status.get("code")})
            await self.sessions.discard(session)
