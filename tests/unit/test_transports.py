"""Unit tests for the HTTP endpoints, driven at the ASGI level (SSE streams never end on their own)."""
import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

from app.server import create_server
from app.sessions import Session, SessionTable
from app.transports import SSEEndpoint, StreamableHTTPEndpoint


def _scope(method: str = "GET") -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": "/sse",
        "raw_path": b"/sse",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"localhost"), (b"accept", b"text/event-stream")],
        "client": ("127.0.0.1", 50000),
        "server": ("localhost", 8000),
    }


async def _open_stream(endpoint: SSEEndpoint) -> list[dict]:
    """Open GET /sse, wait for the endpoint event, then disconnect."""
    sent = []
    got_endpoint = asyncio.Event()

    async def receive():
        await got_endpoint.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)
        if message["type"] == "http.response.body" and b"event: endpoint" in message.get("body", b""):
            got_endpoint.set()

    await asyncio.wait_for(endpoint(_scope(), receive, send), timeout=5)
    return sent


def test_sse_stream_announces_message_endpoint():
    servers = []

    def factory():
        server = create_server(MagicMock())
        servers.append(server)
        return server

    sent = asyncio.run(_open_stream(SSEEndpoint(factory)))
    start = sent[0]
    assert start["type"] == "http.response.start"
    assert start["status"] == 200
    body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
    assert b"event: endpoint" in body
    assert b"/sse?session_id=" in body
    assert len(servers) == 1


def test_each_sse_stream_gets_a_new_server():
    servers = []

    def factory():
        server = create_server(MagicMock())
        servers.append(server)
        return server

    endpoint = SSEEndpoint(factory)

    async def reconnect():
        await _open_stream(endpoint)
        await _open_stream(endpoint)

    asyncio.run(reconnect())
    assert len(servers) == 2
    assert servers[0] is not servers[1]


def test_existing_session_transport_error_is_logged_not_raised(caplog):
    transport = MagicMock()
    transport.handle_request = AsyncMock(side_effect=RuntimeError("stream broke"))
    transport.is_terminated = False
    table = SessionTable(MagicMock())
    table._sessions["abc"] = Session("abc", transport, MagicMock())

    scope = {**_scope("POST"), "path": "/mcp", "raw_path": b"/mcp",
             "headers": [(b"host", b"localhost"), (b"mcp-session-id", b"abc")]}
    sent = []

    async def receive():
        return {"type": "http.request", "body": b"{}", "more_body": False}

    async def send(message):
        sent.append(message)

    with caplog.at_level(logging.ERROR, logger="app.transports"):
        asyncio.run(StreamableHTTPEndpoint(table)(scope, receive, send))
    assert sent == []
    assert "streamable_http_connection_error" in caplog.text
    assert "abc" in table
