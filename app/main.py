"""
FastAPI application for the HTTP transports: /sse (per-connection event stream),
/mcp (session-based streamable HTTP) and /health. Any other path is a 404.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from app.config import Settings, get_settings
from app.server import build_client, create_server
from app.sessions import SessionTable
from app.transports import MCP_PATH, SSE_PATH, SSEEndpoint, StreamableHTTPEndpoint
from tools.brave_search import BraveSearchClient

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, client: Optional[BraveSearchClient] = None) -> FastAPI:
    settings = settings or get_settings()
    client = client or build_client(settings)

    def server_factory():
        return create_server(client)

    sessions = SessionTable(
        server_factory,
        idle_timeout=settings.session_idle_timeout,
        json_response=settings.json_response,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Host /mcp sessions for the app lifetime; close the upstream client on shutdown."""
        async with sessions.run():
            yield
        await client.aclose()

    app = FastAPI(title="brave-search-mcp", lifespan=lifespan)
    app.state.sessions = sessions
    app.add_route(SSE_PATH, SSEEndpoint(server_factory, SSE_PATH))
    app.add_route(MCP_PATH, StreamableHTTPEndpoint(sessions))

    @app.get("/health")
    async def health():
        """Basic health check."""
        return {"status": "ok"}

    return app
