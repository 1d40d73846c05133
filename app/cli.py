"""
Command line entry point. Without --port the server speaks MCP over stdio;
with --port it serves /sse and /mcp over HTTP.
Logs go to stderr: stdout carries protocol frames in stdio mode.
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

import anyio
import uvicorn
from pydantic import ValidationError

from app.config import Settings, get_settings
from app.main import create_app
from app.server import build_client, create_server
from app.transports import MCP_PATH, SSE_PATH, run_stdio

log = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="brave-search-mcp", description="Brave Search MCP server")
    p.add_argument("--port", type=int, default=None, help="Serve over HTTP on this port instead of stdio")
    p.add_argument("--headless", action="store_true", help="Accepted for compatibility; has no effect")
    return p.parse_args(argv)


def _client_config(port: int) -> str:
    return json.dumps({"mcpServers": {"brave-search": {"url": f"http://localhost:{port}{SSE_PATH}"}}}, indent=2)


def _settings_errors(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']).upper()}: {err['msg']}" for err in e.errors()
    )


async def _serve_stdio(settings: Settings) -> None:
    client = build_client(settings)
    try:
        await run_stdio(create_server(client))
    finally:
        await client.aclose()


async def _announce_when_started(server: uvicorn.Server, port: int) -> None:
    while not server.started:
        await asyncio.sleep(0.05)
    log.info("Listening on http://localhost:%d", port)
    log.info("Put this in your client config:\n%s", _client_config(port))
    log.info("If your client supports streamable HTTP, you can use the %s endpoint instead.", MCP_PATH)


async def _serve_http(settings: Settings, port: int) -> None:
    config = uvicorn.Config(
        create_app(settings),
        host=settings.api_host,
        port=port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    announcer = asyncio.create_task(_announce_when_started(server, port))
    try:
        await server.serve()
    except SystemExit as e:
        # uvicorn exits this way when it cannot bind
        raise RuntimeError(f"HTTP server failed to start on port {port}") from e
    finally:
        announcer.cancel()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO)
        log.error("Invalid configuration: %s", _settings_errors(e))
        return 1

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        if args.port:
            asyncio.run(_serve_http(settings, args.port))
        else:
            log.info("Brave Search MCP server running on stdio")
            anyio.run(_serve_stdio, settings)
    except Exception:
        log.exception("fatal_error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
