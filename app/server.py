"""
MCP protocol server: lists the search tools and dispatches tool calls to the
Brave client. Every outcome is returned as a CallToolResult envelope; nothing
raised on the tool path reaches the transport.
"""
import logging
from typing import Any, Optional

from mcp import types
from mcp.server.lowlevel import Server
from pydantic import ValidationError

from app.config import Settings
from tools.base import ArgumentValidationError, SearchToolError, UnknownTool
from tools.brave_search import BraveSearchClient
from tools.rate_limit import RateLimiter
from tools.registry import INPUT_MODELS, TOOLS, LocalSearchInput, WebSearchInput

log = logging.getLogger(__name__)

SERVER_NAME = "brave-search"
SERVER_VERSION = "0.1.0"


def build_client(settings: Settings) -> BraveSearchClient:
    limiter = RateLimiter(
        per_second=settings.rate_limit_per_second,
        per_month=settings.rate_limit_per_month,
    )
    return BraveSearchClient(
        settings.brave_api_key,
        limiter,
        base_url=settings.brave_api_base_url,
        timeout=settings.request_timeout,
    )


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def _validate(name: str, arguments: dict[str, Any]):
    model = INPUT_MODELS.get(name)
    if model is None:
        raise UnknownTool(name)
    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        log.info("tool_arguments_invalid", extra={"tool": name, "errors": e.error_count()})
        raise ArgumentValidationError(f"Invalid arguments for {name}") from e


async def call_tool(
    client: BraveSearchClient,
    name: str,
    arguments: Optional[dict[str, Any]],
) -> types.CallToolResult:
    """Validate, dispatch and wrap a single tool invocation."""
    try:
        if arguments is None:
            raise ArgumentValidationError("No arguments provided")
        args = _validate(name, arguments)
        if isinstance(args, WebSearchInput):
            text = await client.web_search(args.query, args.count, args.offset)
        elif isinstance(args, LocalSearchInput):
            text = await client.local_search(args.query, args.count)
        else:
            raise UnknownTool(name)
        return _text_result(text)
    except UnknownTool as e:
        log.warning("unknown_tool", extra={"tool": name})
        return _text_result(str(e), is_error=True)
    except SearchToolError as e:
        log.warning("tool_call_failed", extra={"tool": name, "error": str(e)[:200]})
        return _text_result(f"Error: {e}", is_error=True)
    except Exception as e:
        log.error("tool_call_error", extra={"tool": name, "error": str(e)[:200]})
        return _text_result(f"Error: {e}", is_error=True)


def create_server(client: BraveSearchClient) -> Server:
    """New MCP server instance bound to a shared search client."""
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return TOOLS

    # Registered directly: the call_tool decorator replaces missing arguments with {}.
    async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
        return types.ServerResult(await call_tool(client, req.params.name, req.params.arguments))

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server
