"""
Tool declarations exposed over MCP. Input schemas are generated from the pydantic
models below, which also validate arguments at dispatch time.
"""
from mcp import types
from pydantic import BaseModel, Field

WEB_SEARCH = "brave_web_search"
LOCAL_SEARCH = "brave_local_search"

MAX_COUNT = 20
MAX_OFFSET = 9
DEFAULT_WEB_COUNT = 10
DEFAULT_LOCAL_COUNT = 5


class WebSearchInput(BaseModel):
    """Input for web search."""
    query: str = Field(description="Search query (max 400 chars, 50 words)")
    count: int = Field(
        default=DEFAULT_WEB_COUNT,
        description=f"Number of results (1-{MAX_COUNT}, default {DEFAULT_WEB_COUNT})",
    )
    offset: int = Field(default=0, description=f"Pagination offset (max {MAX_OFFSET}, default 0)")


class LocalSearchInput(BaseModel):
    """Input for local business search."""
    query: str = Field(description="Local search query (e.g. 'pizza near Central Park')")
    count: int = Field(
        default=DEFAULT_LOCAL_COUNT,
        description=f"Number of results (1-{MAX_COUNT}, default {DEFAULT_LOCAL_COUNT})",
    )


INPUT_MODELS: dict[str, type[BaseModel]] = {
    WEB_SEARCH: WebSearchInput,
    LOCAL_SEARCH: LocalSearchInput,
}

WEB_SEARCH_TOOL = types.Tool(
    name=WEB_SEARCH,
    description=(
        "Performs a web search using the Brave Search API, ideal for general queries, news, articles, "
        "and online content. Use this for broad information gathering, recent events, or when you need "
        "diverse web sources. Supports pagination, content filtering, and freshness controls. "
        f"Maximum {MAX_COUNT} results per request, with offset for pagination."
    ),
    inputSchema=WebSearchInput.model_json_schema(),
)

LOCAL_SEARCH_TOOL = types.Tool(
    name=LOCAL_SEARCH,
    description=(
        "Searches for local businesses and places using Brave's Local Search API. "
        "Best for queries related to physical locations, businesses, restaurants, services, etc. "
        "Returns detailed information including:\n"
        "- Business names and addresses\n"
        "- Ratings and review counts\n"
        "- Phone numbers and opening hours\n"
        "Use this when the query implies 'near me' or mentions specific locations. "
        "Automatically falls back to web search if no local results are found."
    ),
    inputSchema=LocalSearchInput.model_json_schema(),
)

TOOLS: list[types.Tool] = [WEB_SEARCH_TOOL, LOCAL_SEARCH_TOOL]


def clamp_count(count: int) -> int:
    return min(count, MAX_COUNT)
