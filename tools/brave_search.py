"""
Brave Search API client: web search and local (POI) search.
Every upstream request is counted by the RateLimiter. Non-2xx responses raise
UpstreamError immediately; there are no retries and no partial results.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

from tools.base import PlaceOfInterest, UpstreamError, WebResult
from tools.formatting import format_local_results, format_web_results
from tools.rate_limit import RateLimiter
from tools.registry import DEFAULT_LOCAL_COUNT, DEFAULT_WEB_COUNT, clamp_count

logger = logging.getLogger(__name__)

BRAVE_API_BASE_URL = "https://api.search.brave.com/res/v1"
WEB_SEARCH_PATH = "/web/search"
POIS_PATH = "/local/pois"
DESCRIPTIONS_PATH = "/local/descriptions"
DEFAULT_TIMEOUT_SEC = 30.0


class BraveSearchClient:
    """Async client for the three Brave endpoints used by the search tools."""

    def __init__(
        self,
        api_key: str,
        rate_limiter: RateLimiter,
        base_url: str = BRAVE_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.rate_limiter = rate_limiter
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "X-Subscription-Token": api_key,
        }

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: Any) -> dict[str, Any]:
        self.rate_limiter.check()
        r = await self._http.get(f"{self._base_url}{path}", params=params, headers=self._headers)
        if not r.is_success:
            logger.warning("brave_api_error", extra={"path": path, "status": r.status_code})
            raise UpstreamError(r.status_code, r.reason_phrase, r.text)
        return r.json()

    async def web_search(self, query: str, count: int = DEFAULT_WEB_COUNT, offset: int = 0) -> str:
        data = await self._get(
            WEB_SEARCH_PATH,
            {"q": query, "count": str(clamp_count(count)), "offset": str(offset)},
        )
        results = [WebResult.from_api(r) for r in (data.get("web") or {}).get("results") or []]
        logger.info("web_search_done", extra={"results": len(results)})
        return format_web_results(results)

    async def local_search(self, query: str, count: int = DEFAULT_LOCAL_COUNT) -> str:
        """Search places; falls back to plain web search when no location ids come back."""
        data = await self._get(
            WEB_SEARCH_PATH,
            {
                "q": query,
                "search_lang": "en",
                "result_filter": "locations",
                "count": str(clamp_count(count)),
            },
        )
        location_ids = [
            r["id"] for r in (data.get("locations") or {}).get("results") or [] if r.get("id") is not None
        ]
        if not location_ids:
            logger.info("local_search_fallback_to_web")
            return await self.web_search(query, count)

        pois, descriptions = await asyncio.gather(
            self.get_pois(location_ids),
            self.get_descriptions(location_ids),
        )
        logger.info("local_search_done", extra={"results": len(pois)})
        return format_local_results(pois, descriptions)

    async def get_pois(self, ids: list[str]) -> list[PlaceOfInterest]:
        data = await self._get(POIS_PATH, [("ids", i) for i in ids if i])
        return [PlaceOfInterest.from_api(p) for p in data.get("results") or []]

    async def get_descriptions(self, ids: list[str]) -> dict[str, str]:
        data = await self._get(DESCRIPTIONS_PATH, [("ids", i) for i in ids if i])
        return dict(data.get("descriptions") or {})
