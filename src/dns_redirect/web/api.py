"""
Redirect Service Admin API

Provides REST API endpoints for:
- Health monitoring
- Destination cache inspection and flushing
- Dry-run redirect decisions for a hostname
"""

import time
from datetime import datetime, timezone

import psutil
from aiohttp import web
from aiohttp.web import Request, Response

from ..cache import TTLCache
from ..core import InboundRequest, RedirectDecisionHandler


def setup_api_routes(
    app: web.Application,
    decision_handler: RedirectDecisionHandler,
    cache: TTLCache,
) -> None:
    """Setup API routes."""
    api = APIHandler(decision_handler, cache)

    app.router.add_get("/api/health", api.health_check)
    app.router.add_get("/api/cache", api.get_cache_info)
    app.router.add_delete("/api/cache", api.flush_cache)
    app.router.add_get("/api/lookup", api.lookup_host)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class APIHandler:
    """Handles all API endpoints."""

    def __init__(self, decision_handler: RedirectDecisionHandler, cache: TTLCache):
        self.decision_handler = decision_handler
        self.cache = cache
        self.start_time = time.time()
        self._process = psutil.Process()

    async def health_check(self, request: Request) -> Response:
        """Get service health, uptime and memory usage."""
        memory_info = self._process.memory_info()

        return web.json_response(
            {
                "status": "healthy",
                "uptime_seconds": round(time.time() - self.start_time, 2),
                "cache_entries": len(self.cache),
                "memory": {
                    "rss_mb": round(memory_info.rss / (1024 * 1024), 2),
                    "percent": round(self._process.memory_percent(), 2),
                },
                "timestamp": _timestamp(),
            }
        )

    async def get_cache_info(self, request: Request) -> Response:
        """Get destination cache size and statistics."""
        info = await self.cache.get_cache_info()
        return web.json_response({"cache": info, "timestamp": _timestamp()})

    async def flush_cache(self, request: Request) -> Response:
        """Flush all cached destinations."""
        flushed = await self.cache.flush()
        return web.json_response({"flushed": flushed, "timestamp": _timestamp()})

    async def lookup_host(self, request: Request) -> Response:
        """Run the redirect decision for ?host= without redirecting."""
        host = request.query.get("host", "").strip()
        if not host:
            return web.json_response(
                {"error": "Missing required query parameter: host"}, status=400
            )

        url = request.query.get("url") or f"https://{host}/"
        decision = await self.decision_handler.decide(InboundRequest(host=host, url=url))

        return web.json_response(
            {"host": host, "url": url, **decision.to_dict(), "timestamp": _timestamp()}
        )
