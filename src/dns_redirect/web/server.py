"""
Redirect Service Web Server

This module provides the HTTP front end using aiohttp:
- Redirect middleware that applies the DNS TXT redirect decision
- Request logging and error handling middleware
- Admin REST API under /api
"""

import asyncio
from typing import Iterable, Optional

from aiohttp import hdrs, web
from aiohttp.web import Application

from ..cache import TTLCache
from ..config.schema import RedirectServiceConfig
from ..core import (
    ErrorResponse,
    InboundRequest,
    PassThrough,
    Redirect,
    RedirectDecision,
    RedirectDecisionHandler,
)
from ..dns_logging import get_logger
from .api import setup_api_routes


def is_excluded_path(path: str, excluded_paths: Iterable[str]) -> bool:
    """Check whether path equals or sits under one of the excluded prefixes."""
    for prefix in excluded_paths:
        prefix = prefix.rstrip("/") or "/"
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def request_url(request: web.Request) -> str:
    """Full URL of request as the client addressed it."""
    return f"{request.scheme}://{request.host}{request.raw_path}"


def decision_to_response(decision: RedirectDecision) -> web.Response:
    """Render a redirect or error decision as an aiohttp response."""
    if isinstance(decision, Redirect):
        headers = {hdrs.LOCATION: decision.location}
        headers.update(decision.headers)
        return web.Response(status=decision.status, headers=headers)

    if isinstance(decision, ErrorResponse):
        response = web.Response(status=decision.status, text=decision.body)
        for name, value in decision.headers.items():
            if name.lower() != "content-type":
                response.headers[name] = value
        return response

    raise TypeError(f"Cannot render decision: {decision!r}")


class WebServer:
    """Redirect Service HTTP Server"""

    def __init__(
        self,
        config: RedirectServiceConfig,
        decision_handler: RedirectDecisionHandler,
        cache: TTLCache,
    ):
        """Initialize web server.

        Args:
            config: Service configuration
            decision_handler: Decides redirects for intercepted requests
            cache: Destination cache exposed through the admin API
        """
        self.config = config
        self.decision_handler = decision_handler
        self.cache = cache
        self.logger = get_logger("web_server")

        self.app: Optional[Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

    async def setup_application(self) -> Application:
        """Setup aiohttp application with routes and middleware."""
        app = web.Application(
            middlewares=[
                self._create_logging_middleware(),
                self._create_error_middleware(),
                self._create_redirect_middleware(),
            ]
        )

        if self.config.web.api_enabled:
            setup_api_routes(app, self.decision_handler, self.cache)

        # Requests that pass through the redirect middleware end here
        app.router.add_route("*", "/{path:.*}", self._passthrough_handler)

        return app

    async def _passthrough_handler(self, request: web.Request) -> web.Response:
        return web.Response(text="No redirect applies to this request.\n")

    def _create_redirect_middleware(self):
        """Create middleware that applies the DNS redirect decision."""
        decision_handler = self.decision_handler
        excluded_paths = tuple(self.config.redirect.excluded_paths)

        @web.middleware
        async def redirect_middleware(request, handler):
            if is_excluded_path(request.path, excluded_paths):
                return await handler(request)

            decision = await decision_handler.decide(
                InboundRequest(
                    host=request.headers.get(hdrs.HOST),
                    url=request_url(request),
                )
            )

            if isinstance(decision, PassThrough):
                return await handler(request)

            return decision_to_response(decision)

        return redirect_middleware

    def _create_logging_middleware(self):
        """Create logging middleware."""
        logger = self.logger

        @web.middleware
        async def logging_middleware(request, handler):
            """Log HTTP requests."""
            start_time = asyncio.get_running_loop().time()

            try:
                response = await handler(request)
                process_time = asyncio.get_running_loop().time() - start_time

                logger.info(
                    "HTTP request",
                    method=request.method,
                    host=request.headers.get(hdrs.HOST),
                    path=request.path,
                    remote=request.remote,
                    status=response.status,
                    response_time_ms=round(process_time * 1000, 2),
                )

                return response

            except Exception:
                process_time = asyncio.get_running_loop().time() - start_time

                logger.error(
                    "HTTP request failed",
                    method=request.method,
                    host=request.headers.get(hdrs.HOST),
                    path=request.path,
                    remote=request.remote,
                    response_time_ms=round(process_time * 1000, 2),
                )
                raise

        return logging_middleware

    def _create_error_middleware(self):
        """Create error handling middleware."""
        logger = self.logger
        debug = self.config.web.debug

        @web.middleware
        async def error_middleware(request, handler):
            """Handle HTTP errors gracefully."""
            try:
                return await handler(request)
            except web.HTTPException:
                # Re-raise HTTP exceptions as they are handled properly by aiohttp
                raise
            except Exception as ex:
                logger.error(
                    "Unhandled error in web server",
                    method=request.method,
                    path=request.path,
                    error=str(ex),
                )

                return web.json_response(
                    {
                        "error": "Internal server error",
                        "message": str(ex) if debug else "An unexpected error occurred",
                    },
                    status=500,
                )

        return error_middleware

    async def start(self) -> None:
        """Start the web server."""
        if self.runner:
            self.logger.warning("Web server is already running")
            return

        host = self.config.server.bind_address
        port = self.config.server.port

        try:
            self.app = await self.setup_application()

            self.runner = web.AppRunner(self.app)
            await self.runner.setup()

            self.site = web.TCPSite(self.runner, host=host, port=port)
            await self.site.start()

            self.logger.info("Web server started", host=host, port=port)

        except Exception as ex:
            self.logger.error("Failed to start web server", error=str(ex))
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the web server."""
        self.logger.info("Stopping web server")

        if self.site:
            await self.site.stop()
            self.site = None

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        self.app = None

        self.logger.info("Web server stopped")

    async def health_check(self) -> dict:
        """Get web server health status."""
        return {"status": "healthy" if self.runner else "stopped"}
