"""
Redirect Service Main Entry Point

This script provides the main entry point for running the DNS TXT redirect
service.
"""

import argparse
import asyncio
import json
import platform
import signal
import sys
from typing import Optional

from dns_redirect.cache import TTLCache
from dns_redirect.config.loader import ConfigLoader
from dns_redirect.config.schema import RedirectServiceConfig
from dns_redirect.core import (
    AiohttpFetcher,
    DestinationResolutionEngine,
    DNSResolver,
    InboundRequest,
    RedirectDecisionHandler,
)
from dns_redirect.dns_logging import get_logger, log_exception, setup_logging
from dns_redirect.web import WebServer


class RedirectServiceApp:
    """DNS Redirect Service Application"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config: Optional[RedirectServiceConfig] = None
        self.cache: Optional[TTLCache] = None
        self.fetcher: Optional[AiohttpFetcher] = None
        self.resolver: Optional[DNSResolver] = None
        self.engine: Optional[DestinationResolutionEngine] = None
        self.decision_handler: Optional[RedirectDecisionHandler] = None
        self.web_server: Optional[WebServer] = None
        self._shutdown_event = asyncio.Event()
        self.logger = None

    async def initialize(self):
        """Initialize the application"""
        try:
            self.config = ConfigLoader(self.config_path).load_config()

            setup_logging(self.config.logging)
            self.logger = get_logger("redirect_service_app")
            self.logger.info(
                "Structured logging configured",
                level=self.config.logging.level,
                format=self.config.logging.format,
                file=self.config.logging.file,
            )

            redirect_config = self.config.redirect

            # One cache and one HTTP session for the whole process
            self.cache = TTLCache(ttl=redirect_config.cache_ttl)
            self.fetcher = AiohttpFetcher()
            self.resolver = DNSResolver(
                self.fetcher,
                provider_url=redirect_config.dns_provider_url,
                txt_prefix=redirect_config.txt_prefix,
                timeout=redirect_config.dns_timeout,
            )
            self.engine = DestinationResolutionEngine(
                self.resolver,
                self.cache,
                max_lookups=redirect_config.max_lookups_per_request,
            )
            self.decision_handler = RedirectDecisionHandler(
                self.engine,
                txt_prefix=redirect_config.txt_prefix,
                redirect_status=redirect_config.redirect_status,
                redirect_by=redirect_config.redirect_by,
            )
            self.web_server = WebServer(self.config, self.decision_handler, self.cache)

            self.logger.info(
                "Redirect service initialized",
                dns_provider=redirect_config.dns_provider_url,
                cache_ttl=redirect_config.cache_ttl,
                dns_timeout=redirect_config.dns_timeout,
                max_lookups=redirect_config.max_lookups_per_request,
                api_enabled=self.config.web.api_enabled,
            )

        except Exception as e:
            if self.logger:
                log_exception(self.logger, "Failed to initialize redirect service", e)
            raise

    async def start(self):
        """Start the redirect service and run until a shutdown signal"""
        if not self.web_server:
            await self.initialize()

        try:
            await self.web_server.start()

            self.logger.info(
                "Redirect service started successfully",
                bind_address=self.config.server.bind_address,
                port=self.config.server.port,
            )

            loop = asyncio.get_running_loop()
            for sig in [signal.SIGTERM, signal.SIGINT]:
                loop.add_signal_handler(sig, self._signal_handler)

            await self._shutdown_event.wait()

        except Exception as e:
            log_exception(self.logger, "Error starting redirect service", e)
            raise
        finally:
            await self.stop()

    async def stop(self):
        """Stop the redirect service"""
        if self.logger:
            self.logger.info("Shutting down redirect service")

        if self.web_server:
            await self.web_server.stop()

        if self.fetcher:
            await self.fetcher.close()

        if self.logger:
            self.logger.info("Redirect service shutdown complete")

    def _signal_handler(self):
        """Handle shutdown signals"""
        self.logger.info("Received shutdown signal")
        self._shutdown_event.set()

    async def lookup(self, host: str) -> dict:
        """Run one redirect decision for host and return it as a dict"""
        if not self.decision_handler:
            await self.initialize()

        try:
            decision = await self.decision_handler.decide(
                InboundRequest(host=host, url=f"https://{host}/")
            )
            return decision.to_dict()
        finally:
            await self.fetcher.close()


def config_summary(config: RedirectServiceConfig) -> dict:
    return {
        "server": f"{config.server.bind_address}:{config.server.port}",
        "dns_provider_url": config.redirect.dns_provider_url,
        "txt_prefix": config.redirect.txt_prefix,
        "cache_ttl": config.redirect.cache_ttl,
        "dns_timeout": config.redirect.dns_timeout,
        "max_lookups_per_request": config.redirect.max_lookups_per_request,
        "redirect_status": config.redirect.redirect_status,
        "excluded_paths": config.redirect.excluded_paths,
        "api_enabled": config.web.api_enabled,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DNS TXT Redirect Service")
    parser.add_argument("--config", "-c", default=None, help="Configuration file path")
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate configuration, print a summary and exit",
    )
    parser.add_argument(
        "--lookup",
        metavar="HOST",
        help="Resolve the redirect decision for HOST and exit",
    )
    return parser


async def main(argv=None):
    """Main function"""
    args = build_parser().parse_args(argv)

    if args.check_config:
        try:
            config = ConfigLoader(args.config).load_config()
        except Exception as e:
            print(f"Invalid configuration: {e}")
            sys.exit(1)
        print(json.dumps(config_summary(config), indent=2))
        sys.exit(0)

    app = RedirectServiceApp(args.config)

    if args.lookup:
        try:
            result = await app.lookup(args.lookup)
        except Exception as e:
            print(f"Lookup failed: {e}")
            sys.exit(1)
        print(json.dumps(result, indent=2))
        sys.exit(0 if result["decision"] != "error" else 1)

    try:
        await app.start()
    except Exception as e:
        print(f"Redirect service failed: {e}")
        sys.exit(1)


def _install_uvloop() -> None:
    """Try to use uvloop for better performance on Unix systems"""
    try:
        if platform.system() != "Windows":
            import uvloop

            asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
    except ImportError:
        pass


def run():
    """Console script entry point"""
    _install_uvloop()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nRedirect service interrupted")


if __name__ == "__main__":
    run()
