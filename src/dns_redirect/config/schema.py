"""
Redirect Service Configuration Schema

Configuration schema covering the HTTP listener, the DNS TXT redirect engine,
logging and the admin web API.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .validators import (
    validate_bind_address,
    validate_boolean,
    validate_excluded_paths,
    validate_file_path,
    validate_https_url,
    validate_log_level,
    validate_port,
    validate_positive_float,
    validate_positive_int,
    validate_redirect_status,
)


@dataclass
class ServerConfig:
    """Server configuration section."""

    bind_address: str = "127.0.0.1"
    port: int = 8080

    def __post_init__(self) -> None:
        """Validate server configuration."""
        if not validate_bind_address(self.bind_address):
            raise ValueError(f"Invalid bind address: {self.bind_address}")

        if not validate_port(self.port):
            raise ValueError(f"Invalid port: {self.port}")


@dataclass
class RedirectConfig:
    """DNS TXT redirect engine configuration section."""

    dns_provider_url: str = "https://cloudflare-dns.com/dns-query"
    txt_prefix: str = "_redirect."
    dns_timeout: float = 5.0
    cache_ttl: int = 3600
    max_lookups_per_request: int = 5
    redirect_status: int = 307
    redirect_by: str = "DNS-Redirect-Middleware"
    excluded_paths: List[str] = field(
        default_factory=lambda: ["/api", "/static", "/favicon.ico"]
    )

    def __post_init__(self) -> None:
        """Validate redirect configuration."""
        if not validate_https_url(self.dns_provider_url):
            raise ValueError(f"Invalid DNS provider URL: {self.dns_provider_url}")

        if not self.txt_prefix or not self.txt_prefix.endswith("."):
            raise ValueError(f"TXT prefix must end with a dot: {self.txt_prefix}")

        if not validate_positive_float(self.dns_timeout):
            raise ValueError(f"DNS timeout must be positive: {self.dns_timeout}")

        if not validate_positive_int(self.cache_ttl):
            raise ValueError(f"Cache TTL must be positive: {self.cache_ttl}")

        if not validate_positive_int(self.max_lookups_per_request):
            raise ValueError(
                f"Max lookups per request must be positive: {self.max_lookups_per_request}"
            )

        if not validate_redirect_status(self.redirect_status):
            raise ValueError(f"Invalid redirect status: {self.redirect_status}")

        if not self.redirect_by:
            raise ValueError("Redirect-By identifier must not be empty")

        if not validate_excluded_paths(self.excluded_paths):
            raise ValueError(f"Invalid excluded paths: {self.excluded_paths}")


@dataclass
class LoggingConfig:
    """Logging configuration section."""

    level: str = "INFO"
    format: str = "console"
    file: Optional[str] = None
    max_size_mb: int = 100
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        if not validate_log_level(self.level):
            raise ValueError(f"Invalid log level: {self.level}")

        if self.format not in ["console", "json"]:
            raise ValueError(f"Invalid log format: {self.format}")

        if self.file is not None and not validate_file_path(self.file):
            raise ValueError(f"Invalid log file path: {self.file}")

        if not validate_positive_int(self.max_size_mb):
            raise ValueError(f"Max size MB must be positive: {self.max_size_mb}")

        if not validate_positive_int(self.backup_count):
            raise ValueError(f"Backup count must be positive: {self.backup_count}")


@dataclass
class WebConfig:
    """Web interface configuration section."""

    api_enabled: bool = True
    debug: bool = False

    def __post_init__(self) -> None:
        """Validate web configuration."""
        if not validate_boolean(self.api_enabled):
            raise ValueError(f"API enabled must be boolean: {self.api_enabled}")

        if not validate_boolean(self.debug):
            raise ValueError(f"Web debug must be boolean: {self.debug}")


@dataclass
class RedirectServiceConfig:
    """Main redirect service configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    redirect: RedirectConfig = field(default_factory=RedirectConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    web: WebConfig = field(default_factory=WebConfig)

    def __post_init__(self) -> None:
        """Validate cross-section constraints."""
        excluded = {path.rstrip("/") or "/" for path in self.redirect.excluded_paths}
        if self.web.api_enabled and "/api" not in excluded:
            raise ValueError("Admin API is enabled but /api is not an excluded path")


def create_default_config() -> RedirectServiceConfig:
    """Create a default configuration instance."""
    return RedirectServiceConfig()
