"""Tests for the configuration schema module."""

import pytest

from dns_redirect.config.schema import (
    LoggingConfig,
    RedirectConfig,
    RedirectServiceConfig,
    ServerConfig,
    WebConfig,
    create_default_config,
)
from dns_redirect.config.validators import (
    validate_bind_address,
    validate_excluded_paths,
    validate_https_url,
    validate_port,
    validate_positive_float,
    validate_positive_int,
    validate_redirect_status,
)


class TestValidationFunctions:
    """Test validation utility functions."""

    def test_validate_bind_address(self):
        """Test bind address validation."""
        assert validate_bind_address("127.0.0.1") is True
        assert validate_bind_address("0.0.0.0") is True
        assert validate_bind_address("::1") is True
        assert validate_bind_address("localhost") is False
        assert validate_bind_address("") is False

    def test_validate_port(self):
        """Test port number validation."""
        assert validate_port(80) is True
        assert validate_port(65535) is True
        assert validate_port(0) is False
        assert validate_port(65536) is False

    def test_validate_positive_numbers(self):
        """Test positive number validation."""
        assert validate_positive_int(1) is True
        assert validate_positive_int(0) is False
        assert validate_positive_int(True) is False
        assert validate_positive_float(0.5) is True
        assert validate_positive_float(5) is True
        assert validate_positive_float(0.0) is False
        assert validate_positive_float("5") is False

    def test_validate_https_url(self):
        """Test DoH provider URL validation."""
        assert validate_https_url("https://cloudflare-dns.com/dns-query") is True
        assert validate_https_url("https://dns.google/resolve") is True
        assert validate_https_url("http://cloudflare-dns.com/dns-query") is False
        assert validate_https_url("cloudflare-dns.com") is False
        assert validate_https_url(None) is False

    def test_validate_redirect_status(self):
        """Test redirect status validation."""
        for status in (301, 302, 303, 307, 308):
            assert validate_redirect_status(status) is True
        assert validate_redirect_status(200) is False
        assert validate_redirect_status(304) is False

    def test_validate_excluded_paths(self):
        """Test excluded path list validation."""
        assert validate_excluded_paths(["/api", "/static"]) is True
        assert validate_excluded_paths([]) is True
        assert validate_excluded_paths(["api"]) is False
        assert validate_excluded_paths("/api") is False


class TestServerConfig:
    """Test ServerConfig validation."""

    def test_defaults(self):
        config = ServerConfig()
        assert config.bind_address == "127.0.0.1"
        assert config.port == 8080

    def test_invalid_bind_address(self):
        with pytest.raises(ValueError, match="Invalid bind address"):
            ServerConfig(bind_address="invalid")

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="Invalid port"):
            ServerConfig(port=70000)


class TestRedirectConfig:
    """Test RedirectConfig validation."""

    def test_defaults(self):
        config = RedirectConfig()

        assert config.dns_provider_url == "https://cloudflare-dns.com/dns-query"
        assert config.txt_prefix == "_redirect."
        assert config.dns_timeout == 5.0
        assert config.cache_ttl == 3600
        assert config.max_lookups_per_request == 5
        assert config.redirect_status == 307
        assert config.redirect_by == "DNS-Redirect-Middleware"
        assert config.excluded_paths == ["/api", "/static", "/favicon.ico"]

    def test_excluded_paths_are_not_shared(self):
        first = RedirectConfig()
        first.excluded_paths.append("/other")

        assert "/other" not in RedirectConfig().excluded_paths

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"dns_provider_url": "http://dns.example/q"}, "Invalid DNS provider URL"),
            ({"txt_prefix": "_redirect"}, "TXT prefix"),
            ({"txt_prefix": ""}, "TXT prefix"),
            ({"dns_timeout": 0}, "DNS timeout"),
            ({"cache_ttl": -1}, "Cache TTL"),
            ({"max_lookups_per_request": 0}, "Max lookups"),
            ({"redirect_status": 200}, "Invalid redirect status"),
            ({"redirect_by": ""}, "Redirect-By"),
            ({"excluded_paths": ["api"]}, "Invalid excluded paths"),
        ],
    )
    def test_invalid_values(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            RedirectConfig(**kwargs)


class TestLoggingConfig:
    """Test LoggingConfig validation."""

    def test_valid_logging_config(self):
        config = LoggingConfig(level="DEBUG", format="json", file="/tmp/redirect.log")
        assert config.level == "DEBUG"
        assert config.file == "/tmp/redirect.log"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(level="VERBOSE")

    def test_invalid_log_format(self):
        with pytest.raises(ValueError, match="Invalid log format"):
            LoggingConfig(format="xml")

    def test_invalid_backup_count(self):
        with pytest.raises(ValueError, match="Backup count"):
            LoggingConfig(backup_count=0)


class TestRedirectServiceConfig:
    """Test cross-section validation."""

    def test_create_default_config(self):
        config = create_default_config()

        assert isinstance(config.server, ServerConfig)
        assert isinstance(config.redirect, RedirectConfig)
        assert isinstance(config.logging, LoggingConfig)
        assert config.web.api_enabled is True

    def test_api_requires_excluded_prefix(self):
        with pytest.raises(ValueError, match="/api is not an excluded path"):
            RedirectServiceConfig(redirect=RedirectConfig(excluded_paths=["/static"]))

    @pytest.mark.parametrize("paths", [["/api/"], ["/static", "/api//"]])
    def test_api_prefix_matches_like_path_exclusion(self, paths):
        config = RedirectServiceConfig(redirect=RedirectConfig(excluded_paths=paths))

        assert config.web.api_enabled is True

    def test_api_disabled_allows_any_paths(self):
        config = RedirectServiceConfig(
            redirect=RedirectConfig(excluded_paths=[]),
            web=WebConfig(api_enabled=False),
        )

        assert config.redirect.excluded_paths == []

    def test_non_boolean_web_flags(self):
        with pytest.raises(ValueError, match="API enabled must be boolean"):
            WebConfig(api_enabled="yes")
