"""Tests for the configuration loader module."""

import json
import os
import tempfile

import pytest
import yaml

from dns_redirect.config.loader import ConfigLoader, load_config_from_file
from dns_redirect.config.schema import RedirectServiceConfig


def write_config(content: str, suffix: str) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=suffix, delete=False) as f:
        f.write(content)
        return f.name


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in list(os.environ):
        if key.startswith("DNS_REDIRECT_"):
            monkeypatch.delenv(key)


class TestConfigLoader:
    """Test ConfigLoader functionality."""

    def test_load_default_config(self):
        """Test loading default configuration without file."""
        loader = ConfigLoader()
        config = loader.load_config()

        assert isinstance(config, RedirectServiceConfig)
        assert config.server.port == 8080
        assert config.redirect.txt_prefix == "_redirect."
        assert loader.get_config() is config

    def test_load_yaml_config(self):
        """Test loading configuration from YAML file."""
        yaml_content = """
server:
  bind_address: "0.0.0.0"
  port: 80

redirect:
  dns_provider_url: "https://dns.google/resolve"
  cache_ttl: 600
  excluded_paths:
    - /api
    - /healthz

logging:
  level: "DEBUG"
  format: "json"
"""
        config_file = write_config(yaml_content, ".yaml")

        try:
            config = ConfigLoader(config_file).load_config()

            assert config.server.bind_address == "0.0.0.0"
            assert config.server.port == 80
            assert config.redirect.dns_provider_url == "https://dns.google/resolve"
            assert config.redirect.cache_ttl == 600
            assert config.redirect.excluded_paths == ["/api", "/healthz"]
            assert config.logging.level == "DEBUG"
            # Untouched keys keep their defaults
            assert config.redirect.dns_timeout == 5.0
        finally:
            os.unlink(config_file)

    def test_load_json_config(self):
        """Test loading configuration from JSON file."""
        json_content = {
            "redirect": {"redirect_status": 302, "max_lookups_per_request": 3},
            "web": {"debug": True},
        }
        config_file = write_config(json.dumps(json_content), ".json")

        try:
            config = load_config_from_file(config_file)

            assert config.redirect.redirect_status == 302
            assert config.redirect.max_lookups_per_request == 3
            assert config.web.debug is True
        finally:
            os.unlink(config_file)

    def test_unknown_extension_is_parsed(self):
        config_file = write_config("server:\n  port: 9090\n", ".conf")

        try:
            assert ConfigLoader(config_file).load_config().server.port == 9090
        finally:
            os.unlink(config_file)

    def test_file_not_found(self):
        """Test handling of non-existent configuration file."""
        loader = ConfigLoader("/non/existent/file.yaml")

        with pytest.raises(FileNotFoundError):
            loader.load_config()

    def test_invalid_yaml_file(self):
        """Test handling of invalid YAML file."""
        config_file = write_config("invalid: yaml: content: [", ".yaml")

        try:
            with pytest.raises(yaml.YAMLError):
                ConfigLoader(config_file).load_config()
        finally:
            os.unlink(config_file)

    def test_invalid_json_file(self):
        """Test handling of invalid JSON file."""
        config_file = write_config('{"invalid": json, "content":', ".json")

        try:
            with pytest.raises(json.JSONDecodeError):
                ConfigLoader(config_file).load_config()
        finally:
            os.unlink(config_file)

    def test_unknown_key_is_rejected(self):
        config_file = write_config("redirect:\n  cache_size: 10\n", ".yaml")

        try:
            with pytest.raises(ValueError, match="Invalid configuration"):
                ConfigLoader(config_file).load_config()
        finally:
            os.unlink(config_file)

    def test_invalid_value_is_rejected(self):
        config_file = write_config("redirect:\n  redirect_status: 200\n", ".yaml")

        try:
            with pytest.raises(ValueError, match="Invalid redirect status"):
                ConfigLoader(config_file).load_config()
        finally:
            os.unlink(config_file)


class TestEnvironmentOverrides:
    """Test DNS_REDIRECT_<SECTION>_<KEY> overrides."""

    def test_numeric_and_string_overrides(self, monkeypatch):
        monkeypatch.setenv("DNS_REDIRECT_SERVER_PORT", "9000")
        monkeypatch.setenv("DNS_REDIRECT_REDIRECT_DNS_TIMEOUT", "2.5")
        monkeypatch.setenv("DNS_REDIRECT_REDIRECT_REDIRECT_BY", "edge")

        config = ConfigLoader().load_config()

        assert config.server.port == 9000
        assert config.redirect.dns_timeout == 2.5
        assert config.redirect.redirect_by == "edge"

    def test_boolean_override(self, monkeypatch):
        monkeypatch.setenv("DNS_REDIRECT_WEB_DEBUG", "yes")

        assert ConfigLoader().load_config().web.debug is True

    def test_excluded_paths_override(self, monkeypatch):
        monkeypatch.setenv("DNS_REDIRECT_REDIRECT_EXCLUDED_PATHS", "/api, /health,")

        config = ConfigLoader().load_config()

        assert config.redirect.excluded_paths == ["/api", "/health"]

    def test_environment_wins_over_file(self, monkeypatch):
        config_file = write_config("redirect:\n  cache_ttl: 600\n", ".yaml")
        monkeypatch.setenv("DNS_REDIRECT_REDIRECT_CACHE_TTL", "60")

        try:
            assert ConfigLoader(config_file).load_config().redirect.cache_ttl == 60
        finally:
            os.unlink(config_file)

    def test_unknown_section_is_ignored(self, monkeypatch):
        monkeypatch.setenv("DNS_REDIRECT_CACHE_SIZE", "10")
        monkeypatch.setenv("DNS_REDIRECT_X", "1")

        assert ConfigLoader().load_config() == RedirectServiceConfig()
