"""
Configuration Validators

This module provides validation functions for redirect service configuration parameters.
"""

import ipaddress
from pathlib import Path
from typing import List
from urllib.parse import urlparse


def validate_bind_address(address: str) -> bool:
    """Validate bind address format."""
    if not address:
        return False

    # Allow 0.0.0.0 for all interfaces
    if address == "0.0.0.0":
        return True

    try:
        ipaddress.ip_address(address)
        return True
    except ValueError:
        return False


def validate_boolean(value) -> bool:
    """Validate boolean value."""
    return isinstance(value, bool)


def validate_file_path(path: str) -> bool:
    """Validate file path format."""
    if not path:
        return False

    try:
        Path(path)
        return True
    except (TypeError, ValueError):
        return False


def validate_log_level(level: str) -> bool:
    """Validate log level."""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    return isinstance(level, str) and level.upper() in valid_levels


def validate_positive_float(value: float) -> bool:
    """Validate positive float."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_positive_int(value: int) -> bool:
    """Validate positive integer."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_port(port: int) -> bool:
    """Validate port number."""
    return isinstance(port, int) and 1 <= port <= 65535


def validate_https_url(url: str) -> bool:
    """Validate an absolute https:// URL with a host."""
    if not isinstance(url, str) or not url:
        return False

    parsed = urlparse(url)
    return parsed.scheme == "https" and bool(parsed.netloc)


def validate_redirect_status(status: int) -> bool:
    """Validate HTTP redirect status code."""
    return status in (301, 302, 303, 307, 308)


def validate_excluded_paths(paths: List[str]) -> bool:
    """Validate list of excluded path prefixes."""
    if not isinstance(paths, list):
        return False

    for path in paths:
        if not isinstance(path, str) or not path.startswith("/"):
            return False

    return True
