"""
Redirect Service Logging Module

This module provides structured logging for the redirect service.
"""

from .logger import StructuredLogger, get_logger, log_exception, setup_logging

__all__ = [
    "StructuredLogger",
    "setup_logging",
    "get_logger",
    "log_exception",
]
