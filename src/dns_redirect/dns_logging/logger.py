"""
Structured Logging Framework

This module provides the core logging infrastructure using structlog on top of
the stdlib logging module, with console or JSON output and an optional
rotating JSON log file.
"""

import logging
import logging.handlers
import sys
import traceback
from pathlib import Path
from typing import List, Optional

import structlog

from ..config.schema import LoggingConfig


class StructuredLogger:
    """Structured logger using structlog with console or JSON rendering."""

    def __init__(self, config: LoggingConfig):
        """Initialize structured logger.

        Args:
            config: Logging configuration
        """
        self.config = config
        self._configured = False
        self.logger = None

    def _shared_processors(self) -> List:
        return [
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]

    def _get_renderer(self):
        if self.config.format == "json":
            return structlog.processors.JSONRenderer()
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    def configure(self) -> None:
        """Configure structlog and the stdlib root logger."""
        if self._configured:
            return

        root_logger = logging.getLogger()
        root_logger.handlers.clear()

        log_level = getattr(logging, self.config.level.upper())
        root_logger.setLevel(log_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=self._get_renderer(),
                foreign_pre_chain=self._shared_processors(),
            )
        )
        root_logger.addHandler(console_handler)

        if self.config.file:
            self._setup_file_logging(root_logger, log_level)

        structlog.configure(
            processors=self._shared_processors()
            + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self._configured = True
        self.logger = structlog.get_logger("dns_redirect")

    def _setup_file_logging(self, root_logger: logging.Logger, log_level: int) -> None:
        """Attach a rotating file handler that always writes JSON lines."""
        log_path = Path(self.config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=self.config.file,
            maxBytes=self.config.max_size_mb * 1024 * 1024,
            backupCount=self.config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=self._shared_processors(),
            )
        )
        root_logger.addHandler(file_handler)

    def get_logger(self, name: str = "dns_redirect") -> structlog.stdlib.BoundLogger:
        """Get a structured logger instance."""
        if not self._configured:
            self.configure()

        return structlog.get_logger(name)


# Global logger instance
_logger_instance: Optional[StructuredLogger] = None


def setup_logging(config: LoggingConfig) -> None:
    """Setup global logging configuration.

    Args:
        config: Logging configuration
    """
    global _logger_instance
    _logger_instance = StructuredLogger(config)
    _logger_instance.configure()


def get_logger(name: str = "dns_redirect"):
    """Get a logger instance.

    Before setup_logging() has run this returns a logger using structlog's
    default configuration, so library components can log from tests.
    """
    if _logger_instance is None:
        return structlog.get_logger(name)

    return _logger_instance.get_logger(name)


def log_exception(logger, message: str, exc: Optional[BaseException] = None, **kw) -> None:
    """Log an exception with detailed traceback information.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance (optional, will use current exception if None)
    """
    if exc is None:
        exc = sys.exc_info()[1]

    if exc is None:
        logger.error(message, **kw)
        return

    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        message,
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        traceback=tb_str,
        **kw,
    )
