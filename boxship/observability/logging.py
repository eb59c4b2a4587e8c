# ==== STRUCTURED LOGGING WITH LOGURU ==== #

"""
Structured logging with loguru for Boxship.

This module provides JSON formatted logging, optional rotating log files,
interception of the standard logging module and OpenTelemetry trace
context injection.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict

from loguru import logger
from opentelemetry import trace
from opentelemetry.instrumentation.logging import LoggingInstrumentor


# ==== STANDARD LOGGING BRIDGE ==== #


class InterceptHandler(logging.Handler):
    """Route standard library log records through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def init_logging(
    level: str = "INFO",
    log_to_file: bool = False,
    log_dir: str = "logs"
) -> None:
    """Initialize structured logging with loguru.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Also write rotated JSON files under ``log_dir``
        log_dir: Directory for log files
    """
    # Remove default loguru handler
    logger.remove()

    # Console handler with JSON formatting
    logger.add(
        sys.stdout,
        format="{message}",
        serialize=True,
        level=level.upper(),
        colorize=False,
        backtrace=True,
        diagnose=False,
    )

    if log_to_file:
        logs_dir = Path(log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            logs_dir / "boxship_{time:YYYY-MM-DD}.log",
            rotation="100 MB",
            retention="30 days",
            compression="gz",
            serialize=True,
            level="DEBUG",
            enqueue=True,
        )

        # Error-specific log file
        logger.add(
            logs_dir / "boxship_errors_{time:YYYY-MM-DD}.log",
            rotation="50 MB",
            retention="90 days",
            compression="gz",
            serialize=True,
            level="ERROR",
            enqueue=True,
        )

    # Replace standard logging handlers
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    LoggingInstrumentor().instrument(set_logging_format=False)

    logger.info("Structured logging initialized", level=level, to_file=log_to_file)


class ContextualLogger:
    """Logger using loguru with automatic context injection.

    Binds the logger name, any keyword fields and the active OpenTelemetry
    trace and span ids to every record.
    """

    def __init__(self, name: str):
        """Initialize contextual logger.

        Args:
            name: Logger name (typically __name__)
        """
        self.name = name
        self.logger = logger.bind(logger_name=name)

    def _add_context(self, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
        """Add contextual information to log record.

        Args:
            extra: Additional fields to include

        Returns:
            Dictionary with context fields
        """
        context: Dict[str, Any] = {"logger_name": self.name}

        if extra:
            context.update(extra)

        span = trace.get_current_span()
        span_context = span.get_span_context()
        if span_context.is_valid:
            context['trace_id'] = format(span_context.trace_id, '032x')
            context['span_id'] = format(span_context.span_id, '016x')

        return context

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message with context."""
        self.logger.bind(**self._add_context(kwargs)).debug(msg)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message with context."""
        self.logger.bind(**self._add_context(kwargs)).info(msg)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message with context."""
        self.logger.bind(**self._add_context(kwargs)).warning(msg)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log error message with context."""
        self.logger.bind(**self._add_context(kwargs)).error(msg)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with full traceback and context."""
        self.logger.bind(**self._add_context(kwargs)).exception(msg)
