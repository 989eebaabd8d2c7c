"""Logger factory for creating configured loggers."""
import logging
import logging.handlers
import sys
from typing import Optional

from clientconfig.utils.logging.context import get_context, set_service_name
from clientconfig.utils.logging.formatters import KeyValueFormatter, StructuredJSONFormatter

_logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "clientconfig"


class ContextFilter(logging.Filter):
    """Attach the current log context to every record as ``extra_context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.extra_context = get_context()
        return True


def configure_logging(
    service_name: str = "clientconfig",
    level: int = logging.INFO,
    json_format: bool = True,
    log_file: Optional[str] = None,
    enable_console: bool = True,
) -> None:
    """Configure logging for the package logger.

    Args:
        service_name: Service name reported on every record
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit structured JSON (True) or key=value text (False)
        log_file: Path to a rotating log file (optional)
        enable_console: Enable stderr output
    """
    set_service_name(service_name)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    if json_format:
        formatter: logging.Formatter = StructuredJSONFormatter(service_name=service_name)
    else:
        formatter = KeyValueFormatter()

    handlers = []

    if enable_console:
        # stdout is reserved for command output
        console_handler = logging.StreamHandler(sys.stderr)
        handlers.append(console_handler)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(ContextFilter())
        package_logger.addHandler(handler)

    _logger.debug(
        "Logging configured",
        extra={
            "service_name": service_name,
            "level": logging.getLevelName(level),
            "json_format": json_format,
            "log_file": log_file,
            "handlers_count": len(handlers),
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Resolved imports", extra={"imports": 3})
    """
    return logging.getLogger(name)


def disable_logging() -> None:
    """Drop all package handlers and install a NullHandler.

    Useful for tests and for library embedding.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.addHandler(logging.NullHandler())
