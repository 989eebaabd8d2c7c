"""Structured logging utilities."""

from clientconfig.utils.logging.context import (  # noqa: F401
    get_context,
    get_correlation_id,
    get_operation_name,
    get_service_name,
    log_context,
    new_correlation_id,
    set_service_name,
)
from clientconfig.utils.logging.formatters import (  # noqa: F401
    KeyValueFormatter,
    StructuredJSONFormatter,
)
from clientconfig.utils.logging.factory import (  # noqa: F401
    ContextFilter,
    configure_logging,
    disable_logging,
    get_logger,
)

__all__ = [
    # Context management
    "get_context",
    "get_correlation_id",
    "get_operation_name",
    "get_service_name",
    "log_context",
    "new_correlation_id",
    "set_service_name",
    # Formatters
    "StructuredJSONFormatter",
    "KeyValueFormatter",
    # Factory
    "ContextFilter",
    "configure_logging",
    "disable_logging",
    "get_logger",
]
