"""Structured JSON log formatters."""
import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(
    {
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "funcName", "levelname", "levelno", "lineno", "message", "module",
        "msecs", "msg", "name", "pathname", "process", "processName",
        "relativeCreated", "stack_info", "taskName", "thread", "threadName",
        "extra_context",
    }
)

# Sensitive key fragments to redact
_SENSITIVE_PATTERNS = (
    "password",
    "passwd",
    "token",
    "secret",
    "api_key",
    "authorization",
)


def _serialize_value(value: Any) -> Any:
    """Safely serialize value to JSON-compatible type."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if hasattr(value, "isoformat"):
        return value.isoformat()
    try:
        return str(value)
    except Exception:
        return f"<unserializable: {type(value).__name__}>"


def _redact_sensitive(data: Any) -> Any:
    """Redact sensitive values from data.

    Args:
        data: Data to redact (can be dict, list, or primitive)

    Returns:
        Redacted data with sensitive values replaced with [REDACTED]
    """
    if isinstance(data, dict):
        redacted = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(pattern in key_lower for pattern in _SENSITIVE_PATTERNS):
                redacted[key] = "[REDACTED]"
            elif isinstance(value, (dict, list)):
                redacted[key] = _redact_sensitive(value)
            else:
                redacted[key] = value
        return redacted
    elif isinstance(data, list):
        return [_redact_sensitive(item) for item in data]
    else:
        return data


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the fields passed through ``extra=`` on a log call."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class StructuredJSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Formats log records as JSON with consistent fields:
    - timestamp (ISO 8601 UTC)
    - level
    - service_name (from context)
    - logger_name
    - message
    - correlation_id / operation_name (from context)
    - every ``extra`` field, with sensitive keys redacted
    - exception and stack_trace (if applicable)
    """

    def __init__(self, service_name: str = "clientconfig"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "extra_context", None) or {}

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service_name": context.get("service_name") or self.service_name,
            "logger_name": record.name,
            "message": record.getMessage(),
            "correlation_id": context.get("correlation_id"),
            "operation_name": context.get("operation_name"),
            "source_file": record.pathname,
            "source_line": record.lineno,
            "source_function": record.funcName,
        }

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "module": exc_type.__module__ if exc_type else None,
            }
            if exc_tb:
                log_entry["stack_trace"] = traceback.format_exception(exc_type, exc_value, exc_tb)

        extras = {k: v for k, v in context.items() if k not in log_entry}
        extras.update(record_extras(record))
        log_entry.update(_redact_sensitive(extras))

        try:
            return json.dumps(_serialize_value(log_entry), default=str)
        except (TypeError, ValueError) as e:
            return json.dumps({
                "error": "Failed to serialize log entry",
                "original_message": record.getMessage(),
                "serialization_error": str(e),
            })


class KeyValueFormatter(logging.Formatter):
    """Human-readable formatter appending ``extra`` fields as key=value pairs."""

    def __init__(self, fmt: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"):
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _redact_sensitive(record_extras(record))
        if extras:
            line += " " + " ".join(f"{key}={value}" for key, value in extras.items())
        return line
