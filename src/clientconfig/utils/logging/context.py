"""Log context management using contextvars."""
import contextvars
import logging
import uuid
from typing import Any, Dict, Optional


_correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_service_name_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "service_name", default=None
)
_operation_name_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "operation_name", default=None
)
_extra_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "extra_context", default={}
)
_logger = logging.getLogger(__name__)


def get_correlation_id() -> Optional[str]:
    """Get current correlation ID from context."""
    return _correlation_id_var.get(None)


def get_service_name() -> Optional[str]:
    """Get current service name from context."""
    return _service_name_var.get(None)


def get_operation_name() -> Optional[str]:
    """Get current operation name from context."""
    return _operation_name_var.get(None)


def get_context() -> Dict[str, Any]:
    """Get all context values as a dictionary."""
    context = dict(_extra_context_var.get())
    context.update(
        {
            "correlation_id": get_correlation_id(),
            "service_name": get_service_name(),
            "operation_name": get_operation_name(),
        }
    )
    return context


def set_service_name(service_name: Optional[str]) -> None:
    """Set the service name reported on every record."""
    _service_name_var.set(service_name)


def new_correlation_id() -> str:
    """Generate a fresh correlation ID."""
    return uuid.uuid4().hex


class log_context:
    """Context manager for adding metadata to logs.

    Usable with both ``with`` and ``async with``. Values are restored on
    exit, so contexts nest.

    Example:
        with log_context(operation_name="resolve_imports", root="client.xml"):
            logger.info("Resolving imports")
    """

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        service_name: Optional[str] = None,
        operation_name: Optional[str] = None,
        **extra_context: Any,
    ):
        self.correlation_id = correlation_id
        self.service_name = service_name
        self.operation_name = operation_name
        self.extra_context = extra_context
        self._tokens: list = []

    def __enter__(self) -> "log_context":
        if self.correlation_id is not None:
            self._tokens.append((_correlation_id_var, _correlation_id_var.set(self.correlation_id)))
        if self.service_name is not None:
            self._tokens.append((_service_name_var, _service_name_var.set(self.service_name)))
        if self.operation_name is not None:
            self._tokens.append((_operation_name_var, _operation_name_var.set(self.operation_name)))
        if self.extra_context:
            merged = dict(_extra_context_var.get())
            merged.update(self.extra_context)
            self._tokens.append((_extra_context_var, _extra_context_var.set(merged)))

        _logger.debug(
            "Context entered",
            extra={
                "operation_name": self.operation_name,
                "extra_keys": list(self.extra_context.keys()),
            },
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # Reset in reverse order so nested sets unwind cleanly
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []

        _logger.debug(
            "Context exited",
            extra={
                "operation_name": self.operation_name,
                "exc_type": exc_type.__name__ if exc_type else None,
            },
        )

    async def __aenter__(self) -> "log_context":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
