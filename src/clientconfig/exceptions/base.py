"""Base exception classes for the client configuration package."""
from typing import Optional, Dict, Any


class ClientConfigError(Exception):
    """Root of the package's exception hierarchy.

    Every error carries a machine-readable code and a ``details`` dict, so
    callers (and the CLI) can report failures without parsing messages.

    Args:
        message: Human-readable error message
        error_code: Machine-readable error code (default: the class's ``default_code``)
        details: Additional context as dictionary
        original: Original exception if wrapping another exception
    """

    default_code = "CLIENTCONFIG_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original: Optional[Exception] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = dict(details or {})
        self.original = original

        full_message = f"[{self.error_code}] {message}"
        if original:
            full_message += f" (caused by: {type(original).__name__}: {original})"

        super().__init__(full_message)

    def with_details(self, **details: Any) -> "ClientConfigError":
        """Attach more context and return the error, ready to raise."""
        self.details.update(details)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/CLI output."""
        data = {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "exception_type": self.__class__.__name__,
        }
        if self.original is not None:
            data["cause"] = f"{type(self.original).__name__}: {self.original}"
        return data
