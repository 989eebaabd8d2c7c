"""Configuration-related exceptions."""
from typing import Any, Dict, List, Optional

from clientconfig.exceptions.base import ClientConfigError


class ConfigError(ClientConfigError):
    """Base exception for configuration errors.

    Args:
        message: Human-readable error message
        resource: Identifier of the document the error relates to
        details: Additional error context
        error_code: Machine-readable error code
        original: Wrapped exception, if any
    """

    default_code = "CONFIG_ERROR"

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        original: Optional[Exception] = None,
    ):
        details = dict(details or {})
        if resource is not None:
            details.setdefault("resource", resource)
        super().__init__(
            message,
            error_code=error_code or self.default_code,
            details=details,
            original=original,
        )
        self.resource = resource

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.resource:
            parts.append(f"Resource: {self.resource}")
        return " | ".join(parts)


class ConfigParseError(ConfigError):
    """Failed to parse a configuration document.

    The parser's own message is kept as-is; line and column come from the
    parser when it reports them.
    """

    default_code = "CONFIG_PARSE_ERROR"

    def __init__(
        self,
        message: str = "Failed to parse config document",
        resource: Optional[str] = None,
        line_number: Optional[int] = None,
        column_number: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if line_number is not None:
            details["line"] = line_number
        if column_number is not None:
            details["column"] = column_number
        super().__init__(message, resource, details, original=original_error)
        self.line_number = line_number
        self.column_number = column_number
        self.original_error = original_error


class ConfigValidationError(ConfigError):
    """Resolved configuration failed typed validation."""

    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(
        self,
        message: str = "Configuration validation failed",
        resource: Optional[str] = None,
        field_errors: Optional[dict] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if field_errors is not None:
            details["field_errors"] = field_errors
        super().__init__(message, resource, details, original=original_error)
        self.field_errors = field_errors or {}
        self.original_error = original_error


class UnresolvedPlaceholderError(ConfigError):
    """Placeholders left without a value while substituting in strict mode."""

    default_code = "UNRESOLVED_PLACEHOLDER"

    def __init__(
        self,
        message: str = "Unresolved placeholders",
        resource: Optional[str] = None,
        names: Optional[List[str]] = None,
    ):
        details = {}
        if names is not None:
            details["names"] = names
            details["suggestions"] = [
                f"Provide a value for '{name}' in the property table" for name in names
            ]
        super().__init__(message, resource, details)
        self.names = names or []


# ==================== Import resolution ====================

class ConfigResolutionError(ConfigError):
    """Base exception for import resolution failures.

    Args:
        message: Human-readable error message
        reference: The ``resource`` reference as written in the document
        resource: Identifier of the document containing the failure
        chain: Import chain (root first) leading to the failure
    """

    default_code = "CONFIG_RESOLUTION_ERROR"

    def __init__(
        self,
        message: str,
        reference: Optional[str] = None,
        resource: Optional[str] = None,
        chain: Optional[List[str]] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if reference is not None:
            details["reference"] = reference
        if chain is not None:
            details["chain"] = list(chain)
        super().__init__(message, resource, details, original=original)
        self.reference = reference
        self.chain = list(chain or [])

    def __str__(self) -> str:
        text = super().__str__()
        if self.reference is not None:
            text += f" | Reference: {self.reference!r}"
        return text


class DuplicateRootElementError(ConfigResolutionError):
    """Root marker element appears more than once in a document."""

    default_code = "DUPLICATE_ROOT_ELEMENT"


class InvalidRootElementError(ConfigResolutionError):
    """Outermost element of a document is not the root marker."""

    default_code = "INVALID_ROOT_ELEMENT"


class ImportNotAllowedError(ConfigResolutionError):
    """Import directive found outside the top level of the root element."""

    default_code = "IMPORT_NOT_ALLOWED"


class EmptyResourceReferenceError(ConfigResolutionError):
    """Import directive whose resource reference is empty."""

    default_code = "EMPTY_RESOURCE_REFERENCE"


class ResourceUnavailableError(ConfigResolutionError):
    """Referenced resource is missing, unreadable, or empty."""

    default_code = "RESOURCE_UNAVAILABLE"


class CyclicImportError(ConfigResolutionError):
    """Resource imported again within the same resolution pass."""

    default_code = "CYCLIC_IMPORT"
