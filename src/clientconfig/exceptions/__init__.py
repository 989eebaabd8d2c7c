"""Custom exceptions for the client configuration package."""

from clientconfig.exceptions.base import ClientConfigError

from clientconfig.exceptions.config import (
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    UnresolvedPlaceholderError,
    ConfigResolutionError,
    DuplicateRootElementError,
    InvalidRootElementError,
    ImportNotAllowedError,
    EmptyResourceReferenceError,
    ResourceUnavailableError,
    CyclicImportError,
)

__all__ = [
    # Base exceptions
    "ClientConfigError",
    # Configuration exceptions
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    "UnresolvedPlaceholderError",
    # Import resolution exceptions
    "ConfigResolutionError",
    "DuplicateRootElementError",
    "InvalidRootElementError",
    "ImportNotAllowedError",
    "EmptyResourceReferenceError",
    "ResourceUnavailableError",
    "CyclicImportError",
]
