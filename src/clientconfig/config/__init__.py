"""Configuration loading and import resolution."""

from clientconfig.config.settings import ResolverSettings  # noqa: F401
from clientconfig.config.properties import PropertyTable, flatten  # noqa: F401
from clientconfig.config.substitutor import VariableSubstitutor, cdata_escape, xml_escape  # noqa: F401
from clientconfig.config.locator import ResourceLocator, find_root_config  # noqa: F401
from clientconfig.config.document import (  # noqa: F401
    ConfigElement,
    ResolvedConfig,
    parse_document,
)
from clientconfig.config.resolver import ImportResolver  # noqa: F401
from clientconfig.config.loader import ConfigLoader, load_config  # noqa: F401

__all__ = [
    # Settings
    "ResolverSettings",
    # Property tables
    "PropertyTable",
    "flatten",
    # Placeholder substitution
    "VariableSubstitutor",
    "cdata_escape",
    "xml_escape",
    # Resource lookup
    "ResourceLocator",
    "find_root_config",
    # Document model
    "ConfigElement",
    "ResolvedConfig",
    "parse_document",
    # Import resolution
    "ImportResolver",
    "ConfigLoader",
    "load_config",
]
