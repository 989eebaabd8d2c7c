"""Client configuration loading with recursive XML import resolution."""

from clientconfig.client import ClientConfig, XmlClientConfigBuilder  # noqa: F401
from clientconfig.config import (  # noqa: F401
    ConfigLoader,
    PropertyTable,
    ResolvedConfig,
    ResolverSettings,
    load_config,
)

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "XmlClientConfigBuilder",
    "ConfigLoader",
    "PropertyTable",
    "ResolvedConfig",
    "ResolverSettings",
    "load_config",
]
