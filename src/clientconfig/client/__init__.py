"""Typed client configuration."""

from clientconfig.client.models import (  # noqa: F401
    ClientConfig,
    GroupConfig,
    NetworkConfig,
    SocketInterceptorConfig,
)
from clientconfig.client.builder import ClientConfigMapper, XmlClientConfigBuilder  # noqa: F401

__all__ = [
    "ClientConfig",
    "GroupConfig",
    "NetworkConfig",
    "SocketInterceptorConfig",
    "ClientConfigMapper",
    "XmlClientConfigBuilder",
]
