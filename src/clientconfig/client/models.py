"""Typed client configuration models."""
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GroupConfig(BaseModel):
    """Cluster group credentials."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="dev", description="Cluster group name")
    password: str = Field(default="dev-pass", description="Cluster group password")


class SocketInterceptorConfig(BaseModel):
    """Socket interceptor plugged into client connections."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = Field(default=False, description="Whether the interceptor is active")
    class_name: str = Field(default="", description="Fully qualified interceptor class")
    properties: Dict[str, str] = Field(default_factory=dict, description="Interceptor properties")


class NetworkConfig(BaseModel):
    """Client network settings.

    Attributes:
        addresses: Cluster member addresses to connect to
        smart_routing: Route operations directly to the owning member
        redo_operation: Retry operations that failed on connection loss
        connection_timeout: Connection timeout in milliseconds
        connection_attempt_period: Delay between connection attempts in milliseconds
        connection_attempt_limit: Maximum connection attempts
        socket_interceptor: Optional socket interceptor
    """

    model_config = ConfigDict(extra="forbid")

    addresses: List[str] = Field(default_factory=list)
    smart_routing: bool = True
    redo_operation: bool = False
    connection_timeout: int = 5000
    connection_attempt_period: int = 3000
    connection_attempt_limit: int = 2
    socket_interceptor: SocketInterceptorConfig = Field(default_factory=SocketInterceptorConfig)

    @field_validator("connection_timeout", "connection_attempt_period", "connection_attempt_limit")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("addresses")
    @classmethod
    def validate_addresses(cls, v: List[str]) -> List[str]:
        if any(not address.strip() for address in v):
            raise ValueError("addresses must not be empty")
        return [address.strip() for address in v]


class ClientConfig(BaseModel):
    """Complete client configuration built from a resolved document."""

    model_config = ConfigDict(extra="forbid")

    group: GroupConfig = Field(default_factory=GroupConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    properties: Dict[str, str] = Field(default_factory=dict)
    executor_pool_size: int = Field(
        default=-1,
        description="Size of the client executor pool, -1 for the default size"
    )
    listeners: List[str] = Field(default_factory=list, description="Listener class names")
    load_balancer: Literal["random", "round-robin"] = "round-robin"

    @field_validator("executor_pool_size")
    @classmethod
    def validate_executor_pool_size(cls, v: int) -> int:
        if v != -1 and v <= 0:
            raise ValueError("executor_pool_size must be > 0 (or -1 for default)")
        return v
