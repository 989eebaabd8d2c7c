"""Resolver settings loaded from the environment."""
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ROOT_ELEMENT = "hazelcast-client"
DEFAULT_CONFIG_NAME = "hazelcast-client.xml"
DEFAULT_FALLBACK_CONFIG_NAME = "hazelcast-client-default.xml"


class ResolverSettings(BaseSettings):
    """Settings for locating, substituting, and resolving config documents.

    Settings are loaded from ``CLIENTCONFIG_*`` environment variables with
    sensible defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLIENTCONFIG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Document structure
    root_element: str = Field(
        default=DEFAULT_ROOT_ELEMENT,
        description="Name of the single outermost element of every document"
    )
    import_element: str = Field(
        default="import",
        description="Name of the import directive element"
    )
    resource_attribute: str = Field(
        default="resource",
        description="Attribute of the import directive holding the reference"
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of fetched documents"
    )

    # Resource lookup
    config_location: Optional[str] = Field(
        default=None,
        description="Reference of the root document when none is given explicitly"
    )
    base_dir: Optional[Path] = Field(
        default=None,
        description="Base directory for relative paths (default: working directory)"
    )
    classpath: List[str] = Field(
        default=["clientconfig.resources"],
        description="Directories or package names searched for classpath: references"
    )
    http_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for http(s) resource fetches"
    )

    # Substitution
    strict_placeholders: bool = Field(
        default=False,
        description="Fail on placeholders without a value instead of keeping them"
    )
    include_environment: bool = Field(
        default=True,
        description="Use process environment as the property table when none is given"
    )

    @field_validator("root_element", "import_element", "resource_attribute")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Element and attribute names must be non-empty."""
        if not v or not v.strip():
            raise ValueError("element and attribute names must not be empty")
        return v.strip()

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        """Timeout must be positive."""
        if v <= 0:
            raise ValueError("http_timeout must be > 0")
        return v
