"""Builds typed ClientConfig objects from resolved XML documents."""
import logging
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from clientconfig.client.models import ClientConfig
from clientconfig.config.document import ConfigElement, ResolvedConfig
from clientconfig.config.loader import ConfigLoader
from clientconfig.config.locator import ResourceLocator
from clientconfig.config.properties import PropertyTable, as_property_table
from clientconfig.config.settings import ResolverSettings
from clientconfig.exceptions.config import ConfigValidationError


logger = logging.getLogger(__name__)

BuilderSource = Union[bytes, str, Path, BinaryIO]

# <network> child element -> NetworkConfig field
_NETWORK_SCALARS = {
    "smart-routing": "smart_routing",
    "redo-operation": "redo_operation",
    "connection-timeout": "connection_timeout",
    "connection-attempt-period": "connection_attempt_period",
    "connection-attempt-limit": "connection_attempt_limit",
}


class ClientConfigMapper:
    """Maps the sections of a ResolvedConfig onto a ClientConfig.

    Sections are applied in document order: scalar settings from a later
    section override earlier ones, while addresses and listeners accumulate
    and property maps merge.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[ConfigElement, Dict[str, Any]], None]] = {
            "group": self._map_group,
            "properties": self._map_properties,
            "network": self._map_network,
            "executor-pool-size": self._map_executor_pool_size,
            "listeners": self._map_listeners,
            "load-balancer": self._map_load_balancer,
        }

    def map(self, resolved: ResolvedConfig) -> ClientConfig:
        """Build a validated ClientConfig.

        Raises:
            ConfigValidationError: If the resolved values fail validation
        """
        data: Dict[str, Any] = {
            "group": {},
            "network": {"addresses": [], "socket_interceptor": {}},
            "properties": {},
            "listeners": [],
        }

        for section in resolved.root.children:
            handler = self._handlers.get(section.name)
            if handler is None:
                logger.warning(
                    "Ignoring unknown configuration element",
                    extra={"element": section.name, "resource": resolved.source},
                )
                continue
            handler(section, data)

        try:
            config = ClientConfig.model_validate(data)
        except ValidationError as e:
            field_errors = {
                ".".join(str(part) for part in err["loc"]) or "root": err["msg"]
                for err in e.errors()
            }
            logger.error(
                "Client config validation failed",
                extra={"resource": resolved.source, "field_errors": field_errors},
            )
            raise ConfigValidationError(
                message="Client configuration validation failed",
                resource=resolved.source,
                field_errors=field_errors,
                original_error=e,
            ) from e

        logger.info(
            "Client config built",
            extra={
                "resource": resolved.source,
                "addresses": len(config.network.addresses),
                "imports": len(resolved.resources),
            },
        )
        return config

    def _property_map(self, element: ConfigElement) -> Dict[str, str]:
        values = {}
        for prop in element.find_all("property"):
            key = prop.attributes.get("name")
            if not key:
                raise ConfigValidationError(
                    message="<property> requires a 'name' attribute",
                    field_errors={"property": "missing name"},
                )
            values[key] = prop.text or ""
        return values

    def _map_group(self, section: ConfigElement, data: Dict[str, Any]) -> None:
        for child in section.children:
            if child.name in ("name", "password"):
                data["group"][child.name] = child.text or ""
            else:
                logger.warning("Ignoring unknown group element", extra={"element": child.name})

    def _map_properties(self, section: ConfigElement, data: Dict[str, Any]) -> None:
        data["properties"].update(self._property_map(section))

    def _map_network(self, section: ConfigElement, data: Dict[str, Any]) -> None:
        network = data["network"]
        for child in section.children:
            if child.name == "cluster-members":
                network["addresses"].extend(
                    address.text or "" for address in child.find_all("address")
                )
            elif child.name in _NETWORK_SCALARS:
                network[_NETWORK_SCALARS[child.name]] = child.text
            elif child.name == "socket-interceptor":
                interceptor = network["socket_interceptor"]
                if "enabled" in child.attributes:
                    interceptor["enabled"] = child.attributes["enabled"]
                class_name = child.child_text("class-name")
                if class_name is not None:
                    interceptor["class_name"] = class_name
                properties = child.find("properties")
                if properties is not None:
                    interceptor.setdefault("properties", {}).update(self._property_map(properties))
            else:
                logger.warning("Ignoring unknown network element", extra={"element": child.name})

    def _map_executor_pool_size(self, section: ConfigElement, data: Dict[str, Any]) -> None:
        data["executor_pool_size"] = section.text

    def _map_listeners(self, section: ConfigElement, data: Dict[str, Any]) -> None:
        data["listeners"].extend(listener.text or "" for listener in section.find_all("listener"))

    def _map_load_balancer(self, section: ConfigElement, data: Dict[str, Any]) -> None:
        data["load_balancer"] = section.attributes.get("type")


class XmlClientConfigBuilder:
    """Builds a ClientConfig from an XML document and its imports.

    The source may be raw bytes, a binary stream, a ``Path``, or a reference
    string (filesystem path, ``file://`` or other URL, ``classpath:<name>``).
    Without a source the default lookup order is used.

    Example:
        builder = XmlClientConfigBuilder(open("client.xml", "rb"))
        builder.set_properties({"executor.pool.size": "40"})
        config = builder.build()
    """

    def __init__(
        self,
        source: Optional[BuilderSource] = None,
        settings: Optional[ResolverSettings] = None,
        locator: Optional[ResourceLocator] = None,
    ):
        self.source = source
        self.loader = ConfigLoader(settings=settings, locator=locator)
        self.mapper = ClientConfigMapper()
        self._properties: Optional[PropertyTable] = None

    @property
    def properties(self) -> PropertyTable:
        if self._properties is None:
            return self.loader.default_properties()
        return self._properties

    def set_properties(self, properties: Optional[Mapping[str, str]]) -> "XmlClientConfigBuilder":
        """Replace the property table (None restores the default table)."""
        self._properties = None if properties is None else as_property_table(properties)
        return self

    def resolve(self) -> ResolvedConfig:
        """Run one resolution pass over the source document."""
        if self.source is None:
            return self.loader.load_default(self._properties)
        if isinstance(self.source, str):
            return self.loader.load_reference(self.source, self._properties)
        return self.loader.load(self.source, self._properties)

    def build(self) -> ClientConfig:
        """Resolve the document and map it onto a ClientConfig."""
        return self.mapper.map(self.resolve())
