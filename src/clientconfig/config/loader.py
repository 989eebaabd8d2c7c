"""Config loader orchestrator - reads the root document and resolves imports."""
import logging
from pathlib import Path
from typing import BinaryIO, Mapping, Optional, Union

from clientconfig.config.document import ResolvedConfig
from clientconfig.config.locator import ResourceLocator, find_root_config
from clientconfig.config.properties import PropertyTable, as_property_table
from clientconfig.config.resolver import ImportResolver
from clientconfig.config.settings import ResolverSettings
from clientconfig.config.substitutor import VariableSubstitutor, cdata_escape, xml_escape


logger = logging.getLogger(__name__)

RootSource = Union[bytes, str, Path, BinaryIO]


class ConfigLoader:
    """Orchestrates one resolution pass per call.

    Pipeline:
    1. Read the root document (bytes, text, stream, path, or reference)
    2. Substitute placeholders and parse it
    3. Validate root marker and import placement
    4. Expand imports recursively
    5. Return the ResolvedConfig

    Example:
        loader = ConfigLoader()
        resolved = loader.load(Path("client.xml"), {"config.location": "/etc/net.xml"})
    """

    def __init__(
        self,
        settings: Optional[ResolverSettings] = None,
        locator: Optional[ResourceLocator] = None,
    ):
        self.settings = settings or ResolverSettings()
        self.locator = locator or ResourceLocator.from_settings(self.settings)
        self.resolver = ImportResolver(
            locator=self.locator,
            substitutor=VariableSubstitutor(
                strict=self.settings.strict_placeholders,
                escape=xml_escape,
                cdata_escape=cdata_escape,
            ),
            root_element=self.settings.root_element,
            import_element=self.settings.import_element,
            resource_attribute=self.settings.resource_attribute,
            encoding=self.settings.encoding,
        )

        logger.debug(
            "ConfigLoader initialized",
            extra={
                "root_element": self.settings.root_element,
                "strict_placeholders": self.settings.strict_placeholders,
                "include_environment": self.settings.include_environment,
            },
        )

    def default_properties(self) -> PropertyTable:
        """Property table used when the caller supplies none."""
        if self.settings.include_environment:
            return PropertyTable.from_environment()
        return PropertyTable()

    def _properties(self, properties: Optional[Mapping[str, str]]) -> PropertyTable:
        if properties is None:
            return self.default_properties()
        return as_property_table(properties)

    def load(
        self,
        source: RootSource,
        properties: Optional[Mapping[str, str]] = None,
    ) -> ResolvedConfig:
        """Resolve a root document given as bytes, XML text, a stream, or a path.

        A ``Path`` is read through the locator, so the file itself counts as
        visited and importing it again is a cycle.
        """
        if isinstance(source, Path):
            return self.load_reference(str(source), properties)

        if isinstance(source, (bytes, str)):
            content = source
        else:
            content = source.read()

        table = self._properties(properties)
        document = self.resolver.parse(content, table)
        return self.resolver.resolve(document, table)

    def load_reference(
        self,
        reference: str,
        properties: Optional[Mapping[str, str]] = None,
    ) -> ResolvedConfig:
        """Resolve a root document located by reference (path, URL, or classpath)."""
        table = self._properties(properties)
        identifier = self.locator.identify(reference)
        content = self.locator.locate(reference)

        logger.info(
            "Loading root config",
            extra={"reference": reference, "identifier": identifier},
        )
        document = self.resolver.parse(content, table, resource=identifier)
        return self.resolver.resolve(document, table, source=identifier)

    def load_default(self, properties: Optional[Mapping[str, str]] = None) -> ResolvedConfig:
        """Resolve the root document found by the default lookup order."""
        return self.load_reference(find_root_config(self.settings, self.locator), properties)


def load_config(
    source: Optional[RootSource] = None,
    properties: Optional[Mapping[str, str]] = None,
    settings: Optional[ResolverSettings] = None,
) -> ResolvedConfig:
    """Convenience function to resolve a configuration document.

    Args:
        source: Root document; when None the default lookup order is used
        properties: Property table (default: environment, per settings)
        settings: Resolver settings

    Returns:
        ResolvedConfig

    Example:
        resolved = load_config(b"<hazelcast-client>...</hazelcast-client>", {"k": "v"})
    """
    loader = ConfigLoader(settings=settings)
    if source is None:
        return loader.load_default(properties)
    return loader.load(source, properties)
