"""Recursive import resolution for configuration documents."""
import codecs
import logging
from typing import List, Mapping, Optional, Set, Union

from clientconfig.config.document import ConfigElement, ResolvedConfig, parse_document
from clientconfig.config.locator import ResourceLocator
from clientconfig.config.settings import DEFAULT_ROOT_ELEMENT
from clientconfig.config.substitutor import VariableSubstitutor, cdata_escape, xml_escape
from clientconfig.exceptions.config import (
    ConfigParseError,
    CyclicImportError,
    DuplicateRootElementError,
    EmptyResourceReferenceError,
    ImportNotAllowedError,
    InvalidRootElementError,
)
from clientconfig.utils.logging import log_context, new_correlation_id


logger = logging.getLogger(__name__)

ROOT_LABEL = "<root>"


class ImportResolver:
    """Expands import directives into a single configuration tree.

    Per document:
    1. Decode the raw bytes
    2. Substitute placeholders in the raw text
    3. Parse into a ConfigElement tree
    4. Validate root marker and import placement
    5. Replace each import directive, depth-first, with the top-level
       sections of the imported document (steps 1-5 applied to it)

    A resolution pass tracks every resource it has expanded. Expanding a
    resource a second time fails, whether it closes a cycle or is reached
    again from another branch.

    Example:
        resolver = ImportResolver(ResourceLocator())
        document = resolver.parse(raw_bytes, properties)
        resolved = resolver.resolve(document, properties)
    """

    def __init__(
        self,
        locator: ResourceLocator,
        substitutor: Optional[VariableSubstitutor] = None,
        root_element: str = DEFAULT_ROOT_ELEMENT,
        import_element: str = "import",
        resource_attribute: str = "resource",
        encoding: str = "utf-8",
    ):
        self.locator = locator
        self.substitutor = substitutor or VariableSubstitutor(escape=xml_escape, cdata_escape=cdata_escape)
        self.root_element = root_element
        self.import_element = import_element
        self.resource_attribute = resource_attribute
        self.encoding = encoding

    # ==================== Single document ====================

    def decode(self, content: Union[bytes, str], resource: Optional[str] = None) -> str:
        if isinstance(content, str):
            return content
        if content.startswith(codecs.BOM_UTF8):
            content = content[len(codecs.BOM_UTF8):]
        try:
            return content.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise ConfigParseError(
                message=f"Document is not valid {self.encoding}: {e}",
                resource=resource,
                original_error=e,
            ) from e

    def parse(
        self,
        content: Union[bytes, str],
        properties: Mapping[str, str],
        resource: Optional[str] = None,
    ) -> ConfigElement:
        """Decode, substitute, parse, and validate one document."""
        text = self.decode(content, resource)
        text = self.substitutor.substitute(text, properties, resource=resource)
        document = parse_document(text, resource=resource, root_element=self.root_element)
        self.validate(document, resource=resource)
        return document

    def validate(self, document: ConfigElement, resource: Optional[str] = None) -> None:
        """Check the root marker and import placement rules.

        Raises:
            InvalidRootElementError: Outermost element is not the root marker
            DuplicateRootElementError: Root marker nested inside the document
            ImportNotAllowedError: Import directive below the top level
        """
        if document.name != self.root_element:
            logger.error(
                "Unexpected root element",
                extra={"resource": resource, "found": document.name, "expected": self.root_element},
            )
            raise InvalidRootElementError(
                f"Root element must be <{self.root_element}>, found <{document.name}>",
                resource=resource,
            )

        for child in document.children:
            for element in child.iter():
                if element.name == self.root_element:
                    logger.error(
                        "Root element appears more than once",
                        extra={"resource": resource, "element": self.root_element},
                    )
                    raise DuplicateRootElementError(
                        f"<{self.root_element}> element can appear only once",
                        resource=resource,
                    )
                if element.name == self.import_element and element is not child:
                    logger.error(
                        "Import directive below top level",
                        extra={"resource": resource, "reference": element.attributes.get(self.resource_attribute)},
                    )
                    raise ImportNotAllowedError(
                        f"<{self.import_element}> is only allowed directly under <{self.root_element}>",
                        reference=element.attributes.get(self.resource_attribute),
                        resource=resource,
                    )

    # ==================== Resolution pass ====================

    def resolve(
        self,
        document: ConfigElement,
        properties: Mapping[str, str],
        source: Optional[str] = None,
    ) -> ResolvedConfig:
        """Expand every import of an already parsed root document.

        Args:
            document: Parsed, validated root document
            properties: Property table shared by every imported document
            source: Identifier of the root document, if it was located by reference

        Returns:
            Import-free ResolvedConfig

        Raises:
            ConfigResolutionError: On the first failing import
            ConfigParseError: If an imported document is not well formed
        """
        visited: Set[str] = set()
        expanded: List[str] = []
        if source is not None:
            visited.add(source)

        with log_context(
            correlation_id=new_correlation_id(),
            operation_name="resolve_imports",
            root=source or ROOT_LABEL,
        ):
            logger.debug("Resolution pass started", extra={"source": source})
            root = self._expand(document, properties, visited, expanded, [source or ROOT_LABEL])
            logger.info(
                "Resolution pass finished",
                extra={"source": source, "imports": len(expanded), "resources": expanded},
            )

        return ResolvedConfig(root=root, resources=tuple(expanded), source=source)

    def _expand(
        self,
        document: ConfigElement,
        properties: Mapping[str, str],
        visited: Set[str],
        expanded: List[str],
        chain: List[str],
    ) -> ConfigElement:
        if not any(child.name == self.import_element for child in document.children):
            return document

        children: List[ConfigElement] = []
        for child in document.children:
            if child.name == self.import_element:
                children.extend(self._import(child, properties, visited, expanded, chain))
            else:
                children.append(child)
        return document.with_children(children)

    def _import(
        self,
        directive: ConfigElement,
        properties: Mapping[str, str],
        visited: Set[str],
        expanded: List[str],
        chain: List[str],
    ):
        reference = (directive.attributes.get(self.resource_attribute) or "").strip()
        if not reference:
            logger.error(
                "Import without resource reference",
                extra={"resource": chain[-1], "chain": chain},
            )
            raise EmptyResourceReferenceError(
                f"<{self.import_element}> requires a non-empty '{self.resource_attribute}' attribute",
                reference=reference,
                resource=chain[-1],
                chain=chain,
            )

        identifier = self.locator.identify(reference)
        if identifier in visited:
            cyclic = identifier in chain
            logger.error(
                "Cyclic import" if cyclic else "Resource imported twice",
                extra={"reference": reference, "identifier": identifier, "chain": chain},
            )
            raise CyclicImportError(
                (
                    f"Cyclic import of {identifier}: {' -> '.join(chain + [identifier])}"
                    if cyclic
                    else f"Resource {identifier} was already imported in this pass"
                ),
                reference=reference,
                resource=chain[-1],
                chain=chain + [identifier],
            )
        visited.add(identifier)

        logger.debug(
            "Importing resource",
            extra={"reference": reference, "identifier": identifier, "depth": len(chain)},
        )
        content = self.locator.locate(reference)
        imported = self.parse(content, properties, resource=identifier)
        expanded.append(identifier)

        resolved = self._expand(imported, properties, visited, expanded, chain + [identifier])
        return resolved.children
