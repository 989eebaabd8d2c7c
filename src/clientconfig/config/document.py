"""Generic, immutable configuration document tree."""
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple
from xml.parsers import expat

from clientconfig.exceptions.config import ConfigParseError, DuplicateRootElementError


logger = logging.getLogger(__name__)

_JUNK_AFTER_ROOT = expat.errors.codes[expat.errors.XML_ERROR_JUNK_AFTER_DOC_ELEMENT]

# Line breaks as the parser counts them
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_START_TAG = re.compile(r"<([^\s/>!?]+)")


def _local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


@dataclass(frozen=True)
class ConfigElement:
    """One element of a configuration document.

    Attributes:
        name: Element name (namespace stripped)
        attributes: Read-only attribute mapping
        children: Child elements in document order
        text: Stripped text content, None when empty
    """

    name: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    children: Tuple["ConfigElement", ...] = ()
    text: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "children", tuple(self.children))

    @classmethod
    def from_etree(cls, element: ET.Element) -> "ConfigElement":
        text = (element.text or "").strip() or None
        return cls(
            name=_local_name(element.tag),
            attributes={_local_name(k): v for k, v in element.attrib.items()},
            children=tuple(cls.from_etree(child) for child in element),
            text=text,
        )

    def to_etree(self) -> ET.Element:
        element = ET.Element(self.name, dict(self.attributes))
        element.text = self.text
        for child in self.children:
            element.append(child.to_etree())
        return element

    def to_xml(self, indent: Optional[str] = "    ") -> str:
        """Serialize the element (and its subtree) to XML text."""
        tree = self.to_etree()
        if indent:
            ET.indent(tree, space=indent)
        return ET.tostring(tree, encoding="unicode")

    def iter(self, name: Optional[str] = None) -> Iterator["ConfigElement"]:
        """Depth-first, pre-order walk over this element and its descendants."""
        if name is None or self.name == name:
            yield self
        for child in self.children:
            yield from child.iter(name)

    def find(self, name: str) -> Optional["ConfigElement"]:
        """First direct child with the given name."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_all(self, name: str) -> List["ConfigElement"]:
        """All direct children with the given name, in document order."""
        return [child for child in self.children if child.name == name]

    def child_text(self, name: str, default: Optional[str] = None) -> Optional[str]:
        child = self.find(name)
        if child is None or child.text is None:
            return default
        return child.text

    def with_children(self, children: Iterable["ConfigElement"]) -> "ConfigElement":
        """Copy of this element with its children replaced."""
        return replace(self, children=tuple(children))


def _element_at(text: str, line: int, column: int) -> Optional[str]:
    """Local name of the element whose start tag begins at a parser position."""
    lines = _LINE_BREAK.split(text)
    if not 0 < line <= len(lines):
        return None
    match = _START_TAG.match(lines[line - 1], column)
    return match.group(1).rsplit(":", 1)[-1] if match else None


def _first_element(text: str) -> Optional[str]:
    match = _START_TAG.search(text)
    return match.group(1).rsplit(":", 1)[-1] if match else None


def parse_document(
    text: str,
    resource: Optional[str] = None,
    root_element: Optional[str] = None,
) -> ConfigElement:
    """Parse XML text into a ConfigElement tree.

    Args:
        text: XML text
        resource: Identifier of the document, for error reporting
        root_element: Root marker; a second top-level marker is reported as
            a duplicate root rather than a parse error

    Raises:
        DuplicateRootElementError: Root marker repeated at the top level
        ConfigParseError: The parser's error, with line and column
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        line, column = getattr(e, "position", (None, None))
        if (
            root_element is not None
            and getattr(e, "code", None) == _JUNK_AFTER_ROOT
            and line is not None
            and _element_at(text, line, column) == root_element
            and _first_element(text) == root_element
        ):
            logger.error(
                "Root element appears more than once",
                extra={"resource": resource, "element": root_element, "line": line},
            )
            raise DuplicateRootElementError(
                f"<{root_element}> element can appear only once",
                resource=resource,
            ) from e

        logger.error(
            "Document parse error",
            extra={"resource": resource, "error": str(e), "line": line, "column": column},
        )
        raise ConfigParseError(
            message=str(e),
            resource=resource,
            line_number=line,
            column_number=column,
            original_error=e,
        ) from e

    return ConfigElement.from_etree(root)


@dataclass(frozen=True)
class ResolvedConfig:
    """Fully substituted, import-free configuration tree.

    Attributes:
        root: Root element
        resources: Identifiers of imported resources, in expansion order
        source: Identifier of the root document, when it had one
    """

    root: ConfigElement
    resources: Tuple[str, ...] = ()
    source: Optional[str] = None

    def to_xml(self, indent: Optional[str] = "    ") -> str:
        return self.root.to_xml(indent=indent)
