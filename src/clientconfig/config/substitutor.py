"""Placeholder substitution in raw configuration text."""
import logging
import re
from typing import Callable, List, Mapping, Optional
from xml.sax.saxutils import escape

from clientconfig.exceptions.config import UnresolvedPlaceholderError


logger = logging.getLogger(__name__)

# ${name}: name is any run of characters other than '}'
PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")
CDATA_PATTERN = re.compile(r"<!\[CDATA\[.*?\]\]>", re.DOTALL)

_XML_ATTRIBUTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def xml_escape(value: str) -> str:
    """Escape a value so it is read back verbatim from element text or attributes."""
    return escape(value, _XML_ATTRIBUTE_ENTITIES)


def cdata_escape(value: str) -> str:
    """Escape a value so it is read back verbatim from inside a CDATA section."""
    return value.replace("]]>", "]]]]><![CDATA[>")


class VariableSubstitutor:
    """Replaces ``${name}`` placeholders in text from a property table.

    Substitution is a single pass: a replacement value is never scanned for
    further placeholders. Names missing from the table are left untouched
    unless ``strict`` is set, in which case every missing name in the text
    is reported in one ``UnresolvedPlaceholderError``.

    Args:
        strict: Fail on placeholders without a value
        escape: Applied to every replacement value before insertion
        cdata_escape: Applied instead of ``escape`` to placeholders inside
            a CDATA section
    """

    def __init__(
        self,
        strict: bool = False,
        escape: Optional[Callable[[str], str]] = None,
        cdata_escape: Optional[Callable[[str], str]] = None,
    ):
        self.strict = strict
        self.escape = escape
        self.cdata_escape = cdata_escape

    def find_placeholders(self, text: str) -> List[str]:
        """Placeholder names in order of appearance (duplicates kept)."""
        return PLACEHOLDER_PATTERN.findall(text)

    def substitute(
        self,
        text: str,
        properties: Mapping[str, str],
        resource: Optional[str] = None,
    ) -> str:
        """Substitute placeholders in ``text``.

        Args:
            text: Raw document text
            properties: Property table
            resource: Identifier of the document, for error reporting

        Returns:
            Text with every known placeholder replaced

        Raises:
            UnresolvedPlaceholderError: In strict mode, if any name is missing
        """
        missing: List[str] = []
        replaced = 0
        cdata_spans = (
            [m.span() for m in CDATA_PATTERN.finditer(text)] if self.cdata_escape else []
        )

        def replace_match(match: re.Match) -> str:
            nonlocal replaced
            name = match.group(1)
            if name not in properties:
                if name not in missing:
                    missing.append(name)
                return match.group(0)
            replaced += 1
            value = properties[name]
            start = match.start()
            if any(begin < start < end for begin, end in cdata_spans):
                return self.cdata_escape(value)
            return self.escape(value) if self.escape else value

        result = PLACEHOLDER_PATTERN.sub(replace_match, text)

        if missing and self.strict:
            logger.error(
                "Unresolved placeholders",
                extra={"resource": resource, "names": missing},
            )
            raise UnresolvedPlaceholderError(
                message=f"No value for placeholder(s): {', '.join(missing)}",
                resource=resource,
                names=missing,
            )

        logger.debug(
            "Placeholders substituted",
            extra={"resource": resource, "replaced": replaced, "unresolved": missing},
        )
        return result
