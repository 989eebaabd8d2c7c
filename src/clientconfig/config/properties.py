"""Layered, read-only property tables used for placeholder substitution."""
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from clientconfig.config.yaml_loader import YAMLLoader


logger = logging.getLogger(__name__)


def _to_text(value: Any) -> str:
    """Render a property value the way it will appear in a document."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(_to_text(item) for item in value)
    return str(value)


def flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested mappings into dotted keys.

    Example:
        flatten({"executor": {"pool": {"size": 40}}})
        # {"executor.pool.size": "40"}
    """
    flat: Dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten(value, full_key))
        else:
            flat[full_key] = _to_text(value)
    return flat


class PropertyTable(Mapping):
    """Read-only mapping of property names to string values.

    Built from an ordered list of sources; the first source that defines a
    name wins. Every source is copied at construction, so later changes to
    the originals (including ``os.environ``) do not leak into a table that
    is already in use.

    Example:
        table = PropertyTable({"executor.pool.size": "40"}, os.environ)
        table["executor.pool.size"]  # "40"
    """

    def __init__(self, *sources: Mapping):
        self._sources = tuple(
            MappingProxyType({str(k): _to_text(v) for k, v in source.items()})
            for source in sources
        )

    @classmethod
    def from_environment(cls, environ: Optional[Mapping] = None) -> "PropertyTable":
        """Table backed by a snapshot of the process environment."""
        return cls(os.environ if environ is None else environ)

    @classmethod
    def from_pairs(cls, pairs: Iterable[str]) -> "PropertyTable":
        """Table from ``KEY=VALUE`` strings (later pairs override earlier ones).

        Raises:
            ValueError: If a pair has no ``=`` or an empty key
        """
        values: Dict[str, str] = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            if not sep or not key.strip():
                raise ValueError(f"Invalid property '{pair}', expected KEY=VALUE")
            values[key.strip()] = value
        return cls(values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PropertyTable":
        """Table from a YAML file; nested keys are joined with dots."""
        table = cls(flatten(YAMLLoader().load(path)))
        logger.debug(
            "Property table loaded from YAML",
            extra={"path": str(path), "property_count": len(table)},
        )
        return table

    def layered(self, *fallbacks: Mapping) -> "PropertyTable":
        """New table consulting this one first, then each fallback in order."""
        table = PropertyTable()
        table._sources = self._sources + PropertyTable(*fallbacks)._sources
        return table

    @property
    def sources(self) -> List[Mapping]:
        return list(self._sources)

    def __getitem__(self, name: str) -> str:
        for source in self._sources:
            if name in source:
                return source[name]
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(name in source for source in self._sources)

    def __iter__(self) -> Iterator[str]:
        seen = set()
        for source in self._sources:
            for name in source:
                if name not in seen:
                    seen.add(name)
                    yield name

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"PropertyTable(sources={len(self._sources)}, properties={len(self)})"


def as_property_table(properties: Optional[Mapping]) -> PropertyTable:
    """Coerce a plain mapping (or None) into a PropertyTable."""
    if isinstance(properties, PropertyTable):
        return properties
    if properties is None:
        return PropertyTable()
    return PropertyTable(properties)
