"""YAML property file loader."""
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from clientconfig.exceptions.config import ConfigParseError


logger = logging.getLogger(__name__)


class YAMLLoader:
    """Loads YAML property files into Python dictionaries."""

    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load YAML file into dictionary.

        Args:
            path: Path to YAML file

        Returns:
            Parsed YAML as dictionary (empty for an empty file)

        Raises:
            ConfigParseError: If the file cannot be read, is not valid YAML,
                or does not contain a mapping
        """
        path = Path(path)
        try:
            logger.debug("Loading YAML file", extra={"path": str(path)})

            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)

        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            logger.error(
                f"YAML parse error in {path}",
                extra={"path": str(path), "error": str(e)},
            )
            raise ConfigParseError(
                message=f"Failed to parse YAML file: {e}",
                resource=str(path),
                line_number=mark.line + 1 if mark is not None else None,
                column_number=mark.column + 1 if mark is not None else None,
                original_error=e,
            ) from e

        except OSError as e:
            logger.error(
                f"Failed to read file {path}",
                extra={"path": str(path), "error": str(e)},
            )
            raise ConfigParseError(
                message=f"Failed to read property file: {e}",
                resource=str(path),
                original_error=e,
            ) from e

        if data is None:
            logger.debug("YAML file is empty", extra={"path": str(path)})
            return {}

        if not isinstance(data, dict):
            logger.error(
                "YAML file must contain a mapping",
                extra={"path": str(path), "type": type(data).__name__},
            )
            raise ConfigParseError(
                message=f"YAML must contain a mapping, got {type(data).__name__}",
                resource=str(path),
            )

        logger.info(
            "YAML file loaded",
            extra={"path": str(path), "keys": len(data)},
        )
        return data
