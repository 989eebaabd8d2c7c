"""Resource locator: turns import references into document bytes."""
import importlib.resources
import logging
import posixpath
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
from urllib.parse import urlsplit, urlunsplit
from urllib.request import url2pathname

import httpx

from clientconfig.config.settings import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_FALLBACK_CONFIG_NAME,
    ResolverSettings,
)
from clientconfig.exceptions.config import (
    EmptyResourceReferenceError,
    ResourceUnavailableError,
)


logger = logging.getLogger(__name__)

CLASSPATH_PREFIX = "classpath:"

Transport = Callable[[str], bytes]


class ReferenceKind(Enum):
    """How a reference is fetched."""
    CLASSPATH = "classpath"
    FILE = "file"
    URL = "url"


@dataclass(frozen=True)
class ParsedReference:
    """A reference split into its kind and lookup target."""
    kind: ReferenceKind
    target: str
    reference: str


class ResourceLocator:
    """Locates and reads resources named by import references.

    Reference forms:
    1. ``classpath:<name>``: searched across classpath roots in order. A root
       that is an existing directory is searched on disk, anything else is
       treated as a package name (``importlib.resources``).
    2. ``file://<path>``: local file.
    3. ``<scheme>://...``: fetched with the transport registered for the
       scheme (``http`` and ``https`` use httpx).
    4. Anything else: a filesystem path, relative paths taken from ``base_dir``.

    Nothing is cached; every ``locate`` call reads the resource again.
    """

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        classpath: Optional[List[str]] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
        transports: Optional[Dict[str, Transport]] = None,
    ):
        """Initialize resource locator.

        Args:
            base_dir: Base directory for relative paths (default: working directory)
            classpath: Directories or package names for classpath: lookups
            http_client: Client used for http(s) fetches (default: one per fetch)
            timeout: Timeout in seconds when no client is supplied
            transports: Extra scheme -> callable(url) -> bytes fetchers
        """
        self.base_dir = Path(base_dir).expanduser() if base_dir else Path.cwd()
        self.classpath = list(classpath) if classpath is not None else ["clientconfig.resources"]
        self.timeout = timeout
        self._http_client = http_client
        self.transports: Dict[str, Transport] = {
            "http": self._fetch_http,
            "https": self._fetch_http,
        }
        if transports:
            self.transports.update({scheme.lower(): fn for scheme, fn in transports.items()})

        logger.debug(
            "ResourceLocator initialized",
            extra={
                "base_dir": str(self.base_dir),
                "classpath": self.classpath,
                "schemes": sorted(self.transports),
            },
        )

    @classmethod
    def from_settings(
        cls,
        settings: ResolverSettings,
        http_client: Optional[httpx.Client] = None,
    ) -> "ResourceLocator":
        return cls(
            base_dir=settings.base_dir,
            classpath=settings.classpath,
            http_client=http_client,
            timeout=settings.http_timeout,
        )

    # ==================== Reference parsing ====================

    def parse(self, reference: Optional[str]) -> ParsedReference:
        """Classify a reference.

        Raises:
            EmptyResourceReferenceError: If the reference (or classpath name) is empty
        """
        ref = (reference or "").strip()
        if not ref:
            raise EmptyResourceReferenceError(
                "Resource reference is empty",
                reference=reference,
            )

        if ref.startswith(CLASSPATH_PREFIX):
            name = ref[len(CLASSPATH_PREFIX):].strip().lstrip("/")
            if not name:
                raise EmptyResourceReferenceError(
                    "Classpath resource name is empty",
                    reference=reference,
                )
            return ParsedReference(ReferenceKind.CLASSPATH, posixpath.normpath(name), ref)

        parts = urlsplit(ref)
        scheme = parts.scheme.lower()

        if scheme == "file":
            path = parts.path
            if parts.netloc and parts.netloc.lower() != "localhost":
                path = parts.netloc + path
            return ParsedReference(ReferenceKind.FILE, url2pathname(path), ref)

        # Single-letter schemes are Windows drive letters
        if len(scheme) > 1 and "://" in ref:
            return ParsedReference(ReferenceKind.URL, ref, ref)

        return ParsedReference(ReferenceKind.FILE, ref, ref)

    def identify(self, reference: Optional[str]) -> str:
        """Normalized identifier for a reference, without touching the resource.

        Two references naming the same resource produce the same identifier:
        an absolute resolved path, a canonical URL, or ``classpath:<name>``.
        """
        parsed = self.parse(reference)

        if parsed.kind is ReferenceKind.CLASSPATH:
            return CLASSPATH_PREFIX + parsed.target
        if parsed.kind is ReferenceKind.FILE:
            return str(self._file_path(parsed.target))

        parts = urlsplit(parsed.target)
        return urlunsplit(
            (parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, "")
        )

    # ==================== Fetching ====================

    def locate(self, reference: Optional[str]) -> bytes:
        """Read the resource a reference points to.

        Returns:
            Non-empty resource content

        Raises:
            EmptyResourceReferenceError: Reference is empty
            ResourceUnavailableError: Resource missing, unreadable, or empty
        """
        parsed = self.parse(reference)
        logger.debug(
            "Locating resource",
            extra={"reference": parsed.reference, "kind": parsed.kind.value},
        )

        if parsed.kind is ReferenceKind.CLASSPATH:
            content = self._read_classpath(parsed)
        elif parsed.kind is ReferenceKind.FILE:
            content = self._read_file(self._file_path(parsed.target), parsed.reference)
        else:
            content = self._read_url(parsed)

        if not content.strip():
            raise self._unavailable("Resource is empty", parsed.reference)

        logger.info(
            "Resource located",
            extra={"reference": parsed.reference, "kind": parsed.kind.value, "size": len(content)},
        )
        return content

    def has_classpath_resource(self, name: str) -> bool:
        """Whether ``classpath:<name>`` would be found."""
        parsed = self.parse(CLASSPATH_PREFIX + name)
        return any(self._classpath_entry(root, parsed.target) is not None for root in self.classpath)

    def _file_path(self, target: str) -> Path:
        path = Path(target).expanduser()
        if not path.is_absolute():
            path = self.base_dir / path
        return path.resolve()

    def _read_file(self, path: Path, reference: str) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise self._unavailable(
                f"Cannot read resource {path}: {e.strerror or e}", reference, e
            ) from e

    def _classpath_entry(self, root: str, name: str):
        root_path = Path(root).expanduser()
        if root_path.is_dir():
            candidate = root_path / name
            return candidate if candidate.is_file() else None

        try:
            candidate = importlib.resources.files(root)
        except (ModuleNotFoundError, TypeError, ValueError):
            logger.debug(
                "Classpath root is neither a directory nor a package",
                extra={"root": root},
            )
            return None
        for part in name.split("/"):
            candidate = candidate.joinpath(part)
        return candidate if candidate.is_file() else None

    def _read_classpath(self, parsed: ParsedReference) -> bytes:
        if parsed.target.startswith(".."):
            raise self._unavailable("Classpath resource escapes its root", parsed.reference)

        for root in self.classpath:
            entry = self._classpath_entry(root, parsed.target)
            if entry is None:
                continue
            try:
                return entry.read_bytes()
            except OSError as e:
                raise self._unavailable(
                    f"Cannot read classpath resource: {e}", parsed.reference, e
                ) from e

        raise self._unavailable(
            f"Classpath resource '{parsed.target}' not found",
            parsed.reference,
            searched=self.classpath,
        )

    def _read_url(self, parsed: ParsedReference) -> bytes:
        scheme = urlsplit(parsed.target).scheme.lower()
        transport = self.transports.get(scheme)
        if transport is None:
            raise self._unavailable(f"No transport for scheme '{scheme}'", parsed.reference)

        try:
            return transport(parsed.target)
        except ResourceUnavailableError:
            raise
        except Exception as e:
            raise self._unavailable(f"Failed to fetch resource: {e}", parsed.reference, e) from e

    def _fetch_http(self, url: str) -> bytes:
        try:
            if self._http_client is not None:
                response = self._http_client.get(url, follow_redirects=True)
            else:
                with httpx.Client(timeout=httpx.Timeout(self.timeout)) as client:
                    response = client.get(url, follow_redirects=True)
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            raise self._unavailable(
                f"HTTP {e.response.status_code} fetching resource", url, e
            ) from e

        except httpx.RequestError as e:
            raise self._unavailable(f"Failed to fetch resource: {e}", url, e) from e

        return response.content

    def _unavailable(
        self,
        message: str,
        reference: str,
        original: Optional[Exception] = None,
        searched: Optional[List[str]] = None,
    ) -> ResourceUnavailableError:
        extra = {"reference": reference, "reason": message}
        if searched is not None:
            extra["searched"] = searched
        logger.error("Resource unavailable", extra=extra)
        error = ResourceUnavailableError(message, reference=reference, original=original)
        if searched is not None:
            error.with_details(searched=searched)
        return error


def find_root_config(
    settings: Optional[ResolverSettings] = None,
    locator: Optional[ResourceLocator] = None,
) -> str:
    """Find the reference of the root configuration document.

    Search order:
    1. ``settings.config_location`` (``CLIENTCONFIG_CONFIG_LOCATION``)
    2. ``hazelcast-client.xml`` in the base directory
    3. ``classpath:hazelcast-client.xml``
    4. ``classpath:hazelcast-client-default.xml`` (shipped with the package)

    Returns:
        Reference usable with ``ResourceLocator.locate``

    Raises:
        ResourceUnavailableError: If nothing was found
    """
    settings = settings or ResolverSettings()
    locator = locator or ResourceLocator.from_settings(settings)

    if settings.config_location:
        logger.info(
            "Using configured config location",
            extra={"reference": settings.config_location},
        )
        return settings.config_location

    searched: List[str] = []

    local_path = locator.base_dir / DEFAULT_CONFIG_NAME
    searched.append(str(local_path))
    if local_path.is_file():
        logger.info("Found config in base directory", extra={"path": str(local_path)})
        return str(local_path)

    for name in (DEFAULT_CONFIG_NAME, DEFAULT_FALLBACK_CONFIG_NAME):
        reference = CLASSPATH_PREFIX + name
        searched.append(reference)
        if locator.has_classpath_resource(name):
            logger.info("Found config on classpath", extra={"reference": reference})
            return reference

    logger.error("Client config not found", extra={"searched_paths": searched})
    raise ResourceUnavailableError(
        "No client configuration found", reference=None
    ).with_details(searched_paths=searched)
