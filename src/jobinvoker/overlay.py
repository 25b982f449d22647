"""Layering of configuration sources over a job's context.

Sources are identified by name. Each name is looked up as a package resource
relative to an anchor package first and as a literal file path second. A name
that resolves to nothing is skipped; a source that resolves but cannot be
read or decoded is fatal.
"""

from __future__ import annotations

from collections.abc import MutableMapping, Sequence
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path, PurePosixPath
from typing import Any, BinaryIO

import yaml
from jproperties import Properties, PropertyError

from jobinvoker.context import ContextStore
from jobinvoker.errors import ContextLoadError
from jobinvoker.logger import get_logger

__all__ = [
    "PROPERTIES_ENCODING",
    "YAML_SUFFIXES",
    "ConfigOverlay",
    "decode_source",
    "resolve_source",
]

# java.util.Properties reads byte streams as ISO-8859-1
PROPERTIES_ENCODING = "iso-8859-1"
YAML_SUFFIXES = frozenset({".yaml", ".yml"})

logger = get_logger(__name__)


def resolve_source(identifier: str, anchor: str | None = None) -> Traversable | None:
    """Resolve a source identifier to something that can be opened.

    Args:
        identifier: Resource name or file path
        anchor: Package to resolve resources against; resource lookup is
            skipped when None

    Returns:
        The resource or file, or None if neither lookup finds a file
    """
    if not identifier:
        return None

    if anchor:
        resource = _find_resource(identifier, anchor)
        if resource is not None:
            return resource

    path = Path(identifier)
    if path.is_file():
        return path
    return None


def _find_resource(identifier: str, anchor: str) -> Traversable | None:
    try:
        candidate = resources.files(anchor).joinpath(identifier)
        if candidate.is_file():
            return candidate
    except (ModuleNotFoundError, TypeError, ValueError, OSError) as e:
        logger.debug("Resource lookup failed", anchor=anchor, source=identifier, error=str(e))
    return None


def decode_source(
    identifier: str,
    stream: BinaryIO,
    encoding: str = PROPERTIES_ENCODING,
) -> list[tuple[str, Any]]:
    """Decode a source into ordered key/value pairs.

    ``.yaml``/``.yml`` sources must hold a single mapping; anything else is
    read as a Java-style properties file.

    Raises:
        ContextLoadError: If a YAML source is not a mapping
        PropertyError, yaml.YAMLError, UnicodeDecodeError, OSError: If the
            stream cannot be read or parsed
    """
    if PurePosixPath(identifier).suffix.lower() in YAML_SUFFIXES:
        return _decode_yaml(identifier, stream)
    return _decode_properties(stream, encoding)


def _decode_properties(stream: BinaryIO, encoding: str) -> list[tuple[str, Any]]:
    properties = Properties()
    properties.load(stream, encoding)
    return list(properties.properties.items())


def _decode_yaml(identifier: str, stream: BinaryIO) -> list[tuple[str, Any]]:
    data = yaml.safe_load(stream)
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ContextLoadError(
            f"Context source '{identifier}' must contain a mapping, got {type(data).__name__}",
            source=identifier,
        )
    return [(str(key), value) for key, value in data.items()]


class ConfigOverlay:
    """Merges configuration sources into a context, last writer wins."""

    def __init__(self, encoding: str = PROPERTIES_ENCODING) -> None:
        self.encoding = encoding

    def merge_into(
        self,
        store: MutableMapping[str, Any],
        sources: Sequence[str] | None,
        anchor: str | None = None,
    ) -> MutableMapping[str, Any]:
        """Overlay ``sources`` onto ``store`` in the given order.

        Args:
            store: Context to update in place
            sources: Ordered source identifiers; later sources win
            anchor: Package used for resource lookups

        Returns:
            The same ``store`` object

        Raises:
            ContextLoadError: If a resolved source cannot be read or decoded
        """
        if not sources:
            return store

        for identifier in sources:
            source = resolve_source(identifier, anchor)
            if source is None:
                logger.debug("Context source not found, skipping", source=identifier, anchor=anchor)
                continue

            pairs = self._read(identifier, source)
            for key, value in pairs:
                if isinstance(store, ContextStore):
                    store.put(key, value, origin=identifier)
                else:
                    store[key] = value
            logger.debug("Applied context source", source=identifier, location=str(source), keys=len(pairs))

        return store

    def _read(self, identifier: str, source: Traversable) -> list[tuple[str, Any]]:
        try:
            with source.open("rb") as stream:
                return decode_source(identifier, stream, self.encoding)
        except (OSError, UnicodeDecodeError, PropertyError, yaml.YAMLError) as e:
            raise ContextLoadError(
                f"Error reading context source '{identifier}' ({source}): {e}",
                source=identifier,
                cause=e,
            ) from e
