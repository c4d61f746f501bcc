"""Obtain class metadata by name without introspecting annotation references."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .errors import MetadataReadError
from .introspection import read_class
from .naming import resolve_class

if TYPE_CHECKING:
    from .model import AnnotationMetadata

log = getLogger(__name__)


class MetadataReaderFactory(Protocol):
    """Source of static class metadata keyed by dotted class name."""

    def get_metadata(self, class_name: str) -> AnnotationMetadata: ...


class RecordedMetadataReaderFactory:
    """Read the declarations recorded on a class located by name."""

    def get_metadata(self, class_name: str) -> AnnotationMetadata:
        try:
            cls = resolve_class(class_name)
        except ImportError as exc:
            raise MetadataReadError(class_name, str(exc)) from exc
        return read_class(cls)


class CachingMetadataReaderFactory:
    """Ask each delegate in turn and cache the first successful reading."""

    def __init__(self, *delegates: MetadataReaderFactory) -> None:
        self._delegates = delegates or (RecordedMetadataReaderFactory(),)
        self._cache: dict[str, AnnotationMetadata] = {}

    def get_metadata(self, class_name: str) -> AnnotationMetadata:
        cached = self._cache.get(class_name)
        if cached is not None:
            return cached
        failure: MetadataReadError | None = None
        for delegate in self._delegates:
            try:
                metadata = delegate.get_metadata(class_name)
            except MetadataReadError as exc:
                log.debug("Reader %s could not read %s: %s", type(delegate).__name__, class_name, exc)
                failure = exc
                continue
            self._cache[class_name] = metadata
            return metadata
        raise MetadataReadError(class_name, "no reader could provide metadata") from failure

    def clear_cache(self) -> None:
        self._cache.clear()
