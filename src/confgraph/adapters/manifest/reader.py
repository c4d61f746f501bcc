"""Metadata reader backed by a JSON class manifest."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from confgraph.domain.metadata import ClassNotFoundError

from .schema import Manifest
from .translator import to_metadata

if TYPE_CHECKING:
    from pathlib import Path

    from confgraph.domain.metadata import AnnotationMetadata

log = getLogger(__name__)


class ManifestMetadataReaderFactory:
    """Serve ``AnnotationMetadata`` for the classes listed in a manifest.

    Entries are translated once, on first access.
    """

    def __init__(self, manifest: Manifest) -> None:
        self._entries = {entry.name: entry for entry in manifest.classes}
        self._metadata: dict[str, AnnotationMetadata] = {}

    @classmethod
    def from_json(cls, payload: str | bytes) -> ManifestMetadataReaderFactory:
        return cls(Manifest.model_validate_json(payload))

    @classmethod
    def from_path(cls, path: Path) -> ManifestMetadataReaderFactory:
        log.debug("Loading class manifest from %s", path)
        return cls.from_json(path.read_bytes())

    def class_names(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def get_metadata(self, class_name: str) -> AnnotationMetadata:
        cached = self._metadata.get(class_name)
        if cached is not None:
            return cached
        entry = self._entries.get(class_name)
        if entry is None:
            raise ClassNotFoundError(class_name, "not listed in the class manifest")
        metadata = to_metadata(entry)
        self._metadata[class_name] = metadata
        return metadata
