"""Public interface for the class manifest adapter."""

from __future__ import annotations

from .reader import ManifestMetadataReaderFactory
from .schema import Manifest, ManifestAnnotation, ManifestClass, ManifestMethod
from .translator import to_metadata

__all__ = [
    "Manifest",
    "ManifestAnnotation",
    "ManifestClass",
    "ManifestMetadataReaderFactory",
    "ManifestMethod",
    "to_metadata",
]
