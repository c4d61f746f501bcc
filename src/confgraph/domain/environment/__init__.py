"""Environment support: property layers, placeholders, resources."""

from __future__ import annotations

from .environment import (
    SYSTEM_ENVIRONMENT_LAYER,
    CircularPlaceholderError,
    Environment,
    UnresolvablePlaceholderError,
)
from .factory import DefaultPropertyLayerFactory, PropertyLayerFactory
from .layers import (
    CompositePropertyLayer,
    MapPropertyLayer,
    PropertyLayer,
    PropertyLayers,
    ResourcePropertyLayer,
)
from .resources import (
    DefaultResourceLoader,
    EncodedResource,
    FileResource,
    PackageResource,
    Resource,
    ResourceLoader,
)

__all__ = [
    "SYSTEM_ENVIRONMENT_LAYER",
    "CircularPlaceholderError",
    "CompositePropertyLayer",
    "DefaultPropertyLayerFactory",
    "DefaultResourceLoader",
    "EncodedResource",
    "Environment",
    "FileResource",
    "MapPropertyLayer",
    "PackageResource",
    "PropertyLayer",
    "PropertyLayerFactory",
    "PropertyLayers",
    "Resource",
    "ResourceLoader",
    "ResourcePropertyLayer",
    "UnresolvablePlaceholderError",
]
