"""Class metadata model: annotations, readers and naming helpers."""

from __future__ import annotations

from .annotations import (
    HIGHEST_PRECEDENCE,
    LOWEST_PRECEDENCE,
    Annotation,
    Bean,
    Component,
    ComponentScan,
    Conditional,
    Configuration,
    Import,
    ImportResource,
    Order,
    PropertySource,
    annotations_of,
)
from .attributes import AnnotationAttributes
from .errors import ClassNotFoundError, MetadataReadError
from .filters import (
    AnnotationTypeFilter,
    AssignableTypeFilter,
    FilterType,
    HierarchyTypeFilter,
    RegexPatternTypeFilter,
    ScanFilter,
    TypeFilter,
)
from .introspection import introspect, read_class
from .model import AnnotationMetadata, MethodMetadata
from .naming import (
    default_component_name,
    is_platform_type,
    package_name,
    qualified_name,
    resolve_class,
    simple_name,
)
from .reading import (
    CachingMetadataReaderFactory,
    MetadataReaderFactory,
    RecordedMetadataReaderFactory,
)

__all__ = [
    "HIGHEST_PRECEDENCE",
    "LOWEST_PRECEDENCE",
    "Annotation",
    "AnnotationAttributes",
    "AnnotationMetadata",
    "AnnotationTypeFilter",
    "AssignableTypeFilter",
    "Bean",
    "CachingMetadataReaderFactory",
    "ClassNotFoundError",
    "Component",
    "ComponentScan",
    "Conditional",
    "Configuration",
    "FilterType",
    "HierarchyTypeFilter",
    "Import",
    "ImportResource",
    "MetadataReadError",
    "MetadataReaderFactory",
    "MethodMetadata",
    "Order",
    "PropertySource",
    "RecordedMetadataReaderFactory",
    "RegexPatternTypeFilter",
    "ScanFilter",
    "TypeFilter",
    "annotations_of",
    "default_component_name",
    "introspect",
    "is_platform_type",
    "package_name",
    "qualified_name",
    "read_class",
    "resolve_class",
    "simple_name",
]
