"""Decide which classes qualify as configuration candidates."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from confgraph.domain.metadata import (
    LOWEST_PRECEDENCE,
    Bean,
    Component,
    ComponentScan,
    Configuration,
    Import,
    ImportResource,
    MetadataReadError,
    Order,
    introspect,
    qualified_name,
)

if TYPE_CHECKING:
    from confgraph.domain.metadata import AnnotationMetadata, MetadataReaderFactory
    from confgraph.domain.ports import ComponentDefinition

log = getLogger(__name__)

CONFIGURATION: Final[str] = qualified_name(Configuration)
BEAN: Final[str] = qualified_name(Bean)
ORDER: Final[str] = qualified_name(Order)

LITE_INDICATORS: Final[tuple[str, ...]] = tuple(
    qualified_name(annotation) for annotation in (Component, ComponentScan, Import, ImportResource)
)


def is_full_configuration_candidate(metadata: AnnotationMetadata) -> bool:
    return metadata.is_annotated(CONFIGURATION)


def is_lite_configuration_candidate(metadata: AnnotationMetadata) -> bool:
    if metadata.is_interface:
        return False
    if any(metadata.is_annotated(indicator) for indicator in LITE_INDICATORS):
        return True
    return metadata.has_annotated_methods(BEAN)


def is_configuration_candidate(metadata: AnnotationMetadata) -> bool:
    return not metadata.is_interface and (
        is_full_configuration_candidate(metadata) or is_lite_configuration_candidate(metadata)
    )


def check_configuration_candidate(
    definition: ComponentDefinition, reader_factory: MetadataReaderFactory
) -> bool:
    metadata = definition_metadata(definition, reader_factory)
    return metadata is not None and is_configuration_candidate(metadata)


def definition_metadata(
    definition: ComponentDefinition, reader_factory: MetadataReaderFactory
) -> AnnotationMetadata | None:
    if definition.metadata is not None and definition.metadata.class_name == definition.class_name:
        return definition.metadata
    if definition.component_class is not None:
        return introspect(definition.component_class)
    try:
        return reader_factory.get_metadata(definition.class_name)
    except MetadataReadError:
        log.debug("Could not find class file for introspecting configuration annotations: %s", definition.class_name)
        return None


def get_order(metadata: AnnotationMetadata) -> int:
    attributes = metadata.get_annotation_attributes(ORDER)
    if attributes is None:
        return LOWEST_PRECEDENCE
    order = attributes.get_int("value")
    return LOWEST_PRECEDENCE if order is None else order
