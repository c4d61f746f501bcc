"""Translate manifest entries into ``AnnotationMetadata``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from confgraph.domain.metadata import AnnotationAttributes, AnnotationMetadata, MethodMetadata

if TYPE_CHECKING:
    from .schema import ManifestAnnotation, ManifestClass, ManifestMethod


def to_metadata(entry: ManifestClass) -> AnnotationMetadata:
    return AnnotationMetadata(
        class_name=entry.name,
        annotations=tuple(_attributes(item) for item in entry.annotations),
        meta_annotation_types={
            annotation_type: tuple(meta_types)
            for annotation_type, meta_types in entry.meta_annotations.items()
        },
        superclass_name=entry.superclass,
        interface_names=tuple(entry.interfaces),
        member_class_names=tuple(entry.member_classes),
        methods=tuple(_method(entry.name, method) for method in entry.methods),
        is_interface=entry.is_interface,
        is_abstract=entry.is_abstract,
        is_final=entry.is_final,
    )


def _attributes(annotation: ManifestAnnotation) -> AnnotationAttributes:
    # JSON arrays stand for tuple-valued attributes
    values = {
        name: tuple(value) if isinstance(value, list) else value
        for name, value in annotation.attributes.items()
    }
    return AnnotationAttributes(annotation.type, values)


def _method(declaring_class_name: str, method: ManifestMethod) -> MethodMetadata:
    return MethodMetadata(
        name=method.name,
        declaring_class_name=declaring_class_name,
        annotations=tuple(_attributes(item) for item in method.annotations),
        is_abstract=method.is_abstract,
        is_static=method.is_static,
        is_final=method.is_final,
    )
