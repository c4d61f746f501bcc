"""Class and method metadata records.

``AnnotationMetadata`` is the uniform description of a declared class, whether
it was obtained by introspecting a loaded class (``introspected_class`` is set)
or by reading recorded/static declarations by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .naming import simple_name

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .attributes import AnnotationAttributes


@dataclass(frozen=True, slots=True)
class MethodMetadata:
    name: str
    declaring_class_name: str
    annotations: tuple[AnnotationAttributes, ...] = ()
    is_abstract: bool = False
    is_static: bool = False
    is_final: bool = False

    def is_annotated(self, annotation_type: str) -> bool:
        return any(item.annotation_type == annotation_type for item in self.annotations)

    def get_annotation_attributes(self, annotation_type: str) -> AnnotationAttributes | None:
        for item in self.annotations:
            if item.annotation_type == annotation_type:
                return item
        return None


@dataclass(frozen=True, slots=True, eq=False)
class AnnotationMetadata:
    """Annotations, members and hierarchy of one class."""

    class_name: str
    annotations: tuple[AnnotationAttributes, ...] = ()
    meta_annotation_types: Mapping[str, tuple[str, ...]] = field(
        default_factory=dict[str, tuple[str, ...]]
    )
    superclass_name: str | None = None
    interface_names: tuple[str, ...] = ()
    member_class_names: tuple[str, ...] = ()
    methods: tuple[MethodMetadata, ...] = ()
    is_interface: bool = False
    is_abstract: bool = False
    is_final: bool = False
    introspected_class: type | None = field(default=None, repr=False)

    @property
    def simple_name(self) -> str:
        return simple_name(self.class_name)

    @property
    def is_introspected(self) -> bool:
        """Runtime metadata: method order follows reflection, not declaration."""

        return self.introspected_class is not None

    @property
    def has_superclass(self) -> bool:
        return self.superclass_name is not None

    @property
    def annotation_types(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for item in self.annotations:
            seen.setdefault(item.annotation_type, None)
        return tuple(seen)

    def has_annotation(self, annotation_type: str) -> bool:
        return any(item.annotation_type == annotation_type for item in self.annotations)

    def has_meta_annotation(self, annotation_type: str) -> bool:
        return any(annotation_type in metas for metas in self.meta_annotation_types.values())

    def is_annotated(self, annotation_type: str) -> bool:
        """Direct or meta-present."""

        return self.has_annotation(annotation_type) or self.has_meta_annotation(annotation_type)

    def get_annotation_attributes(self, annotation_type: str) -> AnnotationAttributes | None:
        for item in self.annotations:
            if item.annotation_type == annotation_type:
                return item
        return None

    def get_all_annotation_attributes(
        self, annotation_type: str
    ) -> tuple[AnnotationAttributes, ...]:
        return tuple(item for item in self.annotations if item.annotation_type == annotation_type)

    def get_annotated_methods(self, annotation_type: str) -> tuple[MethodMetadata, ...]:
        return tuple(method for method in self.methods if method.is_annotated(annotation_type))

    def has_annotated_methods(self, annotation_type: str) -> bool:
        return any(method.is_annotated(annotation_type) for method in self.methods)

    def __repr__(self) -> str:
        return f"AnnotationMetadata({self.class_name!r})"
