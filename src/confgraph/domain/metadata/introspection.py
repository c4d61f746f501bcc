"""Build ``AnnotationMetadata`` from loaded classes.

Two readings of the same class exist:

- ``introspect`` walks the class reflectively. Methods come back in the order
  ``inspect.getmembers`` yields them (sorted by name), and class-valued
  annotation attributes keep the class objects.
- ``read_class`` reads the class' recorded declarations only. Methods follow
  declaration order and class-valued attributes are reduced to dotted names
  without ever being resolved, so unloadable references are harmless.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

from .annotations import annotations_of
from .attributes import AnnotationAttributes
from .model import AnnotationMetadata, MethodMetadata
from .naming import is_platform_type, qualified_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .annotations import Annotation


def introspect(cls: type) -> AnnotationMetadata:
    own = vars(cls)
    members = (name for name, _ in inspect.getmembers(cls) if name in own)
    return _build(cls, method_names=members, class_names_only=False)


def read_class(cls: type) -> AnnotationMetadata:
    return _build(cls, method_names=tuple(vars(cls)), class_names_only=True)


def annotation_attributes(
    annotation: Annotation, *, class_names_only: bool = False
) -> AnnotationAttributes:
    attributes = AnnotationAttributes(qualified_name(type(annotation)), annotation.attributes)
    if class_names_only:
        return attributes.with_class_names()
    return attributes


def meta_annotation_types(annotation_type: type) -> tuple[str, ...]:
    """Transitive annotation type names declared on ``annotation_type``."""

    found: dict[str, None] = {}
    _collect_meta(annotation_type, found, visited=set())
    return tuple(found)


def _collect_meta(annotation_type: type, found: dict[str, None], visited: set[type]) -> None:
    if annotation_type in visited:
        return
    visited.add(annotation_type)
    for meta in annotations_of(annotation_type):
        meta_type = type(meta)
        name = qualified_name(meta_type)
        if is_platform_type(name):
            continue
        found.setdefault(name, None)
        _collect_meta(meta_type, found, visited)


def _build(
    cls: type, *, method_names: Iterable[str], class_names_only: bool
) -> AnnotationMetadata:
    annotations = annotations_of(cls)
    metas: dict[str, tuple[str, ...]] = {}
    for annotation in annotations:
        name = qualified_name(type(annotation))
        metas.setdefault(name, meta_annotation_types(type(annotation)))

    bases = cls.__bases__
    superclass = qualified_name(bases[0]) if bases else None
    own = vars(cls)
    class_name = qualified_name(cls)
    methods = tuple(
        method
        for method in (_method_metadata(class_name, own[name]) for name in method_names)
        if method is not None
    )
    return AnnotationMetadata(
        class_name=class_name,
        annotations=tuple(
            annotation_attributes(item, class_names_only=class_names_only) for item in annotations
        ),
        meta_annotation_types=metas,
        superclass_name=superclass,
        interface_names=tuple(qualified_name(base) for base in bases[1:]),
        member_class_names=_member_class_names(cls),
        methods=methods,
        is_interface=bool(getattr(cls, "_is_protocol", False)),
        is_abstract=inspect.isabstract(cls),
        is_final=bool(getattr(cls, "__final__", False)),
        introspected_class=None if class_names_only else cls,
    )


def _member_class_names(cls: type) -> tuple[str, ...]:
    prefix = f"{cls.__qualname__}."
    return tuple(
        qualified_name(value)
        for name, value in vars(cls).items()
        if isinstance(value, type) and value.__qualname__ == f"{prefix}{name}"
    )


def _method_metadata(class_name: str, raw: object) -> MethodMetadata | None:
    is_static = isinstance(raw, staticmethod)
    function = raw.__func__ if isinstance(raw, staticmethod | classmethod) else raw
    if not inspect.isfunction(function):
        return None
    return MethodMetadata(
        name=function.__name__,
        declaring_class_name=class_name,
        annotations=tuple(annotation_attributes(item) for item in annotations_of(function)),
        is_abstract=bool(getattr(function, "__isabstractmethod__", False)),
        is_static=is_static,
        is_final=bool(getattr(function, "__final__", False)),
    )
