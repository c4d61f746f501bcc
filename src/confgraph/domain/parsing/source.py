"""Uniform view over a declared class, whether loaded or only statically read.

A ``SourceView`` hides where its metadata came from: a loaded class that can be
introspected, or ``AnnotationMetadata`` read by name. Two views are equal when
they describe the same dotted class name.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from confgraph.domain.metadata import (
    MetadataReadError,
    annotations_of,
    introspect,
    is_platform_type,
    qualified_name,
    resolve_class,
)

from .candidates import BEAN, get_order
from .capabilities import ImportKind, ImportRegistrar, ImportSelector
from .model import ConfigurationClass, class_resource

if TYPE_CHECKING:
    from collections.abc import Iterable

    from confgraph.domain.metadata import AnnotationMetadata, MetadataReaderFactory, MethodMetadata

log = getLogger(__name__)


class SourceView:
    __slots__ = ("_factory", "metadata", "source")

    def __init__(self, factory: SourceViewFactory, source: type | AnnotationMetadata) -> None:
        self._factory = factory
        self.source = source
        self.metadata = introspect(source) if isinstance(source, type) else source

    @property
    def class_name(self) -> str:
        return self.metadata.class_name

    @property
    def order(self) -> int:
        return get_order(self.metadata)

    def load_class(self) -> type:
        if isinstance(self.source, type):
            return self.source
        return resolve_class(self.class_name)

    def as_configuration_class(self, imported_by: ConfigurationClass) -> ConfigurationClass:
        return ConfigurationClass(
            metadata=self.metadata,
            resource=class_resource(self.class_name),
            imported_by={imported_by.class_name: None},
        )

    def is_assignable(self, target: type) -> bool:
        if isinstance(self.source, type):
            return issubclass(self.source, target)
        return self._factory.is_assignable(self.metadata, target)

    def member_classes(self) -> list[SourceView]:
        if isinstance(self.source, type):
            namespace = vars(self.source)
            members: list[SourceView] = []
            for name in self.metadata.member_class_names:
                member = namespace.get(name.rsplit(".", 1)[-1])
                if isinstance(member, type):
                    members.append(self._factory.from_class(member))
            return members

        members = []
        for name in self.metadata.member_class_names:
            try:
                members.append(self._factory.from_name(name))
            except MetadataReadError:
                # only looking for candidates; an unreadable member is not one
                log.debug(
                    "Failed to resolve member class [%s] - not considering it as a "
                    "configuration class candidate",
                    name,
                )
        return members

    def superclass(self) -> SourceView:
        if isinstance(self.source, type):
            bases = self.source.__bases__
            return self._factory.from_class(bases[0] if bases else None)
        return self._factory.from_name(self.metadata.superclass_name)

    def interfaces(self) -> list[SourceView]:
        if isinstance(self.source, type):
            return _unique(self._factory.from_class(base) for base in self.source.__bases__[1:])
        return _unique(self._factory.from_name(name) for name in self.metadata.interface_names)

    def annotations(self) -> list[SourceView]:
        """Views over the annotation types declared on this class.

        Annotation types that cannot be read are ignored, mirroring how missing
        annotation classes never break loading of the annotated class.
        """

        if isinstance(self.source, type):
            return _unique(
                self._factory.from_class(type(annotation))
                for annotation in annotations_of(self.source)
            )
        views: list[SourceView] = []
        for name in self.metadata.annotation_types:
            try:
                views.append(self._related(name))
            except MetadataReadError:
                log.debug("Ignoring unreadable annotation type [%s] on %s", name, self.class_name)
        return _unique(views)

    def annotation_attribute_views(self, annotation_type: str, attribute: str) -> list[SourceView]:
        attributes = self.metadata.get_annotation_attributes(annotation_type)
        if attributes is None or attribute not in attributes:
            return []
        views: list[SourceView] = []
        for value in attributes.get_tuple(attribute):
            if isinstance(value, type):
                views.append(self._factory.from_class(value))
            else:
                views.append(self._related(str(value)))
        return _unique(views)

    def producer_methods(self) -> tuple[MethodMetadata, ...]:
        """``Bean`` methods, in declaration order whenever that can be established.

        Introspected metadata lists methods in reflective order. When more than
        one producer method exists, the statically read declaration order is
        used instead provided it names every reflectively found method.
        """

        original = self.metadata
        methods = original.get_annotated_methods(BEAN)
        if len(methods) <= 1 or not original.is_introspected:
            return methods
        try:
            declared = self._factory.reader_factory.get_metadata(original.class_name)
        except MetadataReadError as exc:
            log.debug("Failed to read %s statically for producer method order: %s", original.class_name, exc)
            return methods
        declared_methods = declared.get_annotated_methods(BEAN)
        if len(declared_methods) < len(methods):
            return methods
        by_name = {method.name: method for method in methods}
        selected = tuple(by_name[item.name] for item in declared_methods if item.name in by_name)
        if len(selected) == len(methods):
            return selected
        return methods

    def _related(self, class_name: str) -> SourceView:
        if isinstance(self.source, type):
            try:
                return self._factory.from_class(resolve_class(class_name))
            except (MetadataReadError, ImportError) as exc:
                if is_platform_type(class_name):
                    raise MetadataReadError(class_name, "failed to load platform class") from exc
                return self._factory.from_reader(class_name)
        return self._factory.from_name(class_name)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SourceView) and other.class_name == self.class_name

    def __hash__(self) -> int:
        return hash(self.class_name)

    def __repr__(self) -> str:
        return self.class_name


class SourceViewFactory:
    """Create ``SourceView``s, falling back to static reading when loading is unsafe."""

    def __init__(self, reader_factory: MetadataReaderFactory) -> None:
        self.reader_factory = reader_factory

    def from_class(self, cls: type | None) -> SourceView:
        if cls is None:
            return SourceView(self, object)
        try:
            _validate_annotations(cls)
        except (MetadataReadError, ImportError) as exc:
            log.debug("Falling back to static metadata for %s: %s", qualified_name(cls), exc)
            return self.from_name(qualified_name(cls))
        return SourceView(self, cls)

    def from_name(self, class_name: str | None) -> SourceView:
        if class_name is None:
            return SourceView(self, object)
        if is_platform_type(class_name):
            # never read platform types statically
            try:
                return SourceView(self, resolve_class(class_name))
            except (MetadataReadError, ImportError) as exc:
                raise MetadataReadError(class_name, "failed to load platform class") from exc
        return self.from_reader(class_name)

    def from_reader(self, class_name: str) -> SourceView:
        return SourceView(self, self.reader_factory.get_metadata(class_name))

    def from_names(self, class_names: Iterable[str]) -> list[SourceView]:
        return [self.from_name(name) for name in class_names]

    def from_metadata(self, metadata: AnnotationMetadata) -> SourceView:
        if metadata.introspected_class is not None:
            return self.from_class(metadata.introspected_class)
        return SourceView(self, metadata)

    def is_assignable(self, metadata: AnnotationMetadata, target: type) -> bool:
        """Walk superclass and interface names looking for ``target``."""

        return self._is_assignable(metadata, qualified_name(target), target, visited=set())

    def _is_assignable(
        self, metadata: AnnotationMetadata, target_name: str, target: type, visited: set[str]
    ) -> bool:
        if metadata.class_name == target_name:
            return True
        visited.add(metadata.class_name)
        parents = (metadata.superclass_name, *metadata.interface_names)
        for parent in parents:
            if parent is None or parent in visited:
                continue
            if parent == target_name:
                return True
            if is_platform_type(parent):
                try:
                    if issubclass(resolve_class(parent), target):
                        return True
                except (MetadataReadError, ImportError):
                    continue
                continue
            try:
                parent_metadata = self.reader_factory.get_metadata(parent)
            except MetadataReadError:
                log.debug("Could not read %s while matching against %s", parent, target_name)
                continue
            if self._is_assignable(parent_metadata, target_name, target, visited):
                return True
        return False


def classify(view: SourceView) -> ImportKind:
    if view.is_assignable(ImportSelector):
        return ImportKind.SELECTOR
    if view.is_assignable(ImportRegistrar):
        return ImportKind.REGISTRAR
    return ImportKind.CONFIGURATION


def _validate_annotations(cls: type) -> None:
    """Resolve every class-valued annotation attribute given by name."""

    for annotation in annotations_of(cls):
        attributes = annotation.attributes
        for attribute in type(annotation).class_attributes:
            value = attributes.get(attribute)
            values = value if isinstance(value, tuple | list) else (value,)
            for item in values:
                if isinstance(item, str):
                    resolve_class(item)


def _unique(views: Iterable[SourceView]) -> list[SourceView]:
    seen: dict[SourceView, None] = {}
    for view in views:
        seen.setdefault(view, None)
    return list(seen)
