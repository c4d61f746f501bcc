"""Type filters deciding which scanned classes become components.

Filters answer from class metadata alone. Those that look past the class
itself obtain the metadata of superclasses and interfaces through a
``MetadataReaderFactory``, so hierarchies can be matched without importing
anything a manifest already describes.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .errors import MetadataReadError
from .naming import is_platform_type, qualified_name, resolve_class

if TYPE_CHECKING:
    from .model import AnnotationMetadata
    from .reading import MetadataReaderFactory

log = getLogger(__name__)


class FilterType(StrEnum):
    ANNOTATION = "annotation"
    ASSIGNABLE = "assignable"
    REGEX = "regex"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class ScanFilter:
    """One include or exclude rule of a ``ComponentScan``.

    ``expression`` is a class, or its dotted name, for annotation, assignable
    and custom filters. For regex filters it is a pattern that must match the
    whole dotted class name.
    """

    expression: str | type
    kind: FilterType = FilterType.ANNOTATION

    @property
    def expression_text(self) -> str:
        if isinstance(self.expression, type):
            return qualified_name(self.expression)
        return self.expression

    @classmethod
    def of(cls, value: object) -> ScanFilter:
        """Accept a ``ScanFilter`` or its manifest form ``{"type": ..., "expression": ...}``."""

        if isinstance(value, ScanFilter):
            return value
        if isinstance(value, Mapping):
            kind = str(value.get("type", FilterType.ANNOTATION))
            try:
                filter_type = FilterType(kind)
            except ValueError:
                raise ValueError(f"Unsupported filter type: {kind}") from None
            return cls(expression=str(value["expression"]), kind=filter_type)
        raise TypeError(f"Expected a scan filter, got {type(value).__name__}")


@runtime_checkable
class TypeFilter(Protocol):
    def matches(self, metadata: AnnotationMetadata, reader_factory: MetadataReaderFactory) -> bool: ...


class HierarchyTypeFilter:
    """Match a class on itself, then optionally on its superclass chain and interfaces."""

    def __init__(self, *, consider_inherited: bool, consider_interfaces: bool) -> None:
        self.consider_inherited = consider_inherited
        self.consider_interfaces = consider_interfaces

    def matches(self, metadata: AnnotationMetadata, reader_factory: MetadataReaderFactory) -> bool:
        if self.match_self(metadata) or self.match_class_name(metadata.class_name):
            return True
        if self.consider_inherited and metadata.superclass_name is not None:
            if self._match_related(metadata.superclass_name, reader_factory):
                return True
        if self.consider_interfaces:
            return any(
                self._match_related(name, reader_factory) for name in metadata.interface_names
            )
        return False

    def match_self(self, metadata: AnnotationMetadata) -> bool:
        return False

    def match_class_name(self, class_name: str) -> bool:
        return False

    def match_platform_type(self, class_name: str) -> bool:
        return False

    def _match_related(self, class_name: str, reader_factory: MetadataReaderFactory) -> bool:
        if self.match_class_name(class_name):
            return True
        if is_platform_type(class_name):
            return self.match_platform_type(class_name)
        try:
            related = reader_factory.get_metadata(class_name)
        except MetadataReadError as exc:
            log.debug("Could not read %s while matching its subtypes: %s", class_name, exc)
            return False
        return self.matches(related, reader_factory)


class AnnotationTypeFilter(HierarchyTypeFilter):
    """Match classes carrying an annotation, directly or as a meta-annotation.

    Platform types never carry confgraph annotations and are not consulted.
    """

    def __init__(
        self,
        annotation_type: str,
        *,
        consider_meta_annotations: bool = True,
        consider_inherited: bool = False,
        consider_interfaces: bool = False,
    ) -> None:
        super().__init__(
            consider_inherited=consider_inherited, consider_interfaces=consider_interfaces
        )
        self.annotation_type = annotation_type
        self.consider_meta_annotations = consider_meta_annotations

    @classmethod
    def for_annotation(cls, annotation_class: type) -> AnnotationTypeFilter:
        """Filter for ``annotation_class``, walking superclasses when it is ``inherited``."""

        return cls(
            qualified_name(annotation_class),
            consider_inherited=bool(getattr(annotation_class, "inherited", False)),
        )

    def match_self(self, metadata: AnnotationMetadata) -> bool:
        if metadata.has_annotation(self.annotation_type):
            return True
        return self.consider_meta_annotations and metadata.has_meta_annotation(self.annotation_type)

    def __repr__(self) -> str:
        return f"AnnotationTypeFilter({self.annotation_type!r})"


class AssignableTypeFilter(HierarchyTypeFilter):
    """Match classes that are, or derive from, a target type."""

    def __init__(self, target_type: type) -> None:
        super().__init__(consider_inherited=True, consider_interfaces=True)
        self.target_type = target_type
        self.target_name = qualified_name(target_type)

    def match_class_name(self, class_name: str) -> bool:
        return class_name == self.target_name

    def match_platform_type(self, class_name: str) -> bool:
        return issubclass(resolve_class(class_name), self.target_type)

    def __repr__(self) -> str:
        return f"AssignableTypeFilter({self.target_name!r})"


class RegexPatternTypeFilter:
    """Match dotted class names against a regular expression."""

    def __init__(self, pattern: str | re.Pattern[str]) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def matches(self, metadata: AnnotationMetadata, reader_factory: MetadataReaderFactory) -> bool:
        return self.pattern.fullmatch(metadata.class_name) is not None

    def __repr__(self) -> str:
        return f"RegexPatternTypeFilter({self.pattern.pattern!r})"
