"""Component scanning over importable packages."""

from __future__ import annotations

import importlib
import inspect
import pkgutil
import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from confgraph.domain.metadata import (
    Annotation,
    AnnotationTypeFilter,
    AssignableTypeFilter,
    CachingMetadataReaderFactory,
    ClassNotFoundError,
    Component,
    Configuration,
    FilterType,
    RegexPatternTypeFilter,
    ScanFilter,
    TypeFilter,
    default_component_name,
    introspect,
    package_name,
    qualified_name,
    resolve_class,
)
from confgraph.domain.parsing import DefinitionStoreError, instantiate
from confgraph.domain.ports import ComponentDefinition

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import ModuleType

    from confgraph.domain.environment import Environment
    from confgraph.domain.metadata import (
        AnnotationAttributes,
        AnnotationMetadata,
        MetadataReaderFactory,
    )
    from confgraph.domain.ports import DefinitionRegistry

log = getLogger(__name__)

COMPONENT: Final[str] = qualified_name(Component)
CONFIGURATION: Final[str] = qualified_name(Configuration)
NAMED_BY: Final[tuple[str, ...]] = (COMPONENT, CONFIGURATION)

_PACKAGE_DELIMITERS = re.compile(r"[,;\s]+")


class ConflictingDefinitionError(DefinitionStoreError):
    pass


class ModuleComponentScanner:
    """Find component classes in packages and register them.

    Candidates are concrete classes defined in a scanned module that no exclude
    filter matches and at least one include filter does. Unless a scan turns
    ``use_default_filters`` off, classes annotated with ``Component`` or
    ``Configuration``, directly or through a meta-annotation, are included. The
    class declaring the scan is never a candidate.
    """

    def __init__(
        self,
        environment: Environment,
        registry: DefinitionRegistry,
        reader_factory: MetadataReaderFactory | None = None,
    ) -> None:
        self.environment = environment
        self.registry = registry
        self.reader_factory = reader_factory or CachingMetadataReaderFactory()

    def scan(self, attributes: AnnotationAttributes, declaring_class: str) -> list[ComponentDefinition]:
        packages = self.base_packages(attributes, declaring_class)
        include_filters = self.type_filters(attributes, "include_filters")
        if attributes.get("use_default_filters", True):
            include_filters.extend(default_filters())
        exclude_filters = self.type_filters(attributes, "exclude_filters")
        log.debug(
            "Scanning packages %s for %s (include %s, exclude %s)",
            packages,
            declaring_class,
            include_filters,
            exclude_filters,
        )

        found: list[ComponentDefinition] = []
        for package in packages:
            for cls in _classes_in(package):
                class_name = qualified_name(cls)
                if class_name == declaring_class:
                    continue
                metadata = introspect(cls)
                if not self._is_candidate(metadata, include_filters, exclude_filters):
                    continue
                definition = ComponentDefinition(
                    name=component_name(metadata),
                    class_name=class_name,
                    component_class=cls,
                    metadata=metadata,
                )
                if self._check_candidate(definition):
                    self.registry.register_definition(definition)
                    found.append(definition)
        return found

    def base_packages(self, attributes: AnnotationAttributes, declaring_class: str) -> list[str]:
        packages: dict[str, None] = {}
        for declared in (*attributes.get_strings("value"), *attributes.get_strings("base_packages")):
            resolved = self.environment.resolve_placeholders(declared)
            for package in _PACKAGE_DELIMITERS.split(resolved):
                if package:
                    packages.setdefault(package, None)
        for class_name in attributes.get_class_names("base_package_classes"):
            packages.setdefault(package_name(class_name), None)
        if not packages:
            packages.setdefault(package_name(declaring_class), None)
        return list(packages)

    def type_filters(self, attributes: AnnotationAttributes, name: str) -> list[TypeFilter]:
        """Build the filters declared under ``name``.

        Filters naming a class that cannot be loaded are skipped with a warning.
        """

        filters: list[TypeFilter] = []
        for declared in attributes.get_tuple(name):
            scan_filter = ScanFilter.of(declared)
            try:
                filters.append(self.create_filter(scan_filter))
            except ClassNotFoundError as exc:
                log.warning("Ignoring non-present %s filter class: %s", scan_filter.kind, exc)
        return filters

    def create_filter(self, scan_filter: ScanFilter) -> TypeFilter:
        expression = scan_filter.expression
        if isinstance(expression, str):
            expression = self.environment.resolve_placeholders(expression).strip()
        kind = scan_filter.kind
        if kind == FilterType.REGEX:
            return RegexPatternTypeFilter(_text(expression))
        if kind == FilterType.ANNOTATION:
            return AnnotationTypeFilter.for_annotation(_load(expression))
        if kind == FilterType.ASSIGNABLE:
            return AssignableTypeFilter(_load(expression))
        if kind == FilterType.CUSTOM:
            return instantiate(_load(expression), TypeFilter)  # type: ignore[type-abstract]
        raise ValueError(f"Unsupported filter type: {scan_filter.kind}")

    def _is_candidate(
        self,
        metadata: AnnotationMetadata,
        include_filters: list[TypeFilter],
        exclude_filters: list[TypeFilter],
    ) -> bool:
        if metadata.is_interface or metadata.is_abstract:
            return False
        if any(item.matches(metadata, self.reader_factory) for item in exclude_filters):
            log.debug("Excluding %s from scan", metadata.class_name)
            return False
        return any(item.matches(metadata, self.reader_factory) for item in include_filters)

    def _check_candidate(self, definition: ComponentDefinition) -> bool:
        existing = self.registry.get_definition(definition.name)
        if existing is None:
            return True
        if existing.source_definition.class_name == definition.class_name:
            return False
        raise ConflictingDefinitionError(
            f"Component name '{definition.name}' for class [{definition.class_name}] conflicts "
            f"with existing, non-compatible definition of same name and class "
            f"[{existing.class_name}]",
            class_name=definition.class_name,
        )


def default_filters() -> list[TypeFilter]:
    return [AnnotationTypeFilter(annotation_type) for annotation_type in NAMED_BY]


def component_name(metadata: AnnotationMetadata) -> str:
    for annotation_type in NAMED_BY:
        attributes = metadata.get_annotation_attributes(annotation_type)
        if attributes is not None:
            value = attributes.get_string("value")
            if value:
                return value
    return default_component_name(metadata.class_name)


def _load(expression: str | type) -> type:
    return expression if isinstance(expression, type) else resolve_class(expression)


def _text(expression: str | type) -> str:
    return qualified_name(expression) if isinstance(expression, type) else expression


def _classes_in(package: str) -> Iterator[type]:
    for module in _modules(package):
        for _, member in inspect.getmembers(module, inspect.isclass):
            # annotation types mark components but never are one
            if member.__module__ == module.__name__ and not issubclass(member, Annotation):
                yield member


def _modules(package: str) -> Iterator[ModuleType]:
    root = importlib.import_module(package)
    yield root
    path = getattr(root, "__path__", None)
    if path is None:
        return
    for info in pkgutil.walk_packages(path, prefix=f"{root.__name__}."):
        yield importlib.import_module(info.name)
