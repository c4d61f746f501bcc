"""Resolved configuration classes and the model collecting them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .candidates import is_full_configuration_candidate
from .problems import Location, Problem

if TYPE_CHECKING:
    from collections.abc import Iterator

    from confgraph.domain.metadata import AnnotationMetadata, MethodMetadata

    from .capabilities import ImportRegistrar
    from .imports import ImportStack
    from .problems import ProblemReporter


@dataclass(frozen=True, slots=True)
class ProducerMethod:
    metadata: MethodMetadata
    configuration_class_name: str

    @property
    def name(self) -> str:
        return self.metadata.name


@dataclass(frozen=True, slots=True, eq=False)
class RegistrarAttachment:
    """A registrar together with the metadata of the class that imported it."""

    registrar: ImportRegistrar
    importing_metadata: AnnotationMetadata


@dataclass(eq=False, kw_only=True)
class ConfigurationClass:
    """One resolved configuration source.

    Identity is the dotted class name. ``imported_by`` holds the names of the
    classes that imported this one (an insertion-ordered set); it is empty for
    classes declared explicitly.
    """

    metadata: AnnotationMetadata
    resource: str
    definition_name: str | None = None
    imported_by: dict[str, None] = field(default_factory=dict[str, None])
    producer_methods: list[ProducerMethod] = field(default_factory=list[ProducerMethod])
    imported_resources: dict[str, str | None] = field(default_factory=dict[str, str | None])
    registrars: list[RegistrarAttachment] = field(default_factory=list[RegistrarAttachment])

    @property
    def class_name(self) -> str:
        return self.metadata.class_name

    @property
    def simple_name(self) -> str:
        return self.metadata.simple_name

    @property
    def is_imported(self) -> bool:
        return bool(self.imported_by)

    def merge_imported_by(self, other: ConfigurationClass) -> None:
        for name in other.imported_by:
            self.imported_by.setdefault(name, None)

    def add_producer_method(self, method: ProducerMethod) -> None:
        """Record ``method`` once, however many paths of the hierarchy reach it."""

        key = (method.metadata.declaring_class_name, method.name)
        if any(
            (existing.metadata.declaring_class_name, existing.name) == key
            for existing in self.producer_methods
        ):
            return
        self.producer_methods.append(method)

    def add_imported_resource(self, location: str, reader: str | None) -> None:
        self.imported_resources[location] = reader

    def add_registrar(self, registrar: ImportRegistrar, importing_metadata: AnnotationMetadata) -> None:
        self.registrars.append(
            RegistrarAttachment(registrar=registrar, importing_metadata=importing_metadata)
        )

    def validate(self, problem_reporter: ProblemReporter) -> None:
        """Full configuration classes must stay overridable.

        Neither the class nor its non-static producer methods may be marked
        ``typing.final``.
        """

        if not is_full_configuration_candidate(self.metadata):
            return
        if self.metadata.is_final:
            problem_reporter.error(
                Problem(
                    message=f"Configuration class '{self.simple_name}' may not be final",
                    location=Location(resource=self.resource, source=self.class_name),
                )
            )
        for method in self.producer_methods:
            if method.metadata.is_static or not method.metadata.is_final:
                continue
            problem_reporter.error(
                Problem(
                    message=(
                        f"Producer method '{method.name}' must not be final; "
                        f"change it to be overridable in '{self.simple_name}'"
                    ),
                    location=Location(
                        resource=self.resource,
                        source=f"{method.metadata.declaring_class_name}.{method.name}",
                    ),
                )
            )

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigurationClass) and other.class_name == self.class_name

    def __hash__(self) -> int:
        return hash(self.class_name)

    def __repr__(self) -> str:
        return f"ConfigurationClass({self.class_name!r})"


class ConfigurationModel:
    """Finalized configuration classes keyed by name, in finalization order.

    Also answers provenance lookups through the import registry of the parse
    that produced it.
    """

    def __init__(self, import_registry: ImportStack | None = None) -> None:
        self._classes: dict[str, ConfigurationClass] = {}
        self._import_registry = import_registry

    def __contains__(self, item: object) -> bool:
        if isinstance(item, ConfigurationClass):
            return item.class_name in self._classes
        return item in self._classes

    def __iter__(self) -> Iterator[ConfigurationClass]:
        return iter(tuple(self._classes.values()))

    def __len__(self) -> int:
        return len(self._classes)

    def get(self, class_name: str) -> ConfigurationClass | None:
        return self._classes.get(class_name)

    def put(self, configuration_class: ConfigurationClass) -> None:
        self._classes[configuration_class.class_name] = configuration_class

    def remove(self, class_name: str) -> ConfigurationClass | None:
        return self._classes.pop(class_name, None)

    def class_names(self) -> tuple[str, ...]:
        return tuple(self._classes)

    def importing_metadata_for(self, class_name: str) -> AnnotationMetadata | None:
        if self._import_registry is None:
            return None
        return self._import_registry.importing_metadata_for(class_name)

    def __repr__(self) -> str:
        return f"ConfigurationModel({list(self._classes)!r})"


def class_resource(class_name: str) -> str:
    """Resource description for a configuration class known only by its class."""

    return f"class [{class_name}]"
