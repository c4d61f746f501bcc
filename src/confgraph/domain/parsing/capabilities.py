"""Import capabilities: selectors, deferred selectors and groups, registrars.

An imported class is classified exactly once into an ``ImportKind``; the import
processor then branches on that kind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, TypeVar

from .errors import InstantiationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from confgraph.domain.environment import Environment, ResourceLoader
    from confgraph.domain.metadata import AnnotationMetadata
    from confgraph.domain.ports import DefinitionRegistry


class ImportSelector(ABC):
    """Computes further import class names from the importing class' metadata."""

    @abstractmethod
    def select_imports(self, metadata: AnnotationMetadata) -> Sequence[str]: ...


class DeferredImportSelector(ImportSelector):
    """A selector resolved only after every top-level candidate has been parsed."""

    def import_group(self) -> type[ImportGroup] | None:
        return None


@dataclass(frozen=True, slots=True)
class GroupEntry:
    """An import class name together with the metadata of the class that asked for it."""

    metadata: AnnotationMetadata
    import_class_name: str


class ImportGroup(ABC):
    """Combines the output of several deferred selectors.

    ``process`` is called once per member selector; ``select_imports`` then
    returns the final entries, possibly filtered or reordered across members.
    """

    @abstractmethod
    def process(self, metadata: AnnotationMetadata, selector: DeferredImportSelector) -> None: ...

    @abstractmethod
    def select_imports(self) -> Iterable[GroupEntry]: ...


class DefaultImportGroup(ImportGroup):
    def __init__(self) -> None:
        self._imports: list[GroupEntry] = []

    def process(self, metadata: AnnotationMetadata, selector: DeferredImportSelector) -> None:
        for import_class_name in selector.select_imports(metadata):
            self._imports.append(GroupEntry(metadata=metadata, import_class_name=import_class_name))

    def select_imports(self) -> Iterable[GroupEntry]:
        return self._imports


class ImportRegistrar(ABC):
    """Registers arbitrary definitions on behalf of the importing class."""

    @abstractmethod
    def register_definitions(
        self, metadata: AnnotationMetadata, registry: DefinitionRegistry
    ) -> None: ...


class EnvironmentAware(ABC):
    @abstractmethod
    def set_environment(self, environment: Environment) -> None: ...


class ResourceLoaderAware(ABC):
    @abstractmethod
    def set_resource_loader(self, resource_loader: ResourceLoader) -> None: ...


class RegistryAware(ABC):
    @abstractmethod
    def set_registry(self, registry: DefinitionRegistry) -> None: ...


def invoke_aware_methods(
    instance: object,
    *,
    environment: Environment,
    resource_loader: ResourceLoader,
    registry: DefinitionRegistry,
) -> None:
    if isinstance(instance, RegistryAware):
        instance.set_registry(registry)
    if isinstance(instance, EnvironmentAware):
        instance.set_environment(environment)
    if isinstance(instance, ResourceLoaderAware):
        instance.set_resource_loader(resource_loader)


class ImportKind(StrEnum):
    SELECTOR = "selector"
    REGISTRAR = "registrar"
    CONFIGURATION = "configuration"


T = TypeVar("T")


def instantiate(cls: type, expected: type[T]) -> T:
    """Create ``cls()`` and check it provides ``expected``."""

    if isinstance(cls, type) and getattr(cls, "_is_protocol", False):
        raise InstantiationError(cls, "protocols cannot be instantiated")
    try:
        instance = cls()
    except Exception as exc:
        raise InstantiationError(cls, str(exc) or type(exc).__name__) from exc
    if not isinstance(instance, expected):
        raise InstantiationError(cls, f"not an instance of {expected.__name__}")
    return instance
