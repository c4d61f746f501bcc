"""Ports for the component-scan collaborator and the definition registry sink."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from confgraph.domain.metadata import AnnotationAttributes, AnnotationMetadata


@dataclass(frozen=True, slots=True)
class ComponentDefinition:
    """A named component candidate.

    Exactly one of ``component_class`` (a loaded class) or ``metadata`` (scanned
    or statically read) is usually set; ``class_name`` is always present.
    ``originating`` points at the definition this one was derived from.
    """

    name: str
    class_name: str
    component_class: type | None = None
    metadata: AnnotationMetadata | None = None
    originating: ComponentDefinition | None = None

    @property
    def source_definition(self) -> ComponentDefinition:
        return self.originating or self


class DefinitionRegistry(Protocol):
    def register_definition(self, definition: ComponentDefinition) -> None: ...

    def contains_definition(self, name: str) -> bool: ...

    def get_definition(self, name: str) -> ComponentDefinition | None: ...

    def definition_names(self) -> tuple[str, ...]: ...


class ComponentScanner(Protocol):
    """Finds component candidates for one ``ComponentScan`` declaration."""

    def scan(
        self, attributes: AnnotationAttributes, declaring_class: str
    ) -> Sequence[ComponentDefinition]: ...
