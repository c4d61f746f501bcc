"""In-memory definition registry."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from confgraph.domain.ports import ComponentDefinition

log = getLogger(__name__)


class InMemoryDefinitionRegistry:
    """Definitions keyed by name, in registration order. Re-registering a name replaces it."""

    def __init__(self) -> None:
        self._definitions: dict[str, ComponentDefinition] = {}

    def register_definition(self, definition: ComponentDefinition) -> None:
        if definition.name in self._definitions:
            log.debug("Overriding definition %r with %s", definition.name, definition.class_name)
        self._definitions[definition.name] = definition

    def contains_definition(self, name: str) -> bool:
        return name in self._definitions

    def get_definition(self, name: str) -> ComponentDefinition | None:
        return self._definitions.get(name)

    def definition_names(self) -> tuple[str, ...]:
        return tuple(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)
