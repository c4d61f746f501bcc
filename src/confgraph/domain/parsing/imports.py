"""Import stack and recursive collection of declared imports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from confgraph.domain.metadata import Import, is_platform_type, qualified_name

if TYPE_CHECKING:
    from collections.abc import Iterator

    from confgraph.domain.metadata import AnnotationMetadata

    from .model import ConfigurationClass
    from .source import SourceView

IMPORT: Final[str] = qualified_name(Import)


class ImportStack:
    """Configuration classes currently being resolved, plus import provenance.

    Besides the push/pop stack it records, for every imported class name, the
    metadata of each class that imported it; the most recent importer answers
    provenance lookups.
    """

    def __init__(self) -> None:
        self._stack: list[ConfigurationClass] = []
        self._imports: dict[str, list[AnnotationMetadata]] = {}

    def push(self, configuration_class: ConfigurationClass) -> None:
        self._stack.append(configuration_class)

    def pop(self) -> ConfigurationClass:
        return self._stack.pop()

    def peek(self) -> ConfigurationClass | None:
        return self._stack[-1] if self._stack else None

    def __contains__(self, item: object) -> bool:
        return item in self._stack

    def __iter__(self) -> Iterator[ConfigurationClass]:
        return iter(tuple(self._stack))

    def __len__(self) -> int:
        return len(self._stack)

    def register_import(self, importing: AnnotationMetadata, imported_class_name: str) -> None:
        self._imports.setdefault(imported_class_name, []).append(importing)

    def importing_metadata_for(self, imported_class_name: str) -> AnnotationMetadata | None:
        importers = self._imports.get(imported_class_name)
        return importers[-1] if importers else None

    def is_chained_import(self, configuration_class: ConfigurationClass) -> bool:
        """Whether the provenance chain of an on-stack class leads back to itself."""

        if configuration_class not in self:
            return False
        class_name = configuration_class.class_name
        importing = self.importing_metadata_for(class_name)
        seen: set[str] = set()
        while importing is not None and importing.class_name not in seen:
            if importing.class_name == class_name:
                return True
            seen.add(importing.class_name)
            importing = self.importing_metadata_for(importing.class_name)
        return False

    def __str__(self) -> str:
        """``[Foo->Bar->Baz]`` for a stack pushed with Foo, then Bar, then Baz."""

        return "[" + "->".join(item.simple_name for item in self._stack) + "]"


def collect_imports(source: SourceView) -> list[SourceView]:
    """All classes named by ``Import`` on ``source`` and, transitively, its annotations.

    Unlike most annotation lookups every ``Import`` found counts: a class may
    declare direct imports next to an enabling annotation that imports more.
    """

    imports: dict[SourceView, None] = {}
    _collect(source, imports, visited=set())
    return list(imports)


def _collect(source: SourceView, imports: dict[SourceView, None], visited: set[SourceView]) -> None:
    if source in visited:
        return
    visited.add(source)
    for annotation in source.annotations():
        name = annotation.class_name
        if not is_platform_type(name) and name != IMPORT:
            _collect(annotation, imports, visited)
    for imported in source.annotation_attribute_views(IMPORT, "value"):
        imports.setdefault(imported, None)
