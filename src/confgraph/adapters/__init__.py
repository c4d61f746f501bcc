"""Adapters: class manifests, component scanning and the definition registry."""

from __future__ import annotations

from .registry import InMemoryDefinitionRegistry
from .scanning import ConflictingDefinitionError, ModuleComponentScanner

__all__ = [
    "ConflictingDefinitionError",
    "InMemoryDefinitionRegistry",
    "ModuleComponentScanner",
]
