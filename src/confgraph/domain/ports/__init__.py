"""Domain port definitions for adapters."""

from __future__ import annotations

from .scanning import ComponentDefinition, ComponentScanner, DefinitionRegistry

__all__ = ["ComponentDefinition", "ComponentScanner", "DefinitionRegistry"]
