"""Environment: property lookup across layers and ``${...}`` placeholder resolution."""

from __future__ import annotations

import os
from typing import Final

from .layers import MapPropertyLayer, PropertyLayers

SYSTEM_ENVIRONMENT_LAYER: Final[str] = "system_environment"

PLACEHOLDER_PREFIX: Final[str] = "${"
PLACEHOLDER_SUFFIX: Final[str] = "}"
VALUE_SEPARATOR: Final[str] = ":"


class UnresolvablePlaceholderError(ValueError):
    """Raised when a required placeholder has neither a value nor a default."""

    def __init__(self, placeholder: str, text: str) -> None:
        self.placeholder = placeholder
        self.text = text
        super().__init__(f"Could not resolve placeholder {placeholder!r} in value {text!r}")


class CircularPlaceholderError(ValueError):
    def __init__(self, placeholder: str) -> None:
        self.placeholder = placeholder
        super().__init__(f"Circular placeholder reference {placeholder!r}")


class Environment:
    """Property layers plus the placeholder syntax used by declarations.

    ``${key}`` is replaced by the first layer defining ``key``; ``${key:fallback}``
    supplies a default. Values are resolved recursively and placeholders may nest
    inside keys (``${${which}.url}``).
    """

    def __init__(
        self,
        layers: PropertyLayers | None = None,
        *,
        include_system_environment: bool = True,
    ) -> None:
        self.property_layers = layers if layers is not None else PropertyLayers()
        if include_system_environment and SYSTEM_ENVIRONMENT_LAYER not in self.property_layers:
            self.property_layers.add_last(
                MapPropertyLayer(SYSTEM_ENVIRONMENT_LAYER, dict(os.environ))
            )

    def contains_property(self, key: str) -> bool:
        return any(layer.contains_property(key) for layer in self.property_layers)

    def get_property(self, key: str, default: str | None = None) -> str | None:
        for layer in self.property_layers:
            value = layer.get_property(key)
            if value is not None:
                return self.resolve_placeholders(str(value))
        return default

    def resolve_placeholders(self, text: str) -> str:
        """Resolve what can be resolved; unknown placeholders are left verbatim."""

        return self._parse(text, text, ignore_unresolvable=True, visiting=set())

    def resolve_required_placeholders(self, text: str) -> str:
        return self._parse(text, text, ignore_unresolvable=False, visiting=set())

    def _raw_property(self, key: str) -> str | None:
        for layer in self.property_layers:
            value = layer.get_property(key)
            if value is not None:
                return str(value)
        return None

    def _parse(self, value: str, original: str, *, ignore_unresolvable: bool, visiting: set[str]) -> str:
        start = value.find(PLACEHOLDER_PREFIX)
        if start == -1:
            return value
        result: list[str] = []
        cursor = 0
        while start != -1:
            end = _find_placeholder_end(value, start)
            if end == -1:
                break
            result.append(value[cursor:start])
            placeholder = value[start + len(PLACEHOLDER_PREFIX) : end]
            result.append(
                self._resolve_placeholder(
                    placeholder,
                    original,
                    ignore_unresolvable=ignore_unresolvable,
                    visiting=visiting,
                )
            )
            cursor = end + len(PLACEHOLDER_SUFFIX)
            start = value.find(PLACEHOLDER_PREFIX, cursor)
        result.append(value[cursor:])
        return "".join(result)

    def _resolve_placeholder(
        self, placeholder: str, original: str, *, ignore_unresolvable: bool, visiting: set[str]
    ) -> str:
        if placeholder in visiting:
            raise CircularPlaceholderError(placeholder)
        visiting.add(placeholder)
        try:
            key = self._parse(
                placeholder, original, ignore_unresolvable=ignore_unresolvable, visiting=visiting
            )
            default: str | None = None
            separator = _find_separator(key)
            if separator != -1:
                key, default = key[:separator], key[separator + len(VALUE_SEPARATOR) :]
            raw = self._raw_property(key)
            if raw is None:
                raw = default
            if raw is None:
                if ignore_unresolvable:
                    return f"{PLACEHOLDER_PREFIX}{placeholder}{PLACEHOLDER_SUFFIX}"
                raise UnresolvablePlaceholderError(key, original)
            return self._parse(
                raw, original, ignore_unresolvable=ignore_unresolvable, visiting=visiting
            )
        finally:
            visiting.discard(placeholder)


def _find_placeholder_end(value: str, start: int) -> int:
    depth = 0
    index = start + len(PLACEHOLDER_PREFIX)
    while index < len(value):
        if value.startswith(PLACEHOLDER_PREFIX, index):
            depth += 1
            index += len(PLACEHOLDER_PREFIX)
        elif value.startswith(PLACEHOLDER_SUFFIX, index):
            if depth == 0:
                return index
            depth -= 1
            index += len(PLACEHOLDER_SUFFIX)
        else:
            index += 1
    return -1


def _find_separator(key: str) -> int:
    # a separator inside a nested placeholder belongs to that placeholder
    depth = 0
    index = 0
    while index < len(key):
        if key.startswith(PLACEHOLDER_PREFIX, index):
            depth += 1
            index += len(PLACEHOLDER_PREFIX)
            continue
        if key.startswith(PLACEHOLDER_SUFFIX, index) and depth:
            depth -= 1
        elif depth == 0 and key.startswith(VALUE_SEPARATOR, index):
            return index
        index += 1
    return -1
