"""Named property layers and their ordered container.

Layers are looked up front to back: the first layer that defines a key wins.
Downstream consumers address layers by name, so names and composite semantics
are part of the contract.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .resources import Resource


class PropertyLayer:
    """A named source of string-keyed properties."""

    def __init__(self, name: str, source: object) -> None:
        if not name:
            raise ValueError("Property layer name must not be empty")
        self.name = name
        self.source = source

    def get_property(self, key: str) -> object | None:
        raise NotImplementedError

    def contains_property(self, key: str) -> bool:
        return self.get_property(key) is not None

    def property_names(self) -> tuple[str, ...]:
        return ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class MapPropertyLayer(PropertyLayer):
    source: Mapping[str, object]

    def __init__(self, name: str, source: Mapping[str, object]) -> None:
        super().__init__(name, dict(source))

    def get_property(self, key: str) -> object | None:
        return self.source.get(key)

    def contains_property(self, key: str) -> bool:
        return key in self.source

    def property_names(self) -> tuple[str, ...]:
        return tuple(self.source)


class ResourcePropertyLayer(MapPropertyLayer):
    """Properties loaded from a resource; remembers the resource's description."""

    def __init__(
        self, name: str | None, source: Mapping[str, object], *, resource: Resource
    ) -> None:
        self.resource = resource
        self.resource_name = resource.description
        super().__init__(name or self.resource_name, source)

    def with_resource_name(self) -> ResourcePropertyLayer:
        """The same properties, named after the backing resource."""

        if self.name == self.resource_name:
            return self
        return ResourcePropertyLayer(None, self.source, resource=self.resource)


class CompositePropertyLayer(PropertyLayer):
    """Several layers exposed under a single name, searched in order."""

    source: list[PropertyLayer]

    def __init__(self, name: str) -> None:
        super().__init__(name, [])

    @property
    def layers(self) -> tuple[PropertyLayer, ...]:
        return tuple(self.source)

    def add_layer(self, layer: PropertyLayer) -> None:
        self.source.append(layer)

    def add_first_layer(self, layer: PropertyLayer) -> None:
        self.source.insert(0, layer)

    def get_property(self, key: str) -> object | None:
        for layer in self.source:
            value = layer.get_property(key)
            if value is not None:
                return value
        return None

    def contains_property(self, key: str) -> bool:
        return any(layer.contains_property(key) for layer in self.source)

    def property_names(self) -> tuple[str, ...]:
        names: dict[str, None] = {}
        for layer in self.source:
            for name in layer.property_names():
                names.setdefault(name, None)
        return tuple(names)


class PropertyLayers:
    """Ordered, name-unique set of property layers (highest precedence first)."""

    def __init__(self, layers: list[PropertyLayer] | None = None) -> None:
        self._layers: list[PropertyLayer] = []
        for layer in layers or ():
            self.add_last(layer)

    def __iter__(self) -> Iterator[PropertyLayer]:
        return iter(tuple(self._layers))

    def __len__(self) -> int:
        return len(self._layers)

    def __contains__(self, name: object) -> bool:
        return any(layer.name == name for layer in self._layers)

    def names(self) -> tuple[str, ...]:
        return tuple(layer.name for layer in self._layers)

    def get(self, name: str) -> PropertyLayer | None:
        for layer in self._layers:
            if layer.name == name:
                return layer
        return None

    def add_first(self, layer: PropertyLayer) -> None:
        self._remove_if_present(layer.name)
        self._layers.insert(0, layer)

    def add_last(self, layer: PropertyLayer) -> None:
        self._remove_if_present(layer.name)
        self._layers.append(layer)

    def add_before(self, relative_name: str, layer: PropertyLayer) -> None:
        self._assert_legal_relative(relative_name, layer)
        self._remove_if_present(layer.name)
        self._layers.insert(self._require_index(relative_name), layer)

    def add_after(self, relative_name: str, layer: PropertyLayer) -> None:
        self._assert_legal_relative(relative_name, layer)
        self._remove_if_present(layer.name)
        self._layers.insert(self._require_index(relative_name) + 1, layer)

    def replace(self, name: str, layer: PropertyLayer) -> None:
        self._layers[self._require_index(name)] = layer

    def remove(self, name: str) -> PropertyLayer | None:
        index = self._index_of(name)
        if index is None:
            return None
        return self._layers.pop(index)

    def _index_of(self, name: str) -> int | None:
        for index, layer in enumerate(self._layers):
            if layer.name == name:
                return index
        return None

    def _require_index(self, name: str) -> int:
        index = self._index_of(name)
        if index is None:
            raise ValueError(f"Property layer named {name!r} does not exist")
        return index

    def _remove_if_present(self, name: str) -> None:
        index = self._index_of(name)
        if index is not None:
            del self._layers[index]

    @staticmethod
    def _assert_legal_relative(relative_name: str, layer: PropertyLayer) -> None:
        if relative_name == layer.name:
            raise ValueError(f"Property layer named {relative_name!r} cannot be added relative to itself")
