"""Merge ``PropertySource`` declarations into the environment's layer set."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from confgraph.domain.environment import (
    CompositePropertyLayer,
    DefaultPropertyLayerFactory,
    EncodedResource,
    ResourcePropertyLayer,
    UnresolvablePlaceholderError,
)
from confgraph.domain.metadata import resolve_class

from .capabilities import instantiate

if TYPE_CHECKING:
    from confgraph.domain.environment import (
        Environment,
        PropertyLayer,
        PropertyLayerFactory,
        ResourceLoader,
    )
    from confgraph.domain.metadata import AnnotationAttributes

log = getLogger(__name__)


class PropertySourceMerger:
    """Add declared property layers in declaration-aware precedence.

    Layers from later declarations take precedence over earlier ones but never
    over layers that were present before the first declaration was merged. Two
    declarations sharing a name collapse into one composite layer, the newer
    contribution first.
    """

    def __init__(
        self,
        environment: Environment,
        resource_loader: ResourceLoader,
        *,
        default_factory: PropertyLayerFactory | None = None,
    ) -> None:
        self.environment = environment
        self.resource_loader = resource_loader
        self.default_factory = default_factory or DefaultPropertyLayerFactory()
        self.names: list[str] = []

    def merge_in(self, attributes: AnnotationAttributes) -> None:
        name = attributes.get_string("name") or None
        encoding = attributes.get_string("encoding") or None
        locations = attributes.get_strings("value")
        if not locations:
            raise ValueError("At least one PropertySource(value) location is required")
        ignore_resource_not_found = attributes.get_bool("ignore_resource_not_found")
        factory = self._factory(attributes.get_class_name("factory"))

        for location in locations:
            try:
                resolved = self.environment.resolve_required_placeholders(location)
                resource = self.resource_loader.get_resource(resolved)
                layer = factory.create_layer(name, EncodedResource(resource, encoding))
            except (UnresolvablePlaceholderError, FileNotFoundError) as exc:
                if not ignore_resource_not_found:
                    raise
                log.info("Properties location [%s] not resolvable: %s", location, exc)
                continue
            self.add_layer(layer)

    def add_layer(self, layer: PropertyLayer) -> None:
        layers = self.environment.property_layers
        name = layer.name

        if name in self.names:
            existing = layers.get(name)
            if existing is not None:
                new_layer = _with_resource_name(layer)
                if isinstance(existing, CompositePropertyLayer):
                    existing.add_first_layer(new_layer)
                else:
                    composite = CompositePropertyLayer(name)
                    composite.add_layer(new_layer)
                    composite.add_layer(_with_resource_name(existing))
                    layers.replace(name, composite)
                log.debug("Merged property layer [%s] into existing layer", name)
                return

        anchor = self._anchor(name)
        if anchor is None:
            layers.add_last(layer)
        else:
            layers.add_before(anchor, layer)
        if name not in self.names:
            self.names.append(name)
        log.debug("Added property layer [%s]", name)

    def _anchor(self, name: str) -> str | None:
        """The most recently merged layer still present, other than ``name``."""

        layers = self.environment.property_layers
        for recorded in reversed(self.names):
            if recorded != name and recorded in layers:
                return recorded
        return None

    def _factory(self, factory_class_name: str | None) -> PropertyLayerFactory:
        if factory_class_name is None:
            return self.default_factory
        factory_class = resolve_class(factory_class_name)
        if factory_class is DefaultPropertyLayerFactory:
            return self.default_factory
        return instantiate(factory_class, object)  # type: ignore[return-value]


def _with_resource_name(layer: PropertyLayer) -> PropertyLayer:
    if isinstance(layer, ResourcePropertyLayer):
        return layer.with_resource_name()
    return layer
