"""Turn resources into property layers."""

from __future__ import annotations

import io
import json
import tomllib
from typing import TYPE_CHECKING, Any, Protocol

from dotenv import dotenv_values

from confgraph.config import DEFAULT_ENCODING

from .layers import ResourcePropertyLayer

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .layers import PropertyLayer
    from .resources import EncodedResource


class PropertyLayerFactory(Protocol):
    def create_layer(self, name: str | None, resource: EncodedResource) -> PropertyLayer: ...


class DefaultPropertyLayerFactory:
    """One ``ResourcePropertyLayer`` per resource.

    The format follows the file suffix: ``.toml`` and ``.json`` documents are
    flattened into dotted keys, anything else is read as ``key=value`` lines
    (``.properties``/``.env`` style). Without a declared ``name`` the layer is
    named after the resource's description.
    """

    def __init__(self, *, default_encoding: str = DEFAULT_ENCODING) -> None:
        self.default_encoding = default_encoding

    def create_layer(self, name: str | None, resource: EncodedResource) -> ResourcePropertyLayer:
        text = resource.read_text(self.default_encoding)
        filename = resource.resource.filename.lower()
        if filename.endswith(".toml"):
            properties = flatten(tomllib.loads(text))
        elif filename.endswith(".json"):
            document = json.loads(text)
            if not isinstance(document, dict):
                raise ValueError(f"{resource.resource.description} must contain a JSON object")
            properties = flatten(document)
        else:
            properties = parse_properties(text)
        return ResourcePropertyLayer(name, properties, resource=resource.resource)


def parse_properties(text: str) -> dict[str, object]:
    values = dotenv_values(stream=io.StringIO(text), interpolate=False)
    return {key: value if value is not None else "" for key, value in values.items()}


def flatten(document: Mapping[str, Any], prefix: str = "") -> dict[str, object]:
    flat: dict[str, object] = {}
    for key, value in document.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten(value, f"{dotted}."))
        elif isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, dict):
                    flat.update(flatten(item, f"{dotted}[{index}]."))
                else:
                    flat[f"{dotted}[{index}]"] = item
        else:
            flat[dotted] = value
    return flat
