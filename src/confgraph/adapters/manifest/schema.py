"""Pydantic models describing the JSON class manifest.

A manifest records class declarations ahead of time so configuration classes
can be read statically, without importing the modules that define them::

    {
      "classes": [
        {
          "name": "shop.config.ShopConfig",
          "annotations": [
            {"type": "confgraph.domain.metadata.annotations.Configuration"},
            {"type": "confgraph.domain.metadata.annotations.Import",
             "attributes": {"value": ["shop.config.PaymentConfig"]}}
          ],
          "superclass": "builtins.object",
          "methods": [
            {"name": "checkout",
             "annotations": [{"type": "confgraph.domain.metadata.annotations.Bean"}]}
          ]
        }
      ]
    }
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ManifestAnnotation(ManifestBaseModel):
    type: str
    attributes: dict[str, Any] = Field(default_factory=dict)


class ManifestMethod(ManifestBaseModel):
    name: str
    annotations: list[ManifestAnnotation] = Field(default_factory=list)
    is_abstract: bool = Field(default=False, alias="abstract")
    is_static: bool = Field(default=False, alias="static")
    is_final: bool = Field(default=False, alias="final")


class ManifestClass(ManifestBaseModel):
    name: str
    annotations: list[ManifestAnnotation] = Field(default_factory=list)
    meta_annotations: dict[str, list[str]] = Field(default_factory=dict)
    superclass: str | None = "builtins.object"
    interfaces: list[str] = Field(default_factory=list)
    member_classes: list[str] = Field(default_factory=list)
    methods: list[ManifestMethod] = Field(default_factory=list)
    is_interface: bool = Field(default=False, alias="interface")
    is_abstract: bool = Field(default=False, alias="abstract")
    is_final: bool = Field(default=False, alias="final")

    _normalize_superclass = field_validator("superclass", mode="before")(_blank_to_none)


class Manifest(ManifestBaseModel):
    classes: list[ManifestClass] = Field(default_factory=list)
