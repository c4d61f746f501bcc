from __future__ import annotations

import pytest

from confgraph.domain.metadata import (
    AnnotationAttributes,
    CachingMetadataReaderFactory,
    ClassNotFoundError,
    MetadataReadError,
    RecordedMetadataReaderFactory,
    default_component_name,
    introspect,
    is_platform_type,
    qualified_name,
    read_class,
    resolve_class,
)
from tests.support import configs

CONFIGURATION = "confgraph.domain.metadata.annotations.Configuration"
IMPORT = "confgraph.domain.metadata.annotations.Import"
BEAN = "confgraph.domain.metadata.annotations.Bean"


class _FailingReader:
    def __init__(self) -> None:
        self.calls = 0

    def get_metadata(self, class_name: str) -> object:
        self.calls += 1
        raise MetadataReadError(class_name, "unavailable")


def test_introspected_methods_follow_reflection_order() -> None:
    metadata = introspect(configs.DeclarationOrdered)

    assert [method.name for method in metadata.get_annotated_methods(BEAN)] == ["aardvark", "zebra"]
    assert metadata.is_introspected


def test_read_class_keeps_declaration_order() -> None:
    metadata = read_class(configs.DeclarationOrdered)

    assert [method.name for method in metadata.get_annotated_methods(BEAN)] == ["zebra", "aardvark"]
    assert not metadata.is_introspected


def test_read_class_reduces_class_values_to_names() -> None:
    introspected = introspect(configs.Root).get_annotation_attributes(IMPORT)
    recorded = read_class(configs.Root).get_annotation_attributes(IMPORT)

    assert introspected is not None
    assert recorded is not None
    assert introspected.get_tuple("value") == (configs.Helper, configs.AutoA)
    assert recorded.get_tuple("value") == (
        qualified_name(configs.Helper),
        qualified_name(configs.AutoA),
    )
    assert introspected.get_class_names("value") == recorded.get_class_names("value")


def test_meta_annotations_are_collected_transitively() -> None:
    metadata = introspect(configs.FeatureUser)
    enable_feature = qualified_name(configs.EnableFeature)

    assert metadata.annotation_types == (enable_feature, IMPORT)
    assert metadata.meta_annotation_types[enable_feature] == (IMPORT,)
    assert metadata.is_annotated(IMPORT)
    assert not metadata.is_annotated(CONFIGURATION)


def test_hierarchy_and_members_are_recorded() -> None:
    mixed = introspect(configs.MixedConfig)
    outer = introspect(configs.Outer)

    assert mixed.superclass_name == qualified_name(configs.PlainBase)
    assert mixed.interface_names == (qualified_name(configs.AuditMixin),)
    assert outer.member_class_names == (
        qualified_name(configs.Outer.Later),
        qualified_name(configs.Outer.Sooner),
        qualified_name(configs.Outer.NotConfiguration),
    )


def test_class_and_method_flags() -> None:
    final_config = introspect(configs.FinalConfig)
    producer = {method.name: method for method in introspect(configs.FinalProducer).methods}
    audit = {method.name: method for method in introspect(configs.AuditMixin).methods}

    assert final_config.is_final
    assert producer["locked"].is_final
    assert not producer["locked"].is_static
    assert producer["static_locked"].is_static
    assert audit["audit_sink"].is_abstract
    assert not audit["audit_log"].is_abstract


def test_resolve_class_walks_nested_classes() -> None:
    assert resolve_class(f"{configs.MODULE}.Outer.Sooner") is configs.Outer.Sooner
    assert resolve_class("builtins.object") is object


def test_resolve_class_reports_missing_classes() -> None:
    with pytest.raises(ClassNotFoundError, match="DoesNotExist"):
        resolve_class(f"{configs.MODULE}.DoesNotExist")
    with pytest.raises(ClassNotFoundError):
        resolve_class("no_such_package.Thing")
    with pytest.raises(ClassNotFoundError, match="is not a class"):
        resolve_class(f"{configs.MODULE}.MODULE")


def test_platform_types() -> None:
    assert is_platform_type("builtins.object")
    assert is_platform_type("typing.Protocol")
    assert not is_platform_type(qualified_name(configs.Helper))


def test_default_component_name() -> None:
    assert default_component_name("pkg.mod.FooConfig") == "fooConfig"
    assert default_component_name("pkg.mod.URLConfig") == "URLConfig"
    assert default_component_name("Single") == "single"


def test_annotation_attributes_accessors() -> None:
    attributes = AnnotationAttributes(
        "example.Annotation",
        {"value": "one", "flag": 1, "order": "3", "reader": configs.LegacyReader, "blank": None},
    )

    assert attributes.get_tuple("value") == ("one",)
    assert attributes.get_strings("value") == ("one",)
    assert attributes.get_bool("flag") is True
    assert attributes.get_int("order") == 3
    assert attributes.get_int("blank") is None
    assert attributes.get_string("blank") == ""
    assert attributes.get_class_name("reader") == qualified_name(configs.LegacyReader)
    assert attributes.with_class_names()["reader"] == qualified_name(configs.LegacyReader)
    with pytest.raises(TypeError, match="expected str"):
        attributes.get_string("flag")


def test_recorded_reader_wraps_missing_classes() -> None:
    with pytest.raises(MetadataReadError):
        RecordedMetadataReaderFactory().get_metadata(f"{configs.MODULE}.DoesNotExist")


def test_caching_reader_falls_through_delegates_and_caches() -> None:
    failing = _FailingReader()
    factory = CachingMetadataReaderFactory(failing, RecordedMetadataReaderFactory())  # type: ignore[arg-type]
    class_name = qualified_name(configs.Helper)

    first = factory.get_metadata(class_name)
    second = factory.get_metadata(class_name)

    assert first is second
    assert failing.calls == 1
    factory.clear_cache()
    factory.get_metadata(class_name)
    assert failing.calls == 2


def test_caching_reader_raises_when_no_delegate_succeeds() -> None:
    factory = CachingMetadataReaderFactory(_FailingReader())  # type: ignore[arg-type]

    with pytest.raises(MetadataReadError, match="no reader could provide metadata"):
        factory.get_metadata("anything.At.All")
