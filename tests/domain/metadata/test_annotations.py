from __future__ import annotations

import pytest

from confgraph.domain.metadata import (
    LOWEST_PRECEDENCE,
    Bean,
    Configuration,
    Import,
    Order,
    PropertySource,
    annotations_of,
)


def test_single_positional_argument_sets_value() -> None:
    annotation = Order(5)

    assert annotation.value == 5
    assert annotation.attributes == {"value": 5}


def test_several_positional_arguments_become_a_tuple() -> None:
    annotation = Import("a.B", "c.D")

    assert annotation.value == ("a.B", "c.D")


def test_defaults_fill_unspecified_attributes() -> None:
    annotation = PropertySource("app.properties")

    assert annotation.name == ""
    assert annotation.ignore_resource_not_found is False
    assert Order().value == LOWEST_PRECEDENCE


def test_unknown_attribute_raises() -> None:
    with pytest.raises(AttributeError, match="has no attribute 'missing'"):
        _ = Configuration().missing


def test_decorator_records_annotations_in_source_order() -> None:
    @Configuration()
    @Order(1)
    class Declared:
        pass

    assert [type(item) for item in annotations_of(Declared)] == [Configuration, Order]


def test_annotations_are_not_inherited() -> None:
    @Configuration()
    class Parent:
        pass

    class Child(Parent):
        pass

    assert annotations_of(Child) == ()


def test_non_repeatable_annotation_declared_twice_is_rejected() -> None:
    with pytest.raises(TypeError, match="is not repeatable"):

        @Order(1)
        @Order(2)
        class Twice:
            pass


def test_repeatable_annotation_may_be_declared_twice() -> None:
    @PropertySource("first.properties")
    @PropertySource("second.properties")
    class Twice:
        pass

    assert [item.value for item in annotations_of(Twice)] == ["first.properties", "second.properties"]


def test_method_annotations_survive_staticmethod() -> None:
    class Holder:
        @Bean()
        @staticmethod
        def produce() -> str:
            return "value"

    assert [type(item) for item in annotations_of(vars(Holder)["produce"])] == [Bean]
