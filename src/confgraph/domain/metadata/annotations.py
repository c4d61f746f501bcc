"""Annotation types attached to configuration classes and producer methods.

Annotations are plain instances recorded on the decorated target: every
``Annotation`` doubles as a decorator, so ``@Import(Other)`` stores the
``Import`` instance on the class and returns the class untouched. Annotation
*types* are ordinary classes and may carry annotations themselves, which is how
meta-annotations (``@EnableCaching`` importing a caching configuration) work.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final, TypeVar

if TYPE_CHECKING:
    from collections.abc import Mapping

T = TypeVar("T")

ANNOTATIONS_ATTRIBUTE: Final[str] = "__confgraph_annotations__"

HIGHEST_PRECEDENCE: Final[int] = -(2**31)
LOWEST_PRECEDENCE: Final[int] = 2**31 - 1


class Annotation:
    """Declarative marker attached to a class or function.

    A single positional argument populates ``value``; several positional
    arguments populate it as a tuple. Keyword arguments set named attributes and
    unspecified attributes fall back to ``defaults``.

    Scan filters look for an ``inherited`` annotation type on superclasses too.
    """

    repeatable: ClassVar[bool] = False
    inherited: ClassVar[bool] = False
    defaults: ClassVar[Mapping[str, object]] = {}
    class_attributes: ClassVar[frozenset[str]] = frozenset()

    __slots__ = ("_attributes",)

    def __init__(self, *value: object, **attributes: object) -> None:
        merged: dict[str, object] = dict(self.defaults)
        if len(value) == 1:
            merged["value"] = value[0]
        elif value:
            merged["value"] = value
        merged.update(attributes)
        self._attributes = merged

    @property
    def attributes(self) -> dict[str, object]:
        return dict(self._attributes)

    def __getattr__(self, name: str) -> Any:
        if name == "_attributes":
            raise AttributeError(name)
        try:
            return self._attributes[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no attribute {name!r}"
            ) from None

    def __call__(self, target: T) -> T:
        holder = getattr(target, "__func__", target)
        existing: tuple[Annotation, ...] = _own_annotations(holder)
        if not self.repeatable and any(type(item) is type(self) for item in existing):
            raise TypeError(
                f"{type(self).__name__} is not repeatable but is declared twice on {holder!r}"
            )
        # decorators apply bottom-up; prepend to keep source order
        setattr(holder, ANNOTATIONS_ATTRIBUTE, (self, *existing))
        return target

    def __repr__(self) -> str:
        rendered = ", ".join(f"{key}={value!r}" for key, value in self._attributes.items())
        return f"@{type(self).__name__}({rendered})"


def _own_annotations(target: object) -> tuple[Annotation, ...]:
    namespace = getattr(target, "__dict__", None)
    if namespace is None:
        return ()
    return tuple(namespace.get(ANNOTATIONS_ATTRIBUTE, ()))


def annotations_of(target: object) -> tuple[Annotation, ...]:
    """Annotations declared directly on ``target``; inherited ones are not included."""

    return _own_annotations(getattr(target, "__func__", target))


class Configuration(Annotation):
    """Marks a full configuration class."""

    defaults: ClassVar[Mapping[str, object]] = {"value": "", "proxy_bean_methods": True}


class Component(Annotation):
    """Marks a component; ``value`` optionally names it."""

    defaults: ClassVar[Mapping[str, object]] = {"value": ""}


class Import(Annotation):
    """Imports configuration classes, selectors or registrars."""

    defaults: ClassVar[Mapping[str, object]] = {"value": ()}
    class_attributes: ClassVar[frozenset[str]] = frozenset({"value"})


class ImportResource(Annotation):
    defaults: ClassVar[Mapping[str, object]] = {"value": (), "locations": (), "reader": None}
    class_attributes: ClassVar[frozenset[str]] = frozenset({"reader"})


class PropertySource(Annotation):
    """Declares resource-backed property layers to merge into the environment."""

    repeatable: ClassVar[bool] = True
    defaults: ClassVar[Mapping[str, object]] = {
        "name": "",
        "value": (),
        "ignore_resource_not_found": False,
        "encoding": "",
        "factory": None,
    }
    class_attributes: ClassVar[frozenset[str]] = frozenset({"factory"})


class ComponentScan(Annotation):
    repeatable: ClassVar[bool] = True
    defaults: ClassVar[Mapping[str, object]] = {
        "value": (),
        "base_packages": (),
        "base_package_classes": (),
        "use_default_filters": True,
        "include_filters": (),
        "exclude_filters": (),
    }
    class_attributes: ClassVar[frozenset[str]] = frozenset({"base_package_classes"})


class Order(Annotation):
    defaults: ClassVar[Mapping[str, object]] = {"value": LOWEST_PRECEDENCE}


class Conditional(Annotation):
    """Gates a class on one or more condition classes."""

    defaults: ClassVar[Mapping[str, object]] = {"value": ()}
    class_attributes: ClassVar[frozenset[str]] = frozenset({"value"})


class Bean(Annotation):
    """Marks a producer method."""

    defaults: ClassVar[Mapping[str, object]] = {
        "name": (),
        "init_method": "",
        "destroy_method": "",
    }
