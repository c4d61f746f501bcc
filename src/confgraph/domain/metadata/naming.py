"""Class naming helpers: qualified names, loading by name, platform types."""

from __future__ import annotations

import importlib
from typing import Final

from .errors import ClassNotFoundError

PLATFORM_PREFIXES: Final[tuple[str, ...]] = (
    "builtins.",
    "abc.",
    "typing.",
    "typing_extensions.",
    "collections.abc.",
    "dataclasses.",
)


def qualified_name(obj: object) -> str:
    """Return ``module.QualName`` for a class or function."""

    return f"{obj.__module__}.{obj.__qualname__}"  # type: ignore[attr-defined]


def simple_name(class_name: str) -> str:
    return class_name.rsplit(".", 1)[-1]


def package_name(class_name: str) -> str:
    return class_name.rsplit(".", 1)[0] if "." in class_name else ""


def is_platform_type(class_name: str) -> bool:
    """Whether ``class_name`` belongs to the interpreter's own type hierarchy."""

    return class_name.startswith(PLATFORM_PREFIXES)


def resolve_class(class_name: str) -> type:
    """Load a class from its dotted name.

    The longest importable module prefix is imported and the remaining parts are
    walked as attributes, which covers nested classes (``pkg.mod.Outer.Inner``).
    Import errors raised *inside* an existing module propagate unchanged.
    """

    parts = class_name.split(".")
    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        try:
            target: object = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            if exc.name is not None and (
                module_name == exc.name or module_name.startswith(f"{exc.name}.")
            ):
                continue
            raise
        for attribute in parts[index:]:
            try:
                target = getattr(target, attribute)
            except AttributeError:
                raise ClassNotFoundError(
                    class_name, f"module {module_name!r} has no attribute path {attribute!r}"
                ) from None
        if not isinstance(target, type):
            raise ClassNotFoundError(class_name, f"{type(target).__name__} is not a class")
        return target
    raise ClassNotFoundError(class_name)


def default_component_name(class_name: str) -> str:
    """``FooConfig`` becomes ``fooConfig``; names starting with two capitals are kept."""

    name = simple_name(class_name)
    if len(name) > 1 and name[0].isupper() and name[1].isupper():
        return name
    return name[:1].lower() + name[1:]
