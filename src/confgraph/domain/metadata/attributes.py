"""Read-only view over the attribute values of one declared annotation."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from .naming import qualified_name


class AnnotationAttributes(Mapping[str, object]):
    """Attribute map of one annotation occurrence.

    Values are stored as declared: class-valued attributes hold either the class
    itself (runtime metadata) or its dotted name (static metadata). The typed
    accessors hide that difference.
    """

    __slots__ = ("_values", "annotation_type")

    def __init__(self, annotation_type: str, values: Mapping[str, object] | None = None) -> None:
        self.annotation_type = annotation_type
        self._values: dict[str, object] = dict(values or {})

    def __getitem__(self, key: str) -> object:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AnnotationAttributes({self.annotation_type!r}, {self._values!r})"

    def get_string(self, name: str) -> str:
        value = self._values.get(name)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise TypeError(
                f"Attribute {name!r} of {self.annotation_type} is {type(value).__name__}, "
                "expected str"
            )
        return value

    def get_bool(self, name: str) -> bool:
        return bool(self._values.get(name, False))

    def get_int(self, name: str) -> int | None:
        value = self._values.get(name)
        if value is None:
            return None
        return int(value)  # type: ignore[call-overload]

    def get_tuple(self, name: str) -> tuple[object, ...]:
        """Return ``name`` as a tuple, widening a scalar into a one-element tuple."""

        value = self._values.get(name)
        if value is None:
            return ()
        if isinstance(value, tuple | list):
            return tuple(value)
        return (value,)

    def get_strings(self, name: str) -> tuple[str, ...]:
        return tuple(str(item) for item in self.get_tuple(name))

    def get_class_name(self, name: str) -> str | None:
        value = self._values.get(name)
        if value is None:
            return None
        return _class_name(value)

    def get_class_names(self, name: str) -> tuple[str, ...]:
        return tuple(_class_name(item) for item in self.get_tuple(name))

    def with_class_names(self) -> AnnotationAttributes:
        """Copy with every class value rendered as its dotted name."""

        converted: dict[str, object] = {}
        for key, value in self._values.items():
            if isinstance(value, type):
                converted[key] = qualified_name(value)
            elif isinstance(value, tuple | list) and any(isinstance(item, type) for item in value):
                converted[key] = tuple(
                    qualified_name(item) if isinstance(item, type) else item for item in value
                )
            else:
                converted[key] = value
        return AnnotationAttributes(self.annotation_type, converted)


def _class_name(value: object) -> str:
    if isinstance(value, type):
        return qualified_name(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"Expected a class or class name, got {type(value).__name__}")
