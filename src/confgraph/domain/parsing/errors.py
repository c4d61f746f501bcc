"""Errors raised while resolving configuration classes."""

from __future__ import annotations


class DefinitionStoreError(RuntimeError):
    """Store-level failure carrying the identity of the offending configuration class.

    Callers wrapping lower-level failures pass this one through unchanged so the
    innermost, most specific context survives.
    """

    def __init__(self, message: str, *, class_name: str | None = None) -> None:
        self.class_name = class_name
        super().__init__(message)

    @classmethod
    def import_candidates_failed(cls, class_name: str) -> DefinitionStoreError:
        return cls(
            f"Failed to process import candidates for configuration class [{class_name}]",
            class_name=class_name,
        )


class InstantiationError(RuntimeError):
    """Raised when a selector, registrar, group or factory cannot be created."""

    def __init__(self, cls: type, reason: str) -> None:
        self.cls = cls
        super().__init__(f"Failed to instantiate [{cls.__module__}.{cls.__qualname__}]: {reason}")
