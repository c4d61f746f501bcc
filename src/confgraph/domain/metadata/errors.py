"""Errors raised while reading class metadata."""

from __future__ import annotations


class MetadataReadError(LookupError):
    """Raised when metadata for a class cannot be obtained by name."""

    def __init__(self, class_name: str, reason: str | None = None) -> None:
        self.class_name = class_name
        message = f"Failed to read metadata for class [{class_name}]"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ClassNotFoundError(MetadataReadError):
    """Raised when a dotted class name does not resolve to a loadable class."""

    def __init__(self, class_name: str, reason: str | None = None) -> None:
        super().__init__(class_name, reason or "class not found")
