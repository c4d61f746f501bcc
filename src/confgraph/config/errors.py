"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when confgraph settings are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required settings are absent or blank."""
