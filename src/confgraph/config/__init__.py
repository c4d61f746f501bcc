"""Settings helpers for confgraph."""

from __future__ import annotations

from .env import env_flag, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .parser import DEFAULT_ENCODING, ParserSettings, get_parser_settings

__all__ = [
    "DEFAULT_ENCODING",
    "ConfigurationError",
    "MissingConfigurationError",
    "ParserSettings",
    "env_flag",
    "get_parser_settings",
    "optional_env_var",
    "require_env_vars",
]
