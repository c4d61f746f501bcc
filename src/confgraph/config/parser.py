"""Settings for the configuration parser and its default collaborators."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_flag, optional_env_var
from .errors import ConfigurationError

DEFAULT_ENCODING: Final[str] = "utf-8"


@dataclass(frozen=True, slots=True)
class ParserSettings:
    """Knobs consumed when wiring a ``ConfigurationParser``.

    ``fail_fast`` selects the diagnostics sink: when enabled the first reported
    problem (for example a circular import) aborts resolution instead of being
    collected.
    """

    default_encoding: str = DEFAULT_ENCODING
    fail_fast: bool = False
    manifest_path: Path | None = None
    dotenv_path: Path | None = None

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.default_encoding)
        except LookupError as exc:
            raise ConfigurationError(
                f"Unknown default encoding: {self.default_encoding!r}"
            ) from exc


def get_parser_settings() -> ParserSettings:
    manifest = optional_env_var("CONFGRAPH_MANIFEST")
    dotenv = optional_env_var("CONFGRAPH_DOTENV")
    return ParserSettings(
        default_encoding=optional_env_var("CONFGRAPH_DEFAULT_ENCODING") or DEFAULT_ENCODING,
        fail_fast=env_flag("CONFGRAPH_FAIL_FAST"),
        manifest_path=Path(manifest).expanduser() if manifest else None,
        dotenv_path=Path(dotenv).expanduser() if dotenv else None,
    )
