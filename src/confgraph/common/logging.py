"""Shared logging helpers for confgraph."""

from __future__ import annotations

import logging


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with terse defaults.

    ``level`` accepts either a numeric level or a level name such as ``"DEBUG"``.
    Resolution diagnostics (skipped resources, circular imports, fallbacks to
    static metadata) are emitted under the ``confgraph`` logger hierarchy. Pass
    ``force=True`` to reconfigure during tests or specialised entry points.
    """

    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
