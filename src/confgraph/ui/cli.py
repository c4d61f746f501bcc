# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from confgraph.app import resolve_configuration
from confgraph.common.logging import configure_logging
from confgraph.config import ConfigurationError, get_parser_settings, require_env_vars
from confgraph.domain.metadata import default_component_name
from confgraph.domain.parsing import DefinitionStoreError
from confgraph.domain.ports import ComponentDefinition

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from confgraph.app import ResolutionResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve configuration class graphs")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Root log level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve configuration classes by name")
    resolve.add_argument(
        "classes",
        nargs="*",
        help="Dotted names of the configuration classes to start from (defaults to CONFGRAPH_CLASSES)",
    )
    resolve.add_argument(
        "--manifest",
        type=Path,
        help="JSON class manifest to read metadata from (defaults to CONFGRAPH_MANIFEST)",
    )
    resolve.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort on the first reported problem instead of collecting problems",
    )
    resolve.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip validation of the resolved configuration classes",
    )
    return parser.parse_args(list(argv))


def _class_names(args: argparse.Namespace) -> list[str]:
    if args.classes:
        return list(args.classes)
    configured = require_env_vars(["CONFGRAPH_CLASSES"])["CONFGRAPH_CLASSES"]
    return [name.strip() for name in configured.split(",") if name.strip()]


def _definitions(class_names: Sequence[str]) -> list[ComponentDefinition]:
    return [
        ComponentDefinition(name=default_component_name(class_name), class_name=class_name)
        for class_name in class_names
    ]


def _print_result(result: ResolutionResult) -> None:
    for configuration_class in result.model:
        print(configuration_class.class_name)
        if configuration_class.imported_by:
            print(f"  imported by: {', '.join(configuration_class.imported_by)}")
        for method in configuration_class.producer_methods:
            print(f"  producer: {method.name}")
        for location, reader in configuration_class.imported_resources.items():
            print(f"  resource: {location}" + (f" (reader {reader})" if reader else ""))
        for attachment in configuration_class.registrars:
            print(f"  registrar: {type(attachment.registrar).__name__}")
    for problem in result.problems:
        print(str(problem), file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=parsed_args.log_level)

    try:
        settings = get_parser_settings()
        if parsed_args.manifest is not None:
            settings = replace(settings, manifest_path=parsed_args.manifest)
        if parsed_args.fail_fast:
            settings = replace(settings, fail_fast=True)
        result = resolve_configuration(
            *_definitions(_class_names(parsed_args)),
            settings=settings,
            validate=not parsed_args.no_validate,
        )
    except ConfigurationError:
        log.exception("Invalid confgraph settings")
        sys.exit(2)
    except DefinitionStoreError:
        log.exception("Configuration resolution failed")
        sys.exit(1)

    _print_result(result)
    if result.problems:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
