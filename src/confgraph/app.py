"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from confgraph.adapters import InMemoryDefinitionRegistry, ModuleComponentScanner
from confgraph.adapters.manifest import ManifestMetadataReaderFactory
from confgraph.config import get_parser_settings
from confgraph.domain.environment import DefaultPropertyLayerFactory, DefaultResourceLoader, Environment
from confgraph.domain.metadata import CachingMetadataReaderFactory, RecordedMetadataReaderFactory
from confgraph.domain.parsing import (
    CollectingProblemReporter,
    ConfigurationParser,
    FailFastProblemReporter,
)

if TYPE_CHECKING:
    from confgraph.config import ParserSettings
    from confgraph.domain.environment import ResourceLoader
    from confgraph.domain.metadata import MetadataReaderFactory
    from confgraph.domain.parsing import (
        ConfigurationModel,
        Problem,
        ProblemReporter,
        SkipPredicate,
    )
    from confgraph.domain.ports import ComponentDefinition, ComponentScanner, DefinitionRegistry


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """The resolved model plus the collaborators that observed the resolution."""

    model: ConfigurationModel
    environment: Environment
    registry: DefinitionRegistry
    problem_reporter: ProblemReporter

    @property
    def problems(self) -> tuple[Problem, ...]:
        if isinstance(self.problem_reporter, CollectingProblemReporter):
            return tuple(self.problem_reporter.errors)
        return ()


def build_reader_factory(settings: ParserSettings) -> MetadataReaderFactory:
    """Manifest entries first when a manifest is configured, then the classes themselves."""

    if settings.manifest_path is None:
        return CachingMetadataReaderFactory(RecordedMetadataReaderFactory())
    return CachingMetadataReaderFactory(
        ManifestMetadataReaderFactory.from_path(settings.manifest_path),
        RecordedMetadataReaderFactory(),
    )


def build_parser(
    *,
    settings: ParserSettings | None = None,
    environment: Environment | None = None,
    resource_loader: ResourceLoader | None = None,
    registry: DefinitionRegistry | None = None,
    reader_factory: MetadataReaderFactory | None = None,
    problem_reporter: ProblemReporter | None = None,
    component_scanner: ComponentScanner | None = None,
    skip_predicate: SkipPredicate | None = None,
) -> ConfigurationParser:
    """Wire a ``ConfigurationParser`` with defaults derived from ``settings``."""

    effective_settings = settings or get_parser_settings()
    if effective_settings.dotenv_path is not None:
        load_dotenv(effective_settings.dotenv_path)
    effective_environment = environment or Environment()
    effective_registry = registry or InMemoryDefinitionRegistry()
    effective_reader_factory = reader_factory or build_reader_factory(effective_settings)
    effective_reporter = problem_reporter or (
        FailFastProblemReporter() if effective_settings.fail_fast else CollectingProblemReporter()
    )
    return ConfigurationParser(
        reader_factory=effective_reader_factory,
        problem_reporter=effective_reporter,
        environment=effective_environment,
        resource_loader=resource_loader or DefaultResourceLoader(),
        registry=effective_registry,
        component_scanner=component_scanner
        or ModuleComponentScanner(
            effective_environment, effective_registry, effective_reader_factory
        ),
        skip_predicate=skip_predicate,
        property_layer_factory=DefaultPropertyLayerFactory(
            default_encoding=effective_settings.default_encoding
        ),
    )


def resolve_configuration(
    *candidates: ComponentDefinition | type,
    parser: ConfigurationParser | None = None,
    settings: ParserSettings | None = None,
    environment: Environment | None = None,
    validate: bool = True,
) -> ResolutionResult:
    """Resolve the given configuration candidates into a model."""

    effective_parser = parser or build_parser(settings=settings, environment=environment)
    log.info("Starting configuration resolution: candidates=%s", len(candidates))

    model = effective_parser.parse(candidates)
    if validate:
        effective_parser.validate()

    result = ResolutionResult(
        model=model,
        environment=effective_parser.environment,
        registry=effective_parser.registry,
        problem_reporter=effective_parser.problem_reporter,
    )
    log.info(
        "Finished configuration resolution: classes=%s, problems=%s, property_layers=%s",
        len(model),
        len(result.problems),
        len(result.environment.property_layers),
    )
    return result
