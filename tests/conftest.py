from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from confgraph.adapters import InMemoryDefinitionRegistry, ModuleComponentScanner
from confgraph.domain.environment import DefaultResourceLoader
from confgraph.domain.metadata import CachingMetadataReaderFactory
from confgraph.domain.parsing import CollectingProblemReporter, ConfigurationParser
from tests.support.configs import RecordingGroup
from tests.support.environments import make_environment

if TYPE_CHECKING:
    from collections.abc import Iterator

    from confgraph.domain.environment import Environment


@pytest.fixture
def environment() -> Environment:
    return make_environment()


@pytest.fixture
def registry() -> InMemoryDefinitionRegistry:
    return InMemoryDefinitionRegistry()


@pytest.fixture
def reporter() -> CollectingProblemReporter:
    return CollectingProblemReporter()


@pytest.fixture
def parser(
    environment: Environment,
    registry: InMemoryDefinitionRegistry,
    reporter: CollectingProblemReporter,
) -> ConfigurationParser:
    return ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=reporter,
        environment=environment,
        resource_loader=DefaultResourceLoader(),
        registry=registry,
        component_scanner=ModuleComponentScanner(environment, registry),
    )


@pytest.fixture
def group_calls() -> Iterator[list[tuple[str, ...]]]:
    RecordingGroup.calls.clear()
    try:
        yield RecordingGroup.calls
    finally:
        RecordingGroup.calls.clear()
