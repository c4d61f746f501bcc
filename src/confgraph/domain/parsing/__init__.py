"""Configuration class parsing: imports, selectors, property sources and the model."""

from __future__ import annotations

from .candidates import (
    check_configuration_candidate,
    get_order,
    is_configuration_candidate,
    is_full_configuration_candidate,
    is_lite_configuration_candidate,
)
from .capabilities import (
    DefaultImportGroup,
    DeferredImportSelector,
    EnvironmentAware,
    GroupEntry,
    ImportGroup,
    ImportKind,
    ImportRegistrar,
    ImportSelector,
    RegistryAware,
    ResourceLoaderAware,
    instantiate,
    invoke_aware_methods,
)
from .conditions import (
    Condition,
    ConditionContext,
    ConditionEvaluator,
    ConfigurationCondition,
    ConfigurationPhase,
    NeverSkip,
    SkipPredicate,
)
from .deferred import DeferredImportGrouping, DeferredImportRecord, DeferredImportSelectorHandler
from .errors import DefinitionStoreError, InstantiationError
from .imports import ImportStack, collect_imports
from .model import ConfigurationClass, ConfigurationModel, ProducerMethod, RegistrarAttachment
from .parser import ConfigurationParser, ParseSession, as_definition
from .problems import (
    CircularImportProblem,
    CollectingProblemReporter,
    ConfigurationProblemError,
    FailFastProblemReporter,
    Location,
    Problem,
    ProblemReporter,
)
from .property_sources import PropertySourceMerger
from .source import SourceView, SourceViewFactory, classify

__all__ = [
    "CircularImportProblem",
    "CollectingProblemReporter",
    "Condition",
    "ConditionContext",
    "ConditionEvaluator",
    "ConfigurationClass",
    "ConfigurationCondition",
    "ConfigurationModel",
    "ConfigurationParser",
    "ConfigurationPhase",
    "ConfigurationProblemError",
    "DefaultImportGroup",
    "DeferredImportGrouping",
    "DeferredImportRecord",
    "DeferredImportSelector",
    "DeferredImportSelectorHandler",
    "DefinitionStoreError",
    "EnvironmentAware",
    "FailFastProblemReporter",
    "GroupEntry",
    "ImportGroup",
    "ImportKind",
    "ImportRegistrar",
    "ImportSelector",
    "ImportStack",
    "InstantiationError",
    "Location",
    "NeverSkip",
    "ParseSession",
    "Problem",
    "ProblemReporter",
    "ProducerMethod",
    "PropertySourceMerger",
    "RegistrarAttachment",
    "RegistryAware",
    "ResourceLoaderAware",
    "SkipPredicate",
    "SourceView",
    "SourceViewFactory",
    "as_definition",
    "check_configuration_candidate",
    "classify",
    "collect_imports",
    "get_order",
    "instantiate",
    "invoke_aware_methods",
    "is_configuration_candidate",
    "is_full_configuration_candidate",
    "is_lite_configuration_candidate",
]
