"""Conditional inclusion: the skip predicate consulted while parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from confgraph.domain.metadata import Conditional, qualified_name, resolve_class

from .capabilities import instantiate

if TYPE_CHECKING:
    from confgraph.domain.environment import Environment, ResourceLoader
    from confgraph.domain.metadata import AnnotationMetadata
    from confgraph.domain.ports import DefinitionRegistry


class ConfigurationPhase(StrEnum):
    PARSE_CONFIGURATION = "parse_configuration"
    REGISTER_BEAN = "register_bean"


@dataclass(frozen=True, slots=True)
class ConditionContext:
    environment: Environment
    resource_loader: ResourceLoader
    registry: DefinitionRegistry


@runtime_checkable
class Condition(Protocol):
    def matches(self, context: ConditionContext, metadata: AnnotationMetadata) -> bool: ...


class ConfigurationCondition(Condition, Protocol):
    """A condition that only applies during one phase."""

    phase: ClassVar[ConfigurationPhase]


class SkipPredicate(Protocol):
    def should_skip(
        self, metadata: AnnotationMetadata, phase: ConfigurationPhase | None = None
    ) -> bool: ...


class NeverSkip:
    def should_skip(
        self, metadata: AnnotationMetadata, phase: ConfigurationPhase | None = None
    ) -> bool:
        return False


_CONDITIONAL = qualified_name(Conditional)


class ConditionEvaluator:
    """Evaluate the condition classes named by ``Conditional`` annotations.

    A class is skipped as soon as one applicable condition does not match.
    Conditions declaring a ``phase`` are only consulted in that phase.
    """

    def __init__(
        self,
        *,
        environment: Environment,
        resource_loader: ResourceLoader,
        registry: DefinitionRegistry,
    ) -> None:
        self.context = ConditionContext(
            environment=environment, resource_loader=resource_loader, registry=registry
        )

    def should_skip(
        self, metadata: AnnotationMetadata, phase: ConfigurationPhase | None = None
    ) -> bool:
        declarations = metadata.get_all_annotation_attributes(_CONDITIONAL)
        if not declarations:
            return False

        for declaration in declarations:
            for condition_class in declaration.get_tuple("value"):
                condition = self._instantiate(condition_class)
                required_phase = getattr(condition, "phase", None)
                if phase is not None and required_phase is not None and required_phase != phase:
                    continue
                if not condition.matches(self.context, metadata):
                    return True
        return False

    @staticmethod
    def _instantiate(condition_class: object) -> Condition:
        cls = condition_class if isinstance(condition_class, type) else resolve_class(str(condition_class))
        return instantiate(cls, Condition)
