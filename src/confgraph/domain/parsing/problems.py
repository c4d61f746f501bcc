"""Diagnostics sink for problems found while parsing configuration classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .errors import DefinitionStoreError

if TYPE_CHECKING:
    from .imports import ImportStack
    from .model import ConfigurationClass

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Location:
    resource: str
    source: str | None = None

    def __str__(self) -> str:
        if self.source:
            return f"{self.source} in {self.resource}"
        return self.resource


@dataclass(frozen=True, slots=True)
class Problem:
    message: str
    location: Location

    def __str__(self) -> str:
        return f"Configuration problem: {self.message}\nOffending resource: {self.location}"


@dataclass(frozen=True, slots=True)
class CircularImportProblem(Problem):
    """An import whose provenance chain leads back to the importing class."""

    chain: str = field(default="")

    @classmethod
    def build(cls, attempted: ConfigurationClass, stack: ImportStack) -> CircularImportProblem:
        importer = stack.peek()
        importer_name = importer.simple_name if importer is not None else attempted.simple_name
        chain = str(stack)
        message = (
            "A circular import has been detected: "
            f"Illegal attempt by configuration class '{importer_name}' to import class "
            f"'{attempted.simple_name}' as '{attempted.simple_name}' is already present "
            f"in the current import stack {chain}"
        )
        resource = importer.resource if importer is not None else attempted.resource
        return cls(
            message=message,
            location=Location(resource=resource, source=attempted.class_name),
            chain=chain,
        )


class ConfigurationProblemError(DefinitionStoreError):
    def __init__(self, problem: Problem) -> None:
        self.problem = problem
        super().__init__(str(problem), class_name=problem.location.source)


class ProblemReporter(Protocol):
    def error(self, problem: Problem) -> None: ...

    def warning(self, problem: Problem) -> None: ...


@dataclass(slots=True)
class CollectingProblemReporter:
    """Log and keep problems; resolution of unaffected classes continues."""

    errors: list[Problem] = field(default_factory=list[Problem])
    warnings: list[Problem] = field(default_factory=list[Problem])

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def error(self, problem: Problem) -> None:
        log.error("%s", problem)
        self.errors.append(problem)

    def warning(self, problem: Problem) -> None:
        log.warning("%s", problem)
        self.warnings.append(problem)


class FailFastProblemReporter:
    """Raise on the first error; warnings are only logged."""

    def error(self, problem: Problem) -> None:
        raise ConfigurationProblemError(problem)

    def warning(self, problem: Problem) -> None:
        log.warning("%s", problem)
