"""Traversal driver: builds the configuration model from candidate definitions.

Processing one configuration class walks, in order: nested member classes,
``PropertySource`` declarations, ``ComponentScan`` declarations, imports,
``ImportResource`` locations, producer methods, producer methods inherited from
mixin bases and finally the superclass, which is processed as part of the same
configuration class unless another class already claimed it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from confgraph.domain.metadata import (
    ComponentScan,
    ImportResource,
    PropertySource,
    default_component_name,
    introspect,
    is_platform_type,
    qualified_name,
)
from confgraph.domain.ports import ComponentDefinition

from .candidates import check_configuration_candidate, is_configuration_candidate
from .capabilities import (
    DeferredImportSelector,
    ImportGroup,
    ImportKind,
    ImportRegistrar,
    ImportSelector,
    instantiate,
    invoke_aware_methods,
)
from .conditions import ConditionEvaluator, ConfigurationPhase
from .deferred import DeferredImportSelectorHandler
from .errors import DefinitionStoreError
from .imports import ImportStack, collect_imports
from .model import ConfigurationClass, ConfigurationModel, ProducerMethod, class_resource
from .problems import CircularImportProblem
from .property_sources import PropertySourceMerger
from .source import SourceViewFactory, classify

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from confgraph.domain.environment import Environment, PropertyLayerFactory, ResourceLoader
    from confgraph.domain.metadata import (
        AnnotationAttributes,
        AnnotationMetadata,
        MetadataReaderFactory,
    )
    from confgraph.domain.ports import ComponentScanner, DefinitionRegistry

    from .conditions import SkipPredicate
    from .problems import ProblemReporter
    from .source import SourceView

log = getLogger(__name__)

PROPERTY_SOURCE: Final[str] = qualified_name(PropertySource)
COMPONENT_SCAN: Final[str] = qualified_name(ComponentScan)
IMPORT_RESOURCE: Final[str] = qualified_name(ImportResource)


@dataclass(slots=True)
class ParseSession:
    """Mutable state of one ``parse`` call."""

    model: ConfigurationModel
    import_stack: ImportStack
    property_sources: PropertySourceMerger
    deferred: DeferredImportSelectorHandler
    known_superclasses: dict[str, ConfigurationClass] = field(
        default_factory=dict[str, ConfigurationClass]
    )


class ConfigurationParser:
    """Resolve configuration candidates into a ``ConfigurationModel``.

    Every ``parse`` call starts a fresh session; the model of the most recent
    call stays available through ``configuration_classes`` and ``validate``.
    """

    def __init__(
        self,
        *,
        reader_factory: MetadataReaderFactory,
        problem_reporter: ProblemReporter,
        environment: Environment,
        resource_loader: ResourceLoader,
        registry: DefinitionRegistry,
        component_scanner: ComponentScanner | None = None,
        skip_predicate: SkipPredicate | None = None,
        property_layer_factory: PropertyLayerFactory | None = None,
    ) -> None:
        self.reader_factory = reader_factory
        self.problem_reporter = problem_reporter
        self.environment = environment
        self.resource_loader = resource_loader
        self.registry = registry
        self.component_scanner = component_scanner
        self.skip_predicate = skip_predicate or ConditionEvaluator(
            environment=environment, resource_loader=resource_loader, registry=registry
        )
        self.property_layer_factory = property_layer_factory
        self.views = SourceViewFactory(reader_factory)
        self._session: ParseSession | None = None

    @property
    def configuration_classes(self) -> tuple[ConfigurationClass, ...]:
        if self._session is None:
            return ()
        return tuple(self._session.model)

    def parse(self, candidates: Iterable[ComponentDefinition | type]) -> ConfigurationModel:
        """Process every candidate, then resolve deferred selectors exactly once."""

        session = self._open_session()
        for candidate in candidates:
            definition = as_definition(candidate)
            try:
                self._parse_definition(definition)
            except DefinitionStoreError:
                raise
            except Exception as exc:
                raise DefinitionStoreError(
                    f"Failed to parse configuration class [{definition.class_name}]",
                    class_name=definition.class_name,
                ) from exc

        session.deferred.process_group_imports(self._process_group_entry)
        log.info("Parsed %d configuration classes", len(session.model))
        return session.model

    def validate(self) -> None:
        for configuration_class in self.configuration_classes:
            configuration_class.validate(self.problem_reporter)

    def process_configuration_class(self, configuration_class: ConfigurationClass) -> None:
        session = self._require_session()
        metadata = configuration_class.metadata
        if self.skip_predicate.should_skip(metadata, ConfigurationPhase.PARSE_CONFIGURATION):
            log.debug("Skipping %s: conditions not matched", configuration_class.class_name)
            return

        existing = session.model.get(configuration_class.class_name)
        if existing is not None:
            if configuration_class.is_imported:
                if existing.is_imported:
                    existing.merge_imported_by(configuration_class)
                # an explicitly declared class overrides the import
                return
            log.debug("Explicit declaration of %s replaces earlier import", configuration_class.class_name)
            session.model.remove(configuration_class.class_name)
            for name, owner in list(session.known_superclasses.items()):
                if owner == configuration_class:
                    del session.known_superclasses[name]

        log.debug("Processing configuration class %s", configuration_class.class_name)
        source: SourceView | None = self.views.from_metadata(metadata)
        while source is not None:
            source = self.do_process_configuration_class(configuration_class, source)

        session.model.put(configuration_class)

    def do_process_configuration_class(
        self, configuration_class: ConfigurationClass, source: SourceView
    ) -> SourceView | None:
        """Apply one source (the class itself or a superclass) to ``configuration_class``.

        Returns the superclass still to be processed, if any.
        """

        session = self._require_session()
        metadata = source.metadata

        self._process_member_classes(configuration_class, source)

        for attributes in metadata.get_all_annotation_attributes(PROPERTY_SOURCE):
            session.property_sources.merge_in(attributes)

        scans = metadata.get_all_annotation_attributes(COMPONENT_SCAN)
        if scans and not self.skip_predicate.should_skip(metadata, ConfigurationPhase.REGISTER_BEAN):
            for attributes in scans:
                for definition in self._scan(attributes, metadata.class_name):
                    candidate = definition.source_definition
                    if check_configuration_candidate(candidate, self.reader_factory):
                        self._parse_class_name(candidate.class_name, definition.name)

        self._process_imports(configuration_class, source, collect_imports(source), check_cycles=True)

        import_resource = metadata.get_annotation_attributes(IMPORT_RESOURCE)
        if import_resource is not None:
            reader = import_resource.get_class_name("reader")
            locations = import_resource.get_strings("locations") or import_resource.get_strings("value")
            for location in locations:
                resolved = self.environment.resolve_required_placeholders(location)
                configuration_class.add_imported_resource(resolved, reader)

        for method in source.producer_methods():
            configuration_class.add_producer_method(
                ProducerMethod(metadata=method, configuration_class_name=configuration_class.class_name)
            )

        self._process_interfaces(configuration_class, source)

        superclass = metadata.superclass_name
        if (
            metadata.has_superclass
            and superclass is not None
            and not is_platform_type(superclass)
            and superclass not in session.known_superclasses
        ):
            session.known_superclasses[superclass] = configuration_class
            return source.superclass()
        return None

    def _process_member_classes(self, configuration_class: ConfigurationClass, source: SourceView) -> None:
        candidates = [
            member
            for member in source.member_classes()
            if is_configuration_candidate(member.metadata)
            and member.class_name != configuration_class.class_name
        ]
        if not candidates:
            return
        candidates.sort(key=lambda member: member.order)

        stack = self._require_session().import_stack
        for candidate in candidates:
            if configuration_class in stack:
                self.problem_reporter.error(CircularImportProblem.build(configuration_class, stack))
                continue
            stack.push(configuration_class)
            try:
                self.process_configuration_class(candidate.as_configuration_class(configuration_class))
            finally:
                stack.pop()

    def _process_interfaces(self, configuration_class: ConfigurationClass, source: SourceView) -> None:
        self._add_default_methods(
            configuration_class, _mixin_parents(source, include_superclass=False), visited=set()
        )

    def _add_default_methods(
        self,
        configuration_class: ConfigurationClass,
        interfaces: list[SourceView],
        visited: set[str],
    ) -> None:
        for interface in interfaces:
            if interface.class_name in visited:
                continue
            visited.add(interface.class_name)
            for method in interface.producer_methods():
                if not method.is_abstract:
                    configuration_class.add_producer_method(
                        ProducerMethod(
                            metadata=method, configuration_class_name=configuration_class.class_name
                        )
                    )
            self._add_default_methods(
                configuration_class, _mixin_parents(interface, include_superclass=True), visited
            )

    def _process_imports(
        self,
        configuration_class: ConfigurationClass,
        source: SourceView,
        candidates: Sequence[SourceView],
        *,
        check_cycles: bool,
    ) -> None:
        if not candidates:
            return

        session = self._require_session()
        stack = session.import_stack
        if check_cycles and stack.is_chained_import(configuration_class):
            self.problem_reporter.error(CircularImportProblem.build(configuration_class, stack))
            return

        stack.push(configuration_class)
        try:
            for candidate in candidates:
                kind = classify(candidate)
                if kind is ImportKind.SELECTOR:
                    selector = instantiate(candidate.load_class(), ImportSelector)
                    self._invoke_aware_methods(selector)
                    if isinstance(selector, DeferredImportSelector) and session.deferred.handle(
                        configuration_class, selector
                    ):
                        log.debug("Deferred import selector %s for %s", candidate, configuration_class.class_name)
                        continue
                    import_names = selector.select_imports(source.metadata)
                    self._process_imports(
                        configuration_class,
                        source,
                        self.views.from_names(import_names),
                        check_cycles=False,
                    )
                elif kind is ImportKind.REGISTRAR:
                    registrar = instantiate(candidate.load_class(), ImportRegistrar)
                    self._invoke_aware_methods(registrar)
                    configuration_class.add_registrar(registrar, source.metadata)
                else:
                    stack.register_import(source.metadata, candidate.class_name)
                    self.process_configuration_class(candidate.as_configuration_class(configuration_class))
        except DefinitionStoreError:
            raise
        except Exception as exc:
            raise DefinitionStoreError.import_candidates_failed(configuration_class.class_name) from exc
        finally:
            stack.pop()

    def _process_group_entry(self, configuration_class: ConfigurationClass, import_class_name: str) -> None:
        try:
            self._process_imports(
                configuration_class,
                self.views.from_metadata(configuration_class.metadata),
                [self.views.from_name(import_class_name)],
                check_cycles=False,
            )
        except DefinitionStoreError:
            raise
        except Exception as exc:
            raise DefinitionStoreError.import_candidates_failed(configuration_class.class_name) from exc

    def _scan(self, attributes: AnnotationAttributes, declaring_class: str) -> Sequence[ComponentDefinition]:
        if self.component_scanner is None:
            log.warning("Ignoring ComponentScan on [%s]: no component scanner configured", declaring_class)
            return ()
        return self.component_scanner.scan(attributes, declaring_class)

    def _parse_definition(self, definition: ComponentDefinition) -> None:
        metadata = _definition_metadata(definition)
        if metadata is None:
            self._parse_class_name(definition.class_name, definition.name)
            return
        self.process_configuration_class(
            ConfigurationClass(
                metadata=metadata,
                resource=class_resource(metadata.class_name),
                definition_name=definition.name,
            )
        )

    def _parse_class_name(self, class_name: str, definition_name: str) -> None:
        metadata = self.reader_factory.get_metadata(class_name)
        self.process_configuration_class(
            ConfigurationClass(
                metadata=metadata,
                resource=class_resource(class_name),
                definition_name=definition_name,
            )
        )

    def _open_session(self) -> ParseSession:
        import_stack = ImportStack()
        session = ParseSession(
            model=ConfigurationModel(import_registry=import_stack),
            import_stack=import_stack,
            property_sources=PropertySourceMerger(
                self.environment,
                self.resource_loader,
                default_factory=self.property_layer_factory,
            ),
            deferred=DeferredImportSelectorHandler(self._create_group),
        )
        self._session = session
        return session

    def _require_session(self) -> ParseSession:
        if self._session is None:
            raise RuntimeError("No parse in progress; call parse() first")
        return self._session

    def _create_group(self, group_type: type[ImportGroup]) -> ImportGroup:
        group = instantiate(group_type, ImportGroup)
        self._invoke_aware_methods(group)
        return group

    def _invoke_aware_methods(self, instance: object) -> None:
        invoke_aware_methods(
            instance,
            environment=self.environment,
            resource_loader=self.resource_loader,
            registry=self.registry,
        )


def as_definition(candidate: ComponentDefinition | type) -> ComponentDefinition:
    if isinstance(candidate, ComponentDefinition):
        return candidate
    class_name = qualified_name(candidate)
    return ComponentDefinition(
        name=default_component_name(class_name),
        class_name=class_name,
        component_class=candidate,
    )


def _definition_metadata(definition: ComponentDefinition) -> AnnotationMetadata | None:
    if definition.metadata is not None and definition.metadata.class_name == definition.class_name:
        return definition.metadata
    if definition.component_class is not None:
        return introspect(definition.component_class)
    return None


def _mixin_parents(source: SourceView, *, include_superclass: bool) -> list[SourceView]:
    """Non-platform bases whose producer methods a class inherits as defaults.

    For the configuration class itself only the mixin bases count; the superclass
    is walked separately. For a mixin every base is a further mixin.
    """

    parents = source.interfaces()
    if include_superclass and source.metadata.has_superclass:
        parents = [source.superclass(), *parents]
    return [parent for parent in parents if not is_platform_type(parent.class_name)]
