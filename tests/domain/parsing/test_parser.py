from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from confgraph.domain.environment import DefaultResourceLoader, UnresolvablePlaceholderError
from confgraph.domain.metadata import CachingMetadataReaderFactory, introspect, qualified_name
from confgraph.domain.parsing import (
    CircularImportProblem,
    CollectingProblemReporter,
    ConfigurationClass,
    ConfigurationParser,
    ConfigurationPhase,
    ConfigurationProblemError,
    DefinitionStoreError,
    FailFastProblemReporter,
    InstantiationError,
    NeverSkip,
)
from confgraph.domain.ports import ComponentDefinition
from tests.support import configs
from tests.support.environments import make_environment, write_properties

if TYPE_CHECKING:
    from pathlib import Path

    from confgraph.adapters import InMemoryDefinitionRegistry
    from confgraph.domain.environment import Environment
    from confgraph.domain.metadata import AnnotationMetadata


def _names(parser: ConfigurationParser) -> list[str]:
    return [item.simple_name for item in parser.configuration_classes]


def _imported_by(parser: ConfigurationParser, cls: type) -> list[str]:
    configuration_class = next(
        item for item in parser.configuration_classes if item.class_name == qualified_name(cls)
    )
    return [name.rsplit(".", 1)[-1] for name in configuration_class.imported_by]


def _producers(parser: ConfigurationParser, cls: type) -> list[str]:
    configuration_class = next(
        item for item in parser.configuration_classes if item.class_name == qualified_name(cls)
    )
    return [method.name for method in configuration_class.producer_methods]


class RecordingSkipPredicate:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ConfigurationPhase | None]] = []

    def should_skip(
        self, metadata: AnnotationMetadata, phase: ConfigurationPhase | None = None
    ) -> bool:
        self.calls.append((metadata.simple_name, phase))
        return False


def test_plain_and_deferred_imports_resolve_in_one_pass(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.Root])

    assert [item.simple_name for item in model] == ["Helper", "Root", "Extra"]
    assert _imported_by(parser, configs.Helper) == ["Root"]
    assert _imported_by(parser, configs.Extra) == ["Root"]
    assert not model.get(qualified_name(configs.Root)).is_imported


def test_deferred_import_is_processed_after_the_importing_class_is_finalized(
    environment: Environment, registry: InMemoryDefinitionRegistry
) -> None:
    skip_predicate = RecordingSkipPredicate()
    parser = ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=CollectingProblemReporter(),
        environment=environment,
        resource_loader=DefaultResourceLoader(),
        registry=registry,
        skip_predicate=skip_predicate,
    )

    parser.parse([configs.Root, configs.Shared])

    parsed = [name for name, phase in skip_predicate.calls if phase is ConfigurationPhase.PARSE_CONFIGURATION]
    assert parsed == ["Root", "Helper", "Shared", "Extra"]


def test_import_cycle_is_reported_once(
    parser: ConfigurationParser, reporter: CollectingProblemReporter
) -> None:
    parser.parse([configs.CycleA])

    assert len(reporter.errors) == 1
    problem = reporter.errors[0]
    assert isinstance(problem, CircularImportProblem)
    assert problem.chain == "[CycleA->CycleB]"
    assert "A circular import has been detected" in problem.message
    assert _names(parser) == ["CycleA", "CycleB"]
    assert _imported_by(parser, configs.CycleA) == []
    assert _imported_by(parser, configs.CycleB) == ["CycleA"]


def test_import_cycle_keeps_both_top_level_candidates(
    parser: ConfigurationParser, reporter: CollectingProblemReporter
) -> None:
    model = parser.parse([configs.CycleA, configs.CycleB])

    assert len(reporter.errors) == 1
    assert not model.get(qualified_name(configs.CycleA)).is_imported
    assert not model.get(qualified_name(configs.CycleB)).is_imported


def test_import_cycle_through_several_classes_is_reported_once(
    parser: ConfigurationParser, reporter: CollectingProblemReporter
) -> None:
    parser.parse([configs.Tri1])

    assert len(reporter.errors) == 1
    problem = reporter.errors[0]
    assert isinstance(problem, CircularImportProblem)
    assert problem.chain == "[Tri1->Tri2->Tri3]"
    assert "configuration class 'Tri3' to import class 'Tri1'" in problem.message
    assert _names(parser) == ["Tri1", "Tri3", "Tri2"]
    assert _imported_by(parser, configs.Tri2) == ["Tri1"]
    assert _imported_by(parser, configs.Tri3) == ["Tri2"]


def test_member_class_importing_its_owner_is_a_cycle(
    parser: ConfigurationParser, reporter: CollectingProblemReporter
) -> None:
    parser.parse([configs.Host])

    assert len(reporter.errors) == 1
    problem = reporter.errors[0]
    assert isinstance(problem, CircularImportProblem)
    assert problem.chain == "[Host->Inner]"
    assert _names(parser) == ["Host", "Inner"]
    assert _imported_by(parser, configs.Host) == []


def test_self_import_is_a_cycle(parser: ConfigurationParser, reporter: CollectingProblemReporter) -> None:
    parser.parse([configs.SelfImporting])

    assert len(reporter.errors) == 1
    assert _names(parser) == ["SelfImporting"]


def test_fail_fast_reporter_aborts_on_cycle(environment: Environment, registry: InMemoryDefinitionRegistry) -> None:
    parser = ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=FailFastProblemReporter(),
        environment=environment,
        resource_loader=DefaultResourceLoader(),
        registry=registry,
    )

    with pytest.raises(ConfigurationProblemError) as exc:
        parser.parse([configs.CycleA])

    assert isinstance(exc.value.problem, CircularImportProblem)


def test_nested_configuration_classes_are_imported_by_their_owner(parser: ConfigurationParser) -> None:
    parser.parse([configs.Outer])

    assert _names(parser) == ["Sooner", "Later", "Outer"]
    assert _imported_by(parser, configs.Outer.Sooner) == ["Outer"]
    assert _imported_by(parser, configs.Outer.Later) == ["Outer"]
    assert _producers(parser, configs.Outer) == ["outer_service"]


def test_imported_by_accumulates_across_importers(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.ImporterOne, configs.ImporterTwo])

    assert len(model) == 3
    assert _imported_by(parser, configs.Shared) == ["ImporterOne", "ImporterTwo"]
    assert _producers(parser, configs.Shared) == ["shared_service"]


def test_explicit_declaration_replaces_earlier_import(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.ImporterOne, configs.Shared])

    shared = model.get(qualified_name(configs.Shared))
    assert shared is not None
    assert not shared.is_imported
    assert [item.simple_name for item in model] == ["ImporterOne", "Shared"]


def test_import_after_explicit_declaration_is_ignored(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.Shared, configs.ImporterOne])

    shared = model.get(qualified_name(configs.Shared))
    assert shared is not None
    assert not shared.is_imported
    assert [item.simple_name for item in model] == ["Shared", "ImporterOne"]


def test_immediate_selector_imports_are_processed_depth_first(parser: ConfigurationParser) -> None:
    parser.parse([configs.UsesHelperSelector])

    assert _names(parser) == ["Helper", "UsesHelperSelector"]
    assert _imported_by(parser, configs.Helper) == ["UsesHelperSelector"]


def test_meta_annotation_imports_are_collected(parser: ConfigurationParser) -> None:
    parser.parse([configs.FeatureUser])

    assert _names(parser) == ["FeatureConfig", "Helper", "FeatureUser"]


def test_deferred_group_sees_every_top_level_contribution(
    parser: ConfigurationParser, group_calls: list[tuple[str, ...]]
) -> None:
    parser.parse([configs.FirstGroupUser, configs.SecondGroupUser])

    assert group_calls == [
        (qualified_name(configs.FirstGroupUser), qualified_name(configs.SecondGroupUser))
    ]
    assert _names(parser) == ["FirstGroupUser", "SecondGroupUser", "GroupedTwo", "GroupedOne"]
    assert _imported_by(parser, configs.GroupedTwo) == ["SecondGroupUser"]
    assert _imported_by(parser, configs.GroupedOne) == ["FirstGroupUser"]


def test_deferred_selectors_run_in_order_precedence(parser: ConfigurationParser) -> None:
    parser.parse([configs.OrderedDeferredUser])

    assert _names(parser) == ["OrderedDeferredUser", "EarlyTarget", "LateTarget"]


def test_registrars_are_attached_with_importing_metadata(
    parser: ConfigurationParser, registry: InMemoryDefinitionRegistry, environment: Environment
) -> None:
    model = parser.parse([configs.WithRegistrar])

    with_registrar = model.get(qualified_name(configs.WithRegistrar))
    assert with_registrar is not None
    assert len(with_registrar.registrars) == 1
    attachment = with_registrar.registrars[0]
    assert attachment.importing_metadata.class_name == qualified_name(configs.WithRegistrar)
    registrar = attachment.registrar
    assert isinstance(registrar, configs.RecordingRegistrar)
    assert registrar.registry is registry
    assert registrar.environment is environment
    assert len(model) == 1


def test_superclass_producer_methods_belong_to_the_subclass(parser: ConfigurationParser) -> None:
    parser.parse([configs.ChildConfig, configs.SiblingConfig])

    assert _names(parser) == ["ChildConfig", "SiblingConfig"]
    assert _producers(parser, configs.ChildConfig) == ["child_service", "base_service"]
    assert _producers(parser, configs.SiblingConfig) == []


def test_explicit_redeclaration_releases_claimed_superclass(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.ChildConfig])
    first = model.get(qualified_name(configs.ChildConfig))
    assert first is not None

    redeclared = ConfigurationClass(metadata=first.metadata, resource="class [redeclared]")
    parser.process_configuration_class(redeclared)

    assert model.get(qualified_name(configs.ChildConfig)) is redeclared
    assert _producers(parser, configs.ChildConfig) == ["child_service", "base_service"]


def test_mixin_producer_methods_are_inherited_transitively(parser: ConfigurationParser) -> None:
    parser.parse([configs.MixedConfig])

    assert _producers(parser, configs.MixedConfig) == ["audit_log", "clock"]


def test_mixin_reached_through_the_superclass_contributes_once(parser: ConfigurationParser) -> None:
    parser.parse([configs.MixinChild])

    assert _producers(parser, configs.MixinChild) == ["shared"]


def test_producer_methods_follow_declaration_order(parser: ConfigurationParser) -> None:
    parser.parse([configs.DeclarationOrdered])

    assert _producers(parser, configs.DeclarationOrdered) == ["zebra", "aardvark"]


def test_import_resources_resolve_placeholders(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.WithImportResource])

    with_resource = model.get(qualified_name(configs.WithImportResource))
    assert with_resource is not None
    assert with_resource.imported_resources == {
        "conf/beans.xml": qualified_name(configs.LegacyReader)
    }


def test_property_sources_are_merged_into_the_environment(
    tmp_path: Path, registry: InMemoryDefinitionRegistry
) -> None:
    write_properties(tmp_path, "app.properties", greeting="hello", audience="world")
    write_properties(tmp_path, "override.properties", greeting="hi")
    environment = make_environment(config__dir=str(tmp_path))
    parser = ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=CollectingProblemReporter(),
        environment=environment,
        resource_loader=DefaultResourceLoader(),
        registry=registry,
    )

    parser.parse([configs.AppProperties])

    assert environment.property_layers.names() == ("test", "app")
    assert environment.get_property("greeting") == "hi"
    assert environment.get_property("audience") == "world"


def test_missing_optional_property_source_is_skipped(tmp_path: Path, registry: InMemoryDefinitionRegistry) -> None:
    environment = make_environment(config__dir=str(tmp_path))
    parser = ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=CollectingProblemReporter(),
        environment=environment,
        resource_loader=DefaultResourceLoader(),
        registry=registry,
    )

    model = parser.parse([configs.OptionalProperties])

    assert len(model) == 1
    assert environment.property_layers.names() == ("test",)


def test_missing_required_property_source_fails_the_parse(
    tmp_path: Path, registry: InMemoryDefinitionRegistry
) -> None:
    parser = ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=CollectingProblemReporter(),
        environment=make_environment(config__dir=str(tmp_path)),
        resource_loader=DefaultResourceLoader(),
        registry=registry,
    )

    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.RequiredProperties])

    assert "Failed to parse configuration class" in str(exc.value)
    assert isinstance(exc.value.__cause__, FileNotFoundError)


def test_unresolvable_property_source_placeholder_fails_the_parse(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.RequiredProperties])

    assert isinstance(exc.value.__cause__, UnresolvablePlaceholderError)


def test_component_scan_parses_scanned_configuration_candidates(
    parser: ConfigurationParser, registry: InMemoryDefinitionRegistry
) -> None:
    model = parser.parse([configs.ScanRoot])

    assert set(_names(parser)) == {"Mailer", "ReportGenerator", "ScannedConfig", "ScanRoot"}
    assert _names(parser)[-1] == "ScanRoot"
    scanned = model.get("tests.support.scanned.settings.ScannedConfig")
    assert scanned is not None
    assert scanned.definition_name == "scannedConfig"
    assert [method.name for method in scanned.producer_methods] == ["scanned_service"]
    assert set(registry.definition_names()) == {"mailer", "reportService", "scannedConfig"}


def test_component_scan_is_gated_by_register_phase(parser: ConfigurationParser) -> None:
    parser.parse([configs.ScanSkippedOnRegister])

    assert _names(parser) == ["ScanSkippedOnRegister"]


def test_component_scan_without_scanner_is_ignored(
    environment: Environment, registry: InMemoryDefinitionRegistry
) -> None:
    parser = ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=CollectingProblemReporter(),
        environment=environment,
        resource_loader=DefaultResourceLoader(),
        registry=registry,
    )

    parser.parse([configs.ScanRoot])

    assert _names(parser) == ["ScanRoot"]


def test_conditions_skip_configuration_classes(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.NeverIncluded, configs.ImportsSkipped])

    assert [item.simple_name for item in model] == ["Helper", "ImportsSkipped"]


def test_conditions_consult_the_environment(registry: InMemoryDefinitionRegistry) -> None:
    def parse(environment: Environment) -> list[str]:
        parser = ConfigurationParser(
            reader_factory=CachingMetadataReaderFactory(),
            problem_reporter=CollectingProblemReporter(),
            environment=environment,
            resource_loader=DefaultResourceLoader(),
            registry=registry,
        )
        return [item.simple_name for item in parser.parse([configs.FlaggedConfig])]

    assert parse(make_environment(feature__enabled="true")) == ["FlaggedConfig"]
    assert parse(make_environment()) == []


def test_custom_skip_predicate_replaces_conditions(
    environment: Environment, registry: InMemoryDefinitionRegistry
) -> None:
    parser = ConfigurationParser(
        reader_factory=CachingMetadataReaderFactory(),
        problem_reporter=CollectingProblemReporter(),
        environment=environment,
        resource_loader=DefaultResourceLoader(),
        registry=registry,
        skip_predicate=NeverSkip(),
    )

    parser.parse([configs.NeverIncluded])

    assert _names(parser) == ["NeverIncluded"]


def test_selector_failure_is_wrapped_with_the_importing_class(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.ImportsExploding])

    assert str(exc.value) == (
        "Failed to process import candidates for configuration class "
        f"[{qualified_name(configs.ImportsExploding)}]"
    )
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_store_errors_are_not_wrapped_twice(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.ImportsImportsExploding])

    assert exc.value.class_name == qualified_name(configs.ImportsExploding)
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_uninstantiable_selector_is_wrapped(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.ImportsUninstantiable])

    assert isinstance(exc.value.__cause__, InstantiationError)


def test_deferred_selector_failure_is_wrapped_with_the_importing_class(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.ImportsExplodingDeferred])

    assert str(exc.value) == (
        "Failed to process import candidates for configuration class "
        f"[{qualified_name(configs.ImportsExplodingDeferred)}]"
    )
    assert exc.value.class_name == qualified_name(configs.ImportsExplodingDeferred)
    assert isinstance(exc.value.__cause__, ValueError)


def test_uninstantiable_deferred_group_is_wrapped(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.ImportsUninstantiableGroup])

    assert exc.value.class_name == qualified_name(configs.ImportsUninstantiableGroup)
    assert isinstance(exc.value.__cause__, InstantiationError)


def test_deferred_group_answer_failure_names_its_first_member(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.Helper, configs.ImportsSilentGroup])

    assert exc.value.class_name == qualified_name(configs.ImportsSilentGroup)
    assert isinstance(exc.value.__cause__, LookupError)


def test_unreadable_import_fails_the_parse(parser: ConfigurationParser) -> None:
    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([configs.ImportsMissing])

    assert str(exc.value) == (
        f"Failed to parse configuration class [{qualified_name(configs.ImportsMissing)}]"
    )


def test_definitions_by_name_are_read_statically(parser: ConfigurationParser) -> None:
    model = parser.parse(
        [ComponentDefinition(name="rootConfig", class_name=qualified_name(configs.Root))]
    )

    root = model.get(qualified_name(configs.Root))
    assert root is not None
    assert root.definition_name == "rootConfig"
    assert not root.metadata.is_introspected
    assert [item.simple_name for item in model] == ["Helper", "Root", "Extra"]


def test_definition_for_missing_class_is_wrapped(parser: ConfigurationParser) -> None:
    missing = f"{configs.MODULE}.Missing"

    with pytest.raises(DefinitionStoreError) as exc:
        parser.parse([ComponentDefinition(name="missing", class_name=missing)])

    assert exc.value.class_name == missing


def test_each_parse_starts_a_fresh_session(parser: ConfigurationParser) -> None:
    parser.parse([configs.Root])
    model = parser.parse([configs.Shared])

    assert [item.simple_name for item in model] == ["Shared"]
    assert model.importing_metadata_for(qualified_name(configs.Helper)) is None


def test_model_answers_provenance_lookups(parser: ConfigurationParser) -> None:
    model = parser.parse([configs.Root])

    importing = model.importing_metadata_for(qualified_name(configs.Helper))
    assert importing is not None
    assert importing.class_name == qualified_name(configs.Root)


def test_validate_reports_final_configuration_classes(
    parser: ConfigurationParser, reporter: CollectingProblemReporter
) -> None:
    parser.parse([configs.FinalConfig, configs.FinalProducer, configs.LiteComponent])
    parser.validate()

    messages = [problem.message for problem in reporter.errors]
    assert messages == [
        "Configuration class 'FinalConfig' may not be final",
        "Producer method 'locked' must not be final; change it to be overridable in 'FinalProducer'",
    ]


def test_process_configuration_class_requires_a_parse(parser: ConfigurationParser) -> None:
    configuration_class = ConfigurationClass(
        metadata=introspect(configs.Helper), resource="class [Helper]"
    )

    with pytest.raises(RuntimeError, match="No parse in progress"):
        parser.process_configuration_class(configuration_class)
    assert parser.configuration_classes == ()
