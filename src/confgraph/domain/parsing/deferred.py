"""Deferred, grouped import resolution.

Deferred selectors are recorded while the top-level candidates are parsed and
resolved in one batch afterwards, so a group sees the raw selector input of every
candidate before deciding what to import.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from confgraph.domain.metadata import LOWEST_PRECEDENCE, annotations_of, introspect

from .candidates import get_order
from .capabilities import DefaultImportGroup, ImportGroup
from .errors import DefinitionStoreError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .capabilities import DeferredImportSelector, GroupEntry
    from .model import ConfigurationClass


@dataclass(frozen=True, slots=True, eq=False)
class DeferredImportRecord:
    configuration_class: ConfigurationClass
    selector: DeferredImportSelector


@dataclass(slots=True)
class DeferredImportGrouping:
    """Members of one group and the single group instance that combines them."""

    group: ImportGroup
    records: list[DeferredImportRecord] = field(default_factory=list[DeferredImportRecord])
    _entries: tuple[GroupEntry, ...] | None = field(default=None, repr=False)

    def add(self, record: DeferredImportRecord) -> None:
        self.records.append(record)

    def imports(self) -> tuple[GroupEntry, ...]:
        """Feed every member to the group once, then return its final selection.

        A failure is reported against the member being fed, or against the first
        member when the group fails while answering.
        """

        if self._entries is None:
            for record in self.records:
                _on_behalf_of(
                    record.configuration_class,
                    self.group.process,
                    record.configuration_class.metadata,
                    record.selector,
                )
            self._entries = _on_behalf_of(
                self.records[0].configuration_class, lambda: tuple(self.group.select_imports())
            )
        return self._entries


def selector_order(selector: object) -> int:
    """A ``get_order()`` method wins over an ``Order`` annotation on the selector class."""

    get_order_method = getattr(selector, "get_order", None)
    if callable(get_order_method):
        return int(get_order_method())
    if annotations_of(type(selector)):
        return get_order(introspect(type(selector)))
    return LOWEST_PRECEDENCE


class DeferredImportSelectorHandler:
    """Collects deferred selectors during a parse and resolves them in one batch.

    ``handle`` returns ``False`` once the batch has started; the caller then
    resolves the selector immediately instead.
    """

    def __init__(self, create_group: Callable[[type[ImportGroup]], ImportGroup]) -> None:
        self._create_group = create_group
        self._records: list[DeferredImportRecord] | None = []

    def handle(self, configuration_class: ConfigurationClass, selector: DeferredImportSelector) -> bool:
        if self._records is None:
            return False
        self._records.append(
            DeferredImportRecord(configuration_class=configuration_class, selector=selector)
        )
        return True

    def process_group_imports(
        self,
        process_entry: Callable[[ConfigurationClass, str], None],
    ) -> None:
        """Group, order and resolve the recorded selectors.

        ``process_entry`` receives the owning configuration class and one import
        class name per group entry.
        """

        records, self._records = self._records, None
        if not records:
            return

        records.sort(key=lambda record: selector_order(record.selector))
        groupings: dict[object, DeferredImportGrouping] = {}
        owners: dict[str, ConfigurationClass] = {}
        for record in records:
            owner = record.configuration_class
            declared = _on_behalf_of(owner, record.selector.import_group)
            # selectors without a declared group are grouped on their own
            key = declared if declared is not None else record
            grouping = groupings.get(key)
            if grouping is None:
                grouping = DeferredImportGrouping(
                    group=_on_behalf_of(owner, self._create_group, declared or DefaultImportGroup)
                )
                groupings[key] = grouping
            grouping.add(record)
            owners[owner.class_name] = owner

        for grouping in groupings.values():
            for entry in grouping.imports():
                owner = owners[entry.metadata.class_name]
                process_entry(owner, entry.import_class_name)


P = ParamSpec("P")
T = TypeVar("T")


def _on_behalf_of(
    configuration_class: ConfigurationClass,
    action: Callable[P, T],
    *args: P.args,
    **kwargs: P.kwargs,
) -> T:
    """Call ``action``, reporting unexpected failures against ``configuration_class``."""

    try:
        return action(*args, **kwargs)
    except DefinitionStoreError:
        raise
    except Exception as exc:
        raise DefinitionStoreError.import_candidates_failed(configuration_class.class_name) from exc
