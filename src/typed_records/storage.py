"""Storage engines that own records and keep their index entries current."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Protocol, runtime_checkable
from uuid import UUID

from typed_records.types import IndexDefinition, TypeRegistry

if TYPE_CHECKING:
    from typed_records.record import Record

log = logging.getLogger(__name__)


class Environment:
    """Registry of record types plus the indexes shared by all of them."""

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        indexes: Iterable[IndexDefinition] = (),
    ) -> None:
        self.registry = registry if registry is not None else TypeRegistry()
        self.indexes: list[IndexDefinition] = list(indexes)

    def add_index(self, index: IndexDefinition) -> None:
        """Add a global index."""
        if self.get_index(index.name) is not None:
            raise ValueError(f"Index '{index.name}' is already defined")
        self.indexes.append(index)

    def get_index(self, name: str) -> IndexDefinition | None:
        """Get a global index by name."""
        for idx in self.indexes:
            if idx.name == name:
                return idx
        return None


@runtime_checkable
class RecalculationTarget(Protocol):
    """Capability of engines that can refresh an index entry for a record."""

    def recalculate(self, record: Record, index: IndexDefinition) -> None:
        ...


def recalculate_index(storage: Any, record: Record, index: IndexDefinition) -> bool:
    """Forward a recalculation to ``storage`` if it supports one.

    Returns whether the request was forwarded. Engines without the
    capability are skipped.
    """
    if isinstance(storage, RecalculationTarget):
        storage.recalculate(record, index)
        return True
    return False


def indexes_covering(record: Record, environment: Environment) -> list[IndexDefinition]:
    """List type and global indexes that cover any field of the record's type."""
    if record.type_def is None:
        return []
    names = set(record.type_def.field_names())
    return [
        idx
        for idx in [*record.type_def.indexes, *environment.indexes]
        if names.intersection(idx.fields)
    ]


class Storage(ABC):
    """Base class of all storage engines."""

    def __init__(self, environment: Environment) -> None:
        self.environment = environment

    @abstractmethod
    def save(self, record: Record) -> None:
        """Persist a record and take ownership of it."""


class AbstractStorage(Storage):
    """Generic engine that computes index entries from record values.

    Subclasses decide where records and index entries live.
    """

    def save(self, record: Record) -> None:
        """Persist a record and its index entries.

        Every entry is computed and checked before anything is written, so
        a rejected record is neither stored nor owned by this engine.
        """
        entries = [
            (idx, record.index_values(idx))
            for idx in indexes_covering(record, self.environment)
        ]
        for idx, values in entries:
            self._check_index_entry(record, idx, values)

        self._write_record(record)
        record.storage = self
        for idx, values in entries:
            log.debug("Index '%s' entry for %s: %r", idx.name, record.id, values)
            self._write_index_entry(record, idx, values)

    def recalculate(self, record: Record, index: IndexDefinition) -> None:
        """Recompute the entry for ``record`` in ``index``."""
        values = record.index_values(index)
        self._check_index_entry(record, index, values)
        log.debug("Index '%s' entry for %s: %r", index.name, record.id, values)
        self._write_index_entry(record, index, values)

    def _check_index_entry(
        self, record: Record, index: IndexDefinition, values: tuple[Any, ...]
    ) -> None:
        """Raise ValueError if the entry can't be written."""

    @abstractmethod
    def _write_record(self, record: Record) -> None:
        ...

    @abstractmethod
    def _write_index_entry(
        self, record: Record, index: IndexDefinition, values: tuple[Any, ...]
    ) -> None:
        ...


class MemoryStorage(AbstractStorage):
    """Keeps records and index entries in dictionaries."""

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        self._records: dict[UUID, Record] = {}
        self._index_entries: dict[str, dict[UUID, tuple[Any, ...]]] = {}

    def _write_record(self, record: Record) -> None:
        self._records[record.id] = record

    def _check_index_entry(
        self, record: Record, index: IndexDefinition, values: tuple[Any, ...]
    ) -> None:
        # Records without any value for a unique index never collide
        if not index.unique or all(v is None for v in values):
            return
        for other_id, other_values in self._index_entries.get(index.name, {}).items():
            if other_id != record.id and other_values == values:
                raise ValueError(
                    f"Duplicate value {values!r} for unique index '{index.name}'"
                )

    def _write_index_entry(
        self, record: Record, index: IndexDefinition, values: tuple[Any, ...]
    ) -> None:
        self._index_entries.setdefault(index.name, {})[record.id] = values

    def get(self, record_id: UUID) -> Record | None:
        """Get a saved record by id."""
        return self._records.get(record_id)

    def index_entries(self, index_name: str) -> dict[UUID, tuple[Any, ...]]:
        """Return a copy of the entries stored for an index."""
        return dict(self._index_entries.get(index_name, {}))

    @property
    def count(self) -> int:
        return len(self._records)


class ForwardingStorage(Storage):
    """Engine that hands every call to a single delegate."""

    def __init__(self, delegate: Storage) -> None:
        super().__init__(delegate.environment)
        self.delegate = delegate

    def save(self, record: Record) -> None:
        self.delegate.save(record)
        record.storage = self

    def recalculate(self, record: Record, index: IndexDefinition) -> None:
        recalculate_index(self.delegate, record, index)


class AggregateStorage(Storage):
    """Engine that writes to several delegates and reads from a default one."""

    def __init__(self, default: Storage, others: Iterable[Storage] = ()) -> None:
        super().__init__(default.environment)
        self.default = default
        self.delegates: list[Storage] = [default, *others]

    def save(self, record: Record) -> None:
        for delegate in self.delegates:
            delegate.save(record)
        record.storage = self

    def recalculate(self, record: Record, index: IndexDefinition) -> None:
        for delegate in self.delegates:
            recalculate_index(delegate, record, index)
