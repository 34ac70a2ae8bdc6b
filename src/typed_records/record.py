"""Records pairing a host object with its type and owning storage engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from typed_records.method_field import MethodFieldDefinition
from typed_records.types import IndexDefinition, RecordTypeDefinition

if TYPE_CHECKING:
    from typed_records.storage import Storage


@dataclass(eq=False)
class Record:
    """A stored object together with its record type.

    ``storage`` is the engine that currently owns the record, or None
    until the record is saved.
    """

    type_def: RecordTypeDefinition | None
    obj: Any
    storage: Storage | None = None
    id: UUID = field(default_factory=uuid4)

    def get_value(self, name: str) -> Any:
        """Return the current value of a field or method field.

        Raises:
            KeyError: If the record type has no such field.
        """
        if self.type_def is None:
            raise KeyError(f"Record {self.id} has no type")
        field_def = self.type_def.get_field(name)
        if field_def is None:
            raise KeyError(f"Field '{name}' not found in type '{self.type_def.name}'")

        if isinstance(field_def, MethodFieldDefinition):
            return field_def.compute(self.obj)
        if isinstance(self.obj, dict):
            return self.obj.get(name)
        return getattr(self.obj, name, None)

    def index_values(self, index: IndexDefinition) -> tuple[Any, ...]:
        """Return the values this record contributes to ``index``.

        Fields the record type doesn't declare contribute None.
        """
        values = []
        for name in index.fields:
            if self.type_def is not None and self.type_def.get_field(name) is not None:
                values.append(self.get_value(name))
            else:
                values.append(None)
        return tuple(values)

    def changed(self, name: str) -> None:
        """Notify the owning engine that a method field's inputs changed."""
        if self.type_def is None:
            return
        field_def = self.type_def.get_field(name)
        if isinstance(field_def, MethodFieldDefinition):
            field_def.recalculate(self)

    def __repr__(self) -> str:
        type_name = self.type_def.name if self.type_def is not None else None
        return f"Record({type_name!r}, {self.id})"
