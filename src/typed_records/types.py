"""Type definitions for the typed_records library."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from typed_records.labels import to_label

if TYPE_CHECKING:
    from typed_records.method_field import MethodFieldDefinition


class FieldType(Enum):
    """Item types a field can hold."""

    ANY = "any"
    BOOLEAN = "boolean"
    DATE = "date"
    NUMBER = "number"
    RECORD = "record"
    TEXT = "text"
    UUID = "uuid"


# Mapping from type name strings to FieldType enum values
FIELD_TYPE_NAMES: dict[str, FieldType] = {ft.value: ft for ft in FieldType}

# Keys read from a persisted field definition
NAME_KEY = "name"
TYPE_KEY = "type"
DISPLAY_NAME_KEY = "displayName"
DECLARING_CLASS_KEY = "python.declaringClass"


def field_type_from_name(name: str) -> FieldType:
    """Look up an item type by name, raising ValueError if unknown."""
    field_type = FIELD_TYPE_NAMES.get(name)
    if field_type is None:
        raise ValueError(f"Unknown field type '{name}'")
    return field_type


@dataclass
class FieldDefinition:
    """Definition of a stored field within a record type."""

    internal_name: str
    item_type: FieldType = FieldType.ANY
    display_name: str | None = None
    declaring_class_name: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_definition(cls, definition: dict[str, Any], **kwargs: Any) -> Any:
        """Build a field from a persisted definition mapping.

        Known keys are removed from ``definition``; whatever is left over is
        kept as ``options`` so it survives a save/load round.
        """
        internal_name = definition.pop(NAME_KEY)
        item_type = field_type_from_name(definition.pop(TYPE_KEY, FieldType.ANY.value))
        display_name = definition.pop(DISPLAY_NAME_KEY, None)
        declaring_class_name = definition.pop(DECLARING_CLASS_KEY, None)
        kwargs.setdefault("declaring_class_name", declaring_class_name)
        return cls(
            internal_name=internal_name,
            item_type=item_type,
            display_name=display_name,
            options=dict(definition),
            **kwargs,
        )

    def to_definition(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible definition mapping."""
        definition: dict[str, Any] = dict(self.options)
        definition[NAME_KEY] = self.internal_name
        definition[TYPE_KEY] = self.item_type.value
        if self.display_name is not None:
            definition[DISPLAY_NAME_KEY] = self.display_name
        if self.declaring_class_name is not None:
            definition[DECLARING_CLASS_KEY] = self.declaring_class_name
        return definition

    @property
    def is_boolean(self) -> bool:
        return self.item_type is FieldType.BOOLEAN

    def get_display_name(self) -> str:
        """Return the display name, deriving one from the internal name."""
        if self.display_name and self.display_name.strip():
            return self.display_name
        return with_boolean_suffix(to_label(self.internal_name), self.is_boolean)


def with_boolean_suffix(label: str, is_boolean: bool) -> str:
    """Append ``?`` to labels of boolean fields that don't already end with one."""
    if is_boolean and not label.endswith("?"):
        return label + "?"
    return label


@dataclass
class IndexDefinition:
    """An index over one or more field internal names."""

    name: str
    fields: list[str] = field(default_factory=list)
    unique: bool = False

    def covers(self, internal_name: str) -> bool:
        """Return whether this index includes the given field."""
        return internal_name in self.fields

    def to_definition(self) -> dict[str, Any]:
        definition: dict[str, Any] = {"name": self.name, "fields": list(self.fields)}
        if self.unique:
            definition["unique"] = True
        return definition

    @classmethod
    def from_definition(cls, definition: dict[str, Any]) -> IndexDefinition:
        return cls(
            name=definition["name"],
            fields=list(definition.get("fields", [])),
            unique=bool(definition.get("unique", False)),
        )


@dataclass
class RecordTypeDefinition:
    """Type definition for a record type bound to a Python class.

    A record type stores plain fields, exposes method fields computed by
    the bound class, and declares indexes over either kind.
    """

    name: str
    class_name: str | None = None
    fields: list[FieldDefinition] = field(default_factory=list)
    methods: list[MethodFieldDefinition] = field(default_factory=list)
    indexes: list[IndexDefinition] = field(default_factory=list)

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field or method field by internal name."""
        for f in self.fields:
            if f.internal_name == name:
                return f
        for m in self.methods:
            if m.internal_name == name:
                return m
        return None

    def get_index(self, name: str) -> IndexDefinition | None:
        """Get an index by name."""
        for idx in self.indexes:
            if idx.name == name:
                return idx
        return None

    def field_names(self) -> list[str]:
        """List internal names of all fields and method fields."""
        return [f.internal_name for f in self.fields] + [m.internal_name for m in self.methods]


class TypeRegistry:
    """Registry of all defined record types."""

    def __init__(self) -> None:
        self._types: dict[str, RecordTypeDefinition] = {}

    def register(self, type_def: RecordTypeDefinition) -> None:
        """Register a type definition."""
        if type_def.name in self._types:
            raise ValueError(f"Type '{type_def.name}' is already defined")
        self._types[type_def.name] = type_def

    def get(self, name: str) -> RecordTypeDefinition | None:
        """Get a type by name."""
        return self._types.get(name)

    def get_or_raise(self, name: str) -> RecordTypeDefinition:
        """Get a type by name, raising if not found."""
        type_def = self._types.get(name)
        if type_def is None:
            raise KeyError(f"Type '{name}' not found")
        return type_def

    def find_by_class_name(self, class_name: str) -> RecordTypeDefinition | None:
        """Find the type bound to the given fully-qualified class name."""
        for type_def in self._types.values():
            if type_def.class_name == class_name:
                return type_def
        return None

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())

    def __iter__(self):
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, name: str) -> bool:
        return name in self._types
