"""Typed Records - method-backed fields and index upkeep for typed records."""

from typed_records.cache import LoadingCache
from typed_records.introspection import ClassInspector, MethodNotFoundError
from typed_records.method_field import MethodFieldDefinition, MethodSignature
from typed_records.parsing import TypeParser
from typed_records.record import Record
from typed_records.storage import (
    AbstractStorage,
    AggregateStorage,
    Environment,
    ForwardingStorage,
    MemoryStorage,
    RecalculationTarget,
    Storage,
)
from typed_records.types import (
    FieldDefinition,
    FieldType,
    IndexDefinition,
    RecordTypeDefinition,
    TypeRegistry,
)

__all__ = [
    # Main API
    "TypeParser",
    "Record",
    "Environment",
    # Fields
    "FieldDefinition",
    "FieldType",
    "MethodFieldDefinition",
    "MethodSignature",
    "IndexDefinition",
    "RecordTypeDefinition",
    "TypeRegistry",
    # Method resolution
    "ClassInspector",
    "LoadingCache",
    "MethodNotFoundError",
    # Storage
    "Storage",
    "AbstractStorage",
    "MemoryStorage",
    "ForwardingStorage",
    "AggregateStorage",
    "RecalculationTarget",
]

__version__ = "0.1.0"
