"""Fields whose values are computed by a method on the record's class."""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable

from typed_records.cache import LoadingCache
from typed_records.introspection import ClassInspector, default_inspector, qualified_name
from typed_records.labels import accessor_label
from typed_records.storage import recalculate_index
from typed_records.types import FieldDefinition, with_boolean_suffix

if TYPE_CHECKING:
    from typed_records.record import Record

log = logging.getLogger(__name__)

METHOD_NAME_KEY = "python.method"

# Deprecated: parameter types are derived from the method itself. Accepted
# when reading old definitions and discarded.
PARAMETER_TYPES_KEY = "python.parameterTypes"


@dataclass(frozen=True)
class MethodSignature:
    """Snapshot of a bound method's parameter types."""

    parameter_type_names: tuple[str, ...] = ()
    has_single_self_parameter: bool = False

    @classmethod
    def of(cls, parameter_type_names: tuple[str, ...]) -> MethodSignature:
        names = tuple(_descriptor_type_name(n) for n in parameter_type_names)
        return cls(
            parameter_type_names=names,
            has_single_self_parameter=(
                len(names) == 1 and names[0] == qualified_name(MethodFieldDefinition)
            ),
        )


def _descriptor_type_name(name: str) -> str:
    # An annotation imported only for type checking keeps its bare name
    if name == MethodFieldDefinition.__name__:
        return qualified_name(MethodFieldDefinition)
    return name


@dataclass
class MethodFieldDefinition(FieldDefinition):
    """A field computed by calling ``method_name`` on the record's object.

    Resolved methods are cached per concrete class. Copies made with
    ``copy()``, ``copy.deepcopy`` or ``dataclasses.replace`` start with an
    empty cache.
    """

    method_name: str | None = None
    inspector: ClassInspector = field(default=default_inspector, repr=False, compare=False)
    _method_cache: LoadingCache[type, Callable[..., Any]] = field(
        init=False, repr=False, compare=False
    )
    _signature: MethodSignature | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self._method_cache = LoadingCache(self._load_method)

    @classmethod
    def from_definition(cls, definition: dict[str, Any], **kwargs: Any) -> Any:
        method_name = definition.pop(METHOD_NAME_KEY, None)
        definition.pop(PARAMETER_TYPES_KEY, None)
        kwargs.setdefault("method_name", method_name)
        return super().from_definition(definition, **kwargs)

    def to_definition(self) -> dict[str, Any]:
        definition = super().to_definition()
        if self.method_name is not None:
            definition[METHOD_NAME_KEY] = self.method_name
        return definition

    def copy(self) -> MethodFieldDefinition:
        """Return a copy that shares no cached resolution state."""
        return replace(self, options=dict(self.options))

    __copy__ = copy

    def __deepcopy__(self, memo: dict[int, Any]) -> MethodFieldDefinition:
        # The inspector is shared; the resolution cache is rebuilt
        return replace(self, options=deepcopy(self.options, memo))

    def can_resolve_for(self, object_class: type) -> bool:
        """Return whether ``object_class`` can carry the bound method."""
        if not self.method_name:
            return False
        declaring_class = self.inspector.class_by_name(self.declaring_class_name)
        return (
            declaring_class is not None
            and isinstance(object_class, type)
            and issubclass(object_class, declaring_class)
        )

    def resolve_method(self, object_class: type) -> Callable[..., Any] | None:
        """Return the bound method for ``object_class``, or None if incompatible.

        Raises:
            MethodNotFoundError: If the class is compatible but has no such
                method. The failure is remembered and raised again for later
                calls with the same class.
        """
        if not self.can_resolve_for(object_class):
            return None
        return self._method_cache.get(object_class)

    def _load_method(self, object_class: type) -> Callable[..., Any]:
        method = self.inspector.get_method(object_class, self.method_name)
        log.debug(
            "Resolved '%s' for %s to %s",
            self.method_name,
            qualified_name(object_class),
            qualified_name(method),
        )
        return method

    def _introspect(self) -> MethodSignature:
        signature = self._signature
        if signature is None:
            declaring_class = self.inspector.class_by_name(self.declaring_class_name)
            method = self.resolve_method(declaring_class) if declaring_class else None
            names = self.inspector.parameter_type_names(method) if method else ()
            signature = MethodSignature.of(names)
            self._signature = signature
        return signature

    @property
    def parameter_type_names(self) -> tuple[str, ...]:
        """Qualified type names of the bound method's parameters, ``self`` excluded."""
        return self._introspect().parameter_type_names

    @parameter_type_names.setter
    def parameter_type_names(self, ignored: Any) -> None:
        # Deprecated; parameter types always come from the method.
        pass

    @property
    def has_single_self_parameter(self) -> bool:
        """True when the method takes just one argument: this field."""
        return self._introspect().has_single_self_parameter

    def reset_signature(self) -> None:
        """Forget the cached signature so it is introspected again."""
        self._signature = None

    def get_display_name(self) -> str:
        if self.display_name and self.display_name.strip():
            return self.display_name

        name = self.method_name
        if not name or not name.strip():
            name = self.internal_name

        return with_boolean_suffix(accessor_label(name), self.is_boolean)

    def compute(self, obj: Any) -> Any:
        """Call the bound method on ``obj``; None if its class can't carry it."""
        method = self.resolve_method(type(obj))
        if method is None:
            return None
        if self.has_single_self_parameter:
            return method(obj, self)
        return method(obj)

    def recalculate(self, record: Record | None) -> None:
        """Ask the record's storage engine to refresh indexes covering this field."""
        if record is None or record.type_def is None or record.storage is None:
            return
        storage = record.storage

        for idx in record.type_def.indexes:
            if idx.covers(self.internal_name):
                recalculate_index(storage, record, idx)

        for idx in storage.environment.indexes:
            if idx.covers(self.internal_name):
                recalculate_index(storage, record, idx)
