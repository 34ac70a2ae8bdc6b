"""Class lookup by qualified name and method lookup by name."""

from __future__ import annotations

import importlib
import inspect
import logging
import sys
import threading
import typing
from typing import Any, Callable

log = logging.getLogger(__name__)

# Type name reported for parameters without an annotation
UNANNOTATED_TYPE_NAME = "builtins.object"


class MethodNotFoundError(LookupError):
    """Raised when a compatible class has no method with the bound name."""

    def __init__(self, class_name: str, method_name: str) -> None:
        super().__init__(f"Method '{method_name}' not found on '{class_name}'")
        self.class_name = class_name
        self.method_name = method_name


def qualified_name(obj: Any) -> str:
    """Return ``module.qualname`` for a class or function.

    Strings are returned unchanged so forward references that could not be
    evaluated still report the name they were written with.
    """
    if isinstance(obj, str):
        return obj
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None)
    if module is None or qualname is None:
        return repr(obj)
    return f"{module}.{qualname}"


class ClassInspector:
    """Resolves class names to loaded classes and finds methods on them.

    Classes can be registered up front; anything else is imported on
    demand from its fully-qualified name.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type] = {}
        self._lock = threading.Lock()

    def register(self, cls: type, name: str | None = None) -> None:
        """Register a class under its qualified name (or an explicit one)."""
        with self._lock:
            self._classes[name or qualified_name(cls)] = cls

    def class_by_name(self, name: str | None) -> type | None:
        """Return the loaded class with the given name, or None."""
        if not name:
            return None
        cls = self._classes.get(name)
        if cls is not None:
            return cls

        cls = self._import_class(name)
        if cls is not None:
            with self._lock:
                self._classes.setdefault(name, cls)
        return cls

    def _import_class(self, name: str) -> type | None:
        parts = name.split(".")
        # Longest importable module prefix wins; the rest is the qualname.
        for split_at in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split_at])
            try:
                module = importlib.import_module(module_name)
            except ImportError:
                continue
            obj: Any = module
            for attr in parts[split_at:]:
                obj = getattr(obj, attr, None)
                if obj is None:
                    break
            if isinstance(obj, type):
                return obj
            log.debug("'%s' does not name a class in module '%s'", name, module_name)
            return None
        log.debug("Cannot import class '%s'", name)
        return None

    def get_method(self, cls: type, name: str) -> Callable[..., Any]:
        """Find the method called ``name`` on ``cls`` or one of its bases.

        Only instance methods qualify; a property resolves to its getter.
        The nearest definition in the MRO wins, so an attribute that shadows
        a base class method hides it.

        Raises:
            MethodNotFoundError: If the nearest attribute by that name is
                missing or is not an instance method.
        """
        for klass in cls.__mro__:
            if name not in vars(klass):
                continue
            attr = vars(klass)[name]
            if isinstance(attr, property):
                attr = attr.fget
            if inspect.isfunction(attr):
                return attr
            break
        raise MethodNotFoundError(qualified_name(cls), name)

    def parameter_type_names(self, method: Callable[..., Any]) -> tuple[str, ...]:
        """Return the qualified type names of an instance method's parameters.

        The leading ``self`` is not counted. When the annotations can't all
        be evaluated together, each one is resolved on its own; one that
        still can't be resolved is reported by the name it was written with.
        """
        try:
            hints = typing.get_type_hints(method)
        except (NameError, TypeError, AttributeError):
            hints = None
        raw = getattr(method, "__annotations__", {})

        params = list(inspect.signature(method).parameters.values())[1:]

        names: list[str] = []
        for param in params:
            if hints is not None and param.name in hints:
                names.append(qualified_name(hints[param.name]))
            elif param.name in raw:
                names.append(qualified_name(self._resolve_annotation(method, raw[param.name])))
            else:
                names.append(UNANNOTATED_TYPE_NAME)
        return tuple(names)

    def _resolve_annotation(self, method: Callable[..., Any], annotation: Any) -> Any:
        if not isinstance(annotation, str):
            return annotation

        namespaces = [getattr(method, "__globals__", {})]
        module = sys.modules.get(getattr(method, "__module__", None) or "")
        if module is not None:
            namespaces.append(vars(module))
        for namespace in namespaces:
            try:
                return eval(annotation, dict(namespace))
            except (NameError, AttributeError, SyntaxError, TypeError):
                continue

        # Names only imported for type checking may still be registered here
        with self._lock:
            registered = list(self._classes.items())
        for name, cls in registered:
            if name == annotation or name.rsplit(".", 1)[-1] == annotation:
                return cls

        log.debug("Cannot resolve annotation '%s' of %s", annotation, qualified_name(method))
        return annotation


# Shared inspector used by fields that are not given one explicitly
default_inspector = ClassInspector()
