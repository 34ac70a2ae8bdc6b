"""Tests for class and method lookup."""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING

import pytest

from typed_records import method_field
from typed_records.introspection import ClassInspector, MethodNotFoundError, qualified_name

if TYPE_CHECKING:
    from typed_records.method_field import MethodFieldDefinition

    from app.shapes import Polygon


class Shape:
    def area(self) -> float:
        return 0.0

    class Corner:
        def angle(self) -> int:
            return 90


class Square(Shape):
    side = 2

    def area(self) -> float:
        return float(self.side**2)


class RegularPolygon:
    sides = 5


class Document:
    def __init__(self, title: str) -> None:
        self.title = title

    def label(self, field: MethodFieldDefinition) -> str:
        return f"{field.internal_name}: {self.title}"

    def merge(self, other: Polygon, count: int) -> None:
        pass


class TestQualifiedName:
    """Tests for qualified_name."""

    def test_class(self):
        """Test qualified names of classes."""
        assert qualified_name(OrderedDict) == "collections.OrderedDict"
        assert qualified_name(int) == "builtins.int"

    def test_nested_class(self):
        """Test the qualified name of a nested class."""
        assert qualified_name(Shape.Corner).endswith("Shape.Corner")

    def test_string_unchanged(self):
        """Test that strings pass through."""
        assert qualified_name("app.models.Thing") == "app.models.Thing"


class TestClassByName:
    """Tests for ClassInspector.class_by_name."""

    def test_importable_class(self):
        """Test importing a class by name."""
        assert ClassInspector().class_by_name("collections.OrderedDict") is OrderedDict

    def test_nested_class(self):
        """Test importing a nested class by name."""
        inspector = ClassInspector()
        assert inspector.class_by_name(qualified_name(Shape.Corner)) is Shape.Corner

    def test_registered_class(self):
        """Test looking up a registered class."""
        inspector = ClassInspector()
        inspector.register(Square, "app.shapes.Square")
        assert inspector.class_by_name("app.shapes.Square") is Square

    def test_unknown_module(self):
        """Test a name whose module can't be imported."""
        assert ClassInspector().class_by_name("no_such_module.Thing") is None

    def test_unknown_attribute(self):
        """Test a name missing from its module."""
        assert ClassInspector().class_by_name("collections.NoSuchThing") is None

    def test_not_a_class(self):
        """Test a name that refers to a function."""
        assert ClassInspector().class_by_name("json.dumps") is None

    def test_blank_name(self):
        """Test empty and missing names."""
        assert ClassInspector().class_by_name(None) is None
        assert ClassInspector().class_by_name("") is None


class TestGetMethod:
    """Tests for ClassInspector.get_method."""

    def test_own_method(self):
        """Test finding a method defined on the class."""
        assert ClassInspector().get_method(Square, "area") is Square.area

    def test_inherited_method(self):
        """Test finding a method defined on a base class."""
        class Plain(Shape):
            pass

        assert ClassInspector().get_method(Plain, "area") is Shape.area

    def test_missing_method(self):
        """Test the error for a missing method."""
        with pytest.raises(MethodNotFoundError) as exc_info:
            ClassInspector().get_method(Square, "perimeter")
        assert exc_info.value.class_name == qualified_name(Square)
        assert "perimeter" in str(exc_info.value)

    def test_attribute_is_not_method(self):
        """Test that a class attribute is not a method."""
        with pytest.raises(MethodNotFoundError):
            ClassInspector().get_method(Square, "side")

    def test_lookup_error_subclass(self):
        """Test that MethodNotFoundError is a LookupError."""
        assert issubclass(MethodNotFoundError, LookupError)


class TestParameterTypeNames:
    """Tests for ClassInspector.parameter_type_names."""

    def test_evaluated_annotations(self):
        """Test parameter types from annotations that evaluate together."""
        names = ClassInspector().parameter_type_names(Document.__init__)
        assert names == ("builtins.str",)

    def test_each_annotation_resolved_separately(self):
        """Test that one unresolvable annotation doesn't hide the others."""
        names = ClassInspector().parameter_type_names(Document.merge)
        assert names == ("Polygon", "builtins.int")

    def test_registered_name_resolves_annotation(self):
        """Test that a registered class resolves a type-checking-only import."""
        inspector = ClassInspector()
        inspector.register(RegularPolygon, "app.shapes.Polygon")
        names = inspector.parameter_type_names(Document.merge)
        assert names == (qualified_name(RegularPolygon), "builtins.int")

    def test_type_checking_only_field_parameter(self):
        """Test a field parameter whose type is imported only for type checking."""
        inspector = ClassInspector()
        inspector.register(Document)
        assert inspector.parameter_type_names(Document.label) == ("MethodFieldDefinition",)

        field = method_field.MethodFieldDefinition(
            internal_name="caption",
            declaring_class_name=qualified_name(Document),
            method_name="label",
            inspector=inspector,
        )
        assert field.parameter_type_names == (
            "typed_records.method_field.MethodFieldDefinition",
        )
        assert field.has_single_self_parameter is True
        assert field.compute(Document("Notes")) == "caption: Notes"
