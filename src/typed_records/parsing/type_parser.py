"""Parser for the record type definition DSL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from typed_records.introspection import ClassInspector, default_inspector
from typed_records.method_field import MethodFieldDefinition
from typed_records.parsing.type_lexer import TypeLexer
from typed_records.storage import Environment
from typed_records.types import (
    FieldDefinition,
    IndexDefinition,
    RecordTypeDefinition,
    TypeRegistry,
    field_type_from_name,
)


@dataclass
class FieldSpec:
    """Specification for a field before resolution."""

    name: str
    type_name: str
    method_name: str | None = None  # set for method fields
    display_name: str | None = None
    lineno: int = 0


@dataclass
class IndexSpec:
    """Specification for an index before resolution."""

    name: str
    fields: list[str]
    unique: bool = False
    lineno: int = 0


@dataclass
class TypeSpec:
    """Specification for a record type before resolution."""

    name: str
    class_name: str | None
    members: list[FieldSpec | IndexSpec] = field(default_factory=list)
    lineno: int = 0


class TypeParser:
    """Parser for the record type definition DSL.

    Example::

        type Person = "app.models.Person" {
            first_name: text,
            full_name: text via get_full_name,
            index by_name (first_name, full_name)
        }
        index everywhere (full_name)
    """

    tokens = TypeLexer.tokens

    def __init__(self, inspector: ClassInspector | None = None) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.inspector = inspector if inspector is not None else default_inspector
        self.registry: TypeRegistry = TypeRegistry()
        self.indexes: list[IndexDefinition] = []

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : statement_list"""
        p[0] = p[1]

    def p_statement_list_empty(self, p: yacc.YaccProduction) -> None:
        """statement_list :"""
        p[0] = []

    def p_statement_list_multiple(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement_list statement"""
        p[0] = p[1]
        p[0].append(p[2])

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : type_def
                     | index_def"""
        p[0] = p[1]

    def p_type_def(self, p: yacc.YaccProduction) -> None:
        """type_def : TYPE IDENTIFIER class_binding LBRACE member_list RBRACE
                    | TYPE IDENTIFIER class_binding LBRACE member_list COMMA RBRACE"""
        p[0] = TypeSpec(name=p[2], class_name=p[3], members=p[5], lineno=p.lineno(1))

    def p_type_def_empty(self, p: yacc.YaccProduction) -> None:
        """type_def : TYPE IDENTIFIER class_binding LBRACE RBRACE"""
        p[0] = TypeSpec(name=p[2], class_name=p[3], members=[], lineno=p.lineno(1))

    def p_class_binding(self, p: yacc.YaccProduction) -> None:
        """class_binding : EQUALS STRING"""
        p[0] = p[2]

    def p_class_binding_none(self, p: yacc.YaccProduction) -> None:
        """class_binding :"""
        p[0] = None

    def p_member_list_single(self, p: yacc.YaccProduction) -> None:
        """member_list : member"""
        p[0] = [p[1]]

    def p_member_list_multiple(self, p: yacc.YaccProduction) -> None:
        """member_list : member_list COMMA member"""
        p[0] = p[1] + [p[3]]

    def p_member(self, p: yacc.YaccProduction) -> None:
        """member : field
                  | index_def"""
        p[0] = p[1]

    def p_field(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER COLON IDENTIFIER method_binding label"""
        p[0] = FieldSpec(
            name=p[1],
            type_name=p[3],
            method_name=p[4],
            display_name=p[5],
            lineno=p.lineno(1),
        )

    def p_method_binding(self, p: yacc.YaccProduction) -> None:
        """method_binding : VIA IDENTIFIER"""
        p[0] = p[2]

    def p_method_binding_none(self, p: yacc.YaccProduction) -> None:
        """method_binding :"""
        p[0] = None

    def p_label(self, p: yacc.YaccProduction) -> None:
        """label : AS STRING"""
        p[0] = p[2]

    def p_label_none(self, p: yacc.YaccProduction) -> None:
        """label :"""
        p[0] = None

    def p_index_def(self, p: yacc.YaccProduction) -> None:
        """index_def : INDEX IDENTIFIER LPAREN name_list RPAREN"""
        p[0] = IndexSpec(name=p[2], fields=p[4], lineno=p.lineno(1))

    def p_index_def_unique(self, p: yacc.YaccProduction) -> None:
        """index_def : UNIQUE INDEX IDENTIFIER LPAREN name_list RPAREN"""
        p[0] = IndexSpec(name=p[3], fields=p[5], unique=True, lineno=p.lineno(1))

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> TypeRegistry:
        """Parse type definitions and return a populated TypeRegistry.

        Indexes declared outside any type are left in ``self.indexes``.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.registry = TypeRegistry()
        self.indexes = []

        self.lexer.lexer.lineno = 1
        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        if specs is None:
            specs = []

        self._resolve_specs(specs)
        return self.registry

    def parse_environment(self, data: str) -> Environment:
        """Parse type definitions into an Environment with its global indexes."""
        registry = self.parse(data)
        return Environment(registry, self.indexes)

    def _resolve_specs(self, specs: list[TypeSpec | IndexSpec]) -> None:
        """Turn parsed specs into type and index definitions."""
        for spec in specs:
            if isinstance(spec, TypeSpec):
                self.registry.register(self._resolve_type_spec(spec))

        known_fields: set[str] = set()
        for type_def in self.registry:
            known_fields.update(type_def.field_names())

        for spec in specs:
            if isinstance(spec, IndexSpec):
                self._check_index_fields(spec, known_fields, "any type")
                if any(idx.name == spec.name for idx in self.indexes):
                    raise ValueError(f"Index '{spec.name}' is already defined")
                self.indexes.append(self._resolve_index_spec(spec))

    def _resolve_type_spec(self, spec: TypeSpec) -> RecordTypeDefinition:
        type_def = RecordTypeDefinition(name=spec.name, class_name=spec.class_name)

        for member in spec.members:
            if not isinstance(member, FieldSpec):
                continue
            if type_def.get_field(member.name) is not None:
                raise ValueError(
                    f"Field '{member.name}' is already defined in type '{spec.name}'"
                )
            item_type = field_type_from_name(member.type_name)
            if member.method_name is None:
                type_def.fields.append(
                    FieldDefinition(
                        internal_name=member.name,
                        item_type=item_type,
                        display_name=member.display_name,
                        declaring_class_name=spec.class_name,
                    )
                )
            else:
                type_def.methods.append(
                    MethodFieldDefinition(
                        internal_name=member.name,
                        item_type=item_type,
                        display_name=member.display_name,
                        declaring_class_name=spec.class_name,
                        method_name=member.method_name,
                        inspector=self.inspector,
                    )
                )

        known_fields = set(type_def.field_names())
        for member in spec.members:
            if isinstance(member, IndexSpec):
                self._check_index_fields(member, known_fields, f"type '{spec.name}'")
                if type_def.get_index(member.name) is not None:
                    raise ValueError(
                        f"Index '{member.name}' is already defined in type '{spec.name}'"
                    )
                type_def.indexes.append(self._resolve_index_spec(member))

        return type_def

    def _check_index_fields(self, spec: IndexSpec, known: set[str], where: str) -> None:
        missing = [name for name in spec.fields if name not in known]
        if missing:
            raise ValueError(
                f"Index '{spec.name}' (line {spec.lineno}) names unknown fields "
                f"of {where}: {missing}"
            )

    def _resolve_index_spec(self, spec: IndexSpec) -> IndexDefinition:
        return IndexDefinition(name=spec.name, fields=list(spec.fields), unique=spec.unique)
