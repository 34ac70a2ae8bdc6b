"""Parsing module for the record type definition DSL."""

from typed_records.parsing.type_parser import TypeParser

__all__ = [
    "TypeParser",
]
