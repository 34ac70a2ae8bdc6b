"""Command line tool for inspecting record type definitions."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from typed_records.introspection import MethodNotFoundError
from typed_records.metadata import save_metadata
from typed_records.method_field import MethodFieldDefinition
from typed_records.parsing import TypeParser
from typed_records.storage import Environment
from typed_records.types import FieldDefinition, RecordTypeDefinition


def describe_field(field_def: FieldDefinition) -> dict[str, Any]:
    """Summarize a field for display."""
    entry: dict[str, Any] = {
        "name": field_def.internal_name,
        "type": field_def.item_type.value,
        "display_name": field_def.get_display_name(),
    }
    if isinstance(field_def, MethodFieldDefinition):
        entry["method"] = field_def.method_name
        try:
            entry["parameter_types"] = list(field_def.parameter_type_names)
            entry["single_self_parameter"] = field_def.has_single_self_parameter
        except MethodNotFoundError as e:
            entry["error"] = str(e)
    return entry


def describe_type(type_def: RecordTypeDefinition) -> dict[str, Any]:
    """Summarize a record type for display."""
    return {
        "name": type_def.name,
        "class": type_def.class_name,
        "fields": [describe_field(f) for f in type_def.fields],
        "methods": [describe_field(m) for m in type_def.methods],
        "indexes": [idx.to_definition() for idx in type_def.indexes],
    }


def print_type(summary: dict[str, Any]) -> None:
    """Print a type summary as text."""
    class_name = summary["class"] or "-"
    print(f"{summary['name']} ({class_name})")
    for entry in summary["fields"]:
        print(f"  {entry['name']:<20} {entry['type']:<8} {entry['display_name']}")
    for entry in summary["methods"]:
        print(
            f"  {entry['name']:<20} {entry['type']:<8} {entry['display_name']}"
            f"  via {entry['method']}"
        )
        if "error" in entry:
            print(f"      error: {entry['error']}")
        elif entry["parameter_types"]:
            params = ", ".join(entry["parameter_types"])
            flag = " [single self parameter]" if entry["single_self_parameter"] else ""
            print(f"      params: {params}{flag}")
    for idx in summary["indexes"]:
        print(f"  index {idx['name']} ({', '.join(idx['fields'])})")


def load_schema(path: Path) -> Environment:
    """Parse a schema file into an Environment."""
    return TypeParser().parse_environment(path.read_text())


def cmd_describe(args: argparse.Namespace) -> int:
    environment = load_schema(args.schema)

    if args.type is not None:
        type_def = environment.registry.get(args.type)
        if type_def is None:
            print(f"Error: Unknown type: {args.type}", file=sys.stderr)
            return 1
        type_defs = [type_def]
    else:
        type_defs = list(environment.registry)

    summaries = [describe_type(t) for t in type_defs]
    if args.json:
        payload = {
            "types": summaries,
            "indexes": [idx.to_definition() for idx in environment.indexes],
        }
        print(json.dumps(payload, indent=2))
        return 0

    for summary in summaries:
        print_type(summary)
    for idx in environment.indexes:
        print(f"index {idx.name} ({', '.join(idx.fields)})")
    return 0


def cmd_save(args: argparse.Namespace) -> int:
    environment = load_schema(args.schema)
    path = save_metadata(args.data_dir, environment)
    print(f"Saved {len(environment.registry)} types to {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Inspect record type definitions and their method fields"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    describe = subparsers.add_parser("describe", help="Describe types in a schema file")
    describe.add_argument("schema", type=Path, help="Path to the schema file")
    describe.add_argument("-t", "--type", help="Only describe this type")
    describe.add_argument("-j", "--json", action="store_true", help="Output as JSON")
    describe.set_defaults(func=cmd_describe)

    save = subparsers.add_parser("save", help="Write metadata for a schema file")
    save.add_argument("schema", type=Path, help="Path to the schema file")
    save.add_argument("data_dir", type=Path, help="Directory to write metadata into")
    save.set_defaults(func=cmd_save)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.schema.exists():
        print(f"Error: Schema file not found: {args.schema}", file=sys.stderr)
        return 1

    try:
        return args.func(args)
    except (SyntaxError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
