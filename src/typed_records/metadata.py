"""Saving and loading record type metadata."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from typed_records.introspection import ClassInspector, default_inspector
from typed_records.method_field import MethodFieldDefinition
from typed_records.storage import Environment
from typed_records.types import (
    FieldDefinition,
    IndexDefinition,
    RecordTypeDefinition,
    TypeRegistry,
)

log = logging.getLogger(__name__)

METADATA_FILE = "_metadata.json"


def serialize_environment(environment: Environment) -> dict[str, Any]:
    """Serialize types and global indexes to a JSON-compatible mapping."""
    types: dict[str, Any] = {}
    for type_def in environment.registry:
        spec: dict[str, Any] = {
            "fields": [f.to_definition() for f in type_def.fields],
            "methods": [m.to_definition() for m in type_def.methods],
            "indexes": [idx.to_definition() for idx in type_def.indexes],
        }
        if type_def.class_name is not None:
            spec["class"] = type_def.class_name
        types[type_def.name] = spec

    return {
        "types": types,
        "indexes": [idx.to_definition() for idx in environment.indexes],
    }


def deserialize_environment(
    metadata: dict[str, Any], inspector: ClassInspector | None = None
) -> Environment:
    """Rebuild an Environment from a mapping produced by serialize_environment.

    Field definitions are consumed as they are read.
    """
    inspector = inspector if inspector is not None else default_inspector
    registry = TypeRegistry()

    for name, spec in metadata.get("types", {}).items():
        type_def = RecordTypeDefinition(name=name, class_name=spec.get("class"))
        for definition in spec.get("fields", []):
            type_def.fields.append(FieldDefinition.from_definition(dict(definition)))
        for definition in spec.get("methods", []):
            type_def.methods.append(
                MethodFieldDefinition.from_definition(dict(definition), inspector=inspector)
            )
        for definition in spec.get("indexes", []):
            type_def.indexes.append(IndexDefinition.from_definition(definition))
        registry.register(type_def)

    indexes = [IndexDefinition.from_definition(d) for d in metadata.get("indexes", [])]
    return Environment(registry, indexes)


def save_metadata(data_dir: Path, environment: Environment) -> Path:
    """Write the environment's metadata file into ``data_dir``."""
    data_dir.mkdir(parents=True, exist_ok=True)
    metadata_path = data_dir / METADATA_FILE
    with open(metadata_path, "w") as f:
        json.dump(serialize_environment(environment), f, indent=2)
    log.debug("Saved metadata for %d types to %s", len(environment.registry), metadata_path)
    return metadata_path


def load_environment(data_dir: Path, inspector: ClassInspector | None = None) -> Environment:
    """Load an Environment from the metadata file in ``data_dir``."""
    metadata_path = data_dir / METADATA_FILE
    if not metadata_path.exists():
        raise FileNotFoundError(f"Metadata file not found: {metadata_path}")

    with open(metadata_path) as f:
        metadata = json.load(f)

    return deserialize_environment(metadata, inspector)
