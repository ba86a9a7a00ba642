"""JSON Schema synthesis from registry field metadata.

Produces draft-07 schemas for editor tooling: one per resource type plus a
generic fallback. Dotted field paths become nested object properties and
leaves carry default, server-default, required and recommended-value hints.
"""

import json
import logging
from pathlib import Path

from resource_registry.parser.base import FieldMetadataEntry, ResourceDescriptor

from .registry import Registry

logger = logging.getLogger(__name__)

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"
SCHEMA_ID_FORMAT = "resource-registry://schemas/{}.json"
GENERIC_SCHEMA_NAME = "generic"
SPEC_PREFIX = "spec."

REQUIRED_HINT = "x-f5xc-required"
SERVER_DEFAULT_HINT = "x-f5xc-server-default"
RECOMMENDED_VALUE_HINT = "x-f5xc-recommended-value"


def infer_json_type(value) -> str | list[str]:
    """Infer a JSON Schema type from a literal value."""
    if value is None:
        return ["null", "string"]
    # bool before int: True is an int in Python.
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "integer" if value.is_integer() else "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def build_field_properties(entry: FieldMetadataEntry) -> dict:
    """Schema keywords for one field's metadata."""
    props: dict = {}
    if entry.description:
        props["description"] = entry.description

    if entry.has_default:
        props["default"] = entry.default
        props["type"] = infer_json_type(entry.default)

    if entry.server_default:
        props[SERVER_DEFAULT_HINT] = True
        props["description"] = (props.get("description", "") + " (Server provides default value)").strip()

    if entry.is_required_for("create"):
        props[REQUIRED_HINT] = True

    if entry.has_recommended_value:
        props[RECOMMENDED_VALUE_HINT] = entry.recommended_value
        props.setdefault("default", entry.recommended_value)
        props.setdefault("type", infer_json_type(entry.recommended_value))

    if entry.type:
        props.setdefault("type", entry.type)
    return props


def set_nested_property(properties: dict, path: str, props: dict) -> None:
    """Set leaf keywords at a dotted path, creating intermediate objects."""
    parts = path.split(".")
    current = properties
    for part in parts[:-1]:
        node = current.setdefault(part, {"type": "object", "properties": {}})
        current = node.setdefault("properties", {})

    leaf = current.setdefault(parts[-1], {"type": "string"})
    leaf.update(props)


def build_metadata_schema() -> dict:
    """The metadata block every resource shares."""
    return {
        "type": "object",
        "description": "Resource metadata containing identification and organizational information",
        "properties": {
            "name": {
                "type": "string",
                "description": "Resource name (required). Must be unique within the namespace.",
                REQUIRED_HINT: True,
            },
            "namespace": {
                "type": "string",
                "description": "Namespace where the resource resides.",
            },
            "labels": {
                "type": "object",
                "description": "Key-value labels for organizing and selecting resources.",
                "additionalProperties": {"type": "string"},
            },
            "annotations": {
                "type": "object",
                "description": "Key-value annotations for storing non-identifying metadata.",
                "additionalProperties": {"type": "string"},
            },
            "description": {
                "type": "string",
                "description": "Human-readable description of the resource.",
            },
            "disable": {
                "type": "boolean",
                "description": "Set to true to disable this resource.",
                "default": False,
            },
        },
        "required": ["name"],
    }


def build_spec_schema(descriptor: ResourceDescriptor) -> dict:
    spec_schema: dict = {
        "type": "object",
        "description": f"{descriptor.display_name} specification",
        "properties": {},
    }

    metadata = descriptor.field_metadata
    if metadata is None or not metadata.fields:
        spec_schema["additionalProperties"] = True
        return spec_schema

    for field_path, entry in metadata.fields.items():
        if not field_path.startswith(SPEC_PREFIX):
            continue
        set_nested_property(
            spec_schema["properties"], field_path[len(SPEC_PREFIX):], build_field_properties(entry)
        )

    required: list[str] = []
    for field_path in metadata.user_required_fields:
        if not field_path.startswith(SPEC_PREFIX):
            continue
        top_level = field_path[len(SPEC_PREFIX):].split(".")[0]
        if top_level and top_level not in required:
            required.append(top_level)
    if required:
        spec_schema["required"] = required

    spec_schema["additionalProperties"] = True
    return spec_schema


class SchemaGenerator:
    """Generates JSON Schemas for the resource types of a registry."""

    def __init__(self, registry: Registry):
        self.registry = registry

    def generate(self, resource_key: str) -> dict | None:
        """Schema for one resource type, or None if the key is unknown."""
        descriptor = self.registry.get(resource_key)
        if descriptor is None:
            return None

        return {
            "$schema": JSON_SCHEMA_DRAFT,
            "$id": SCHEMA_ID_FORMAT.format(resource_key),
            "title": descriptor.display_name,
            "description": descriptor.description,
            "type": "object",
            "properties": {
                "metadata": build_metadata_schema(),
                "spec": build_spec_schema(descriptor),
            },
            "required": ["metadata", "spec"],
        }

    def generate_generic(self) -> dict:
        """Fallback schema for resource types the registry does not know."""
        return {
            "$schema": JSON_SCHEMA_DRAFT,
            "$id": SCHEMA_ID_FORMAT.format(GENERIC_SCHEMA_NAME),
            "title": "Resource",
            "description": "Generic schema for API resources",
            "type": "object",
            "properties": {
                "metadata": build_metadata_schema(),
                "spec": {
                    "type": "object",
                    "description": "Resource specification",
                    "additionalProperties": True,
                },
            },
            "required": ["metadata", "spec"],
        }

    def has_detailed_field_metadata(self, resource_key: str) -> bool:
        metadata = self.registry.field_metadata(resource_key)
        return bool(metadata and metadata.fields)

    def write(self, output_dir: Path) -> dict[str, Path]:
        """Write one schema file per resource type plus ``generic.json``."""
        output_dir.mkdir(parents=True, exist_ok=True)
        schemas = {key: self.generate(key) for key in self.registry.keys()}
        schemas[GENERIC_SCHEMA_NAME] = self.generate_generic()

        written = {}
        for name, schema in schemas.items():
            file_path = output_dir / f"{name}.json"
            file_path.write_text(json.dumps(schema, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
            written[name] = file_path
        logger.info("Wrote %d schemas to %s", len(written), output_dir)
        return written
