"""Field metadata extraction from component schemas.

Walks a resource's spec schema and produces a flat, sparse map from dotted
field path (``spec.monitoring.enabled``) to FieldMetadataEntry. Only fields
carrying a default, a server-default marker, a required-for marker or a
recommended value are kept.

``$ref`` properties are followed exactly one hop. Deeper reference chains
are left unresolved, which bounds the walk and sidesteps cycles; metadata
that lives more than one reference away is not collected.
"""

import logging

from .base import FieldMetadataEntry, FieldRequiredFor, ResourceFieldMetadata
from .schema_id import schema_name_stem

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"
SPEC_SCHEMA_SUFFIXES = ("CreateSpecType", "GlobalSpecType")

SERVER_DEFAULT_KEYS = ("x-f5xc-server-default", "x-ves-server-default")
REQUIRED_FOR_KEYS = ("x-f5xc-required-for", "x-ves-required-for")
RECOMMENDED_VALUE_KEYS = ("x-f5xc-recommended-value", "x-ves-recommended-value")

MAX_REF_DEPTH = 1
BASE_PATH = "spec"


def find_spec_schema(schemas: dict, schema_id: str) -> tuple[str, dict] | None:
    """Locate the create (or global) spec schema for a schema id.

    Names are matched exactly but case-insensitively against
    ``<stem>CreateSpecType`` first, then ``<stem>GlobalSpecType``.
    """
    stem = schema_name_stem(schema_id)
    if not stem or not schemas:
        return None

    by_lower_name = {name.lower(): name for name in schemas}
    for suffix in SPEC_SCHEMA_SUFFIXES:
        name = by_lower_name.get(f"{stem}{suffix}".lower())
        if name is not None and isinstance(schemas[name], dict):
            return name, schemas[name]
    return None


def _first_marker(node: dict, keys: tuple[str, ...]) -> tuple[bool, object]:
    for key in keys:
        if key in node:
            return True, node[key]
    return False, None


def _parse_required_for(raw) -> FieldRequiredFor | None:
    if isinstance(raw, dict):
        required_for = FieldRequiredFor(
            minimum_config=raw.get("minimum_config"),
            create=raw.get("create"),
            update=raw.get("update"),
        )
    elif isinstance(raw, list):
        # Some documents list the operations instead of mapping them.
        required_for = FieldRequiredFor(
            minimum_config=True if "minimum_config" in raw else None,
            create=True if "create" in raw else None,
            update=True if "update" in raw else None,
        )
    else:
        return None
    return None if required_for.is_empty() else required_for


def build_entry(node: dict) -> FieldMetadataEntry | None:
    """Build a metadata entry for one schema property, or None if unremarkable."""
    values: dict = {}

    if "default" in node:
        values["default"] = node["default"]

    has_server_default, server_default = _first_marker(node, SERVER_DEFAULT_KEYS)
    if has_server_default and server_default:
        values["server_default"] = True

    has_required_for, raw_required_for = _first_marker(node, REQUIRED_FOR_KEYS)
    if has_required_for:
        required_for = _parse_required_for(raw_required_for)
        if required_for is not None:
            values["required_for"] = required_for

    has_recommended, recommended = _first_marker(node, RECOMMENDED_VALUE_KEYS)
    if has_recommended:
        values["recommended_value"] = recommended

    if not values:
        return None

    if node.get("description"):
        values["description"] = node["description"]
    if isinstance(node.get("type"), str):
        values["type"] = node["type"]
    return FieldMetadataEntry(**values)


class FieldMetadataExtractor:
    """Extracts field metadata against one document's component-schema table."""

    def __init__(self, schemas: dict | None):
        self.schemas = schemas or {}

    def resolve_ref(self, ref: str) -> dict | None:
        if not isinstance(ref, str) or not ref.startswith(SCHEMA_REF_PREFIX):
            return None
        target = self.schemas.get(ref[len(SCHEMA_REF_PREFIX):])
        return target if isinstance(target, dict) else None

    def extract(self, schema: dict, base_path: str = BASE_PATH) -> dict[str, FieldMetadataEntry]:
        fields: dict[str, FieldMetadataEntry] = {}
        self._walk(schema, base_path, fields, ref_depth=0)
        return fields

    def _walk(self, schema: dict, path: str, fields: dict, ref_depth: int) -> None:
        if not isinstance(schema, dict):
            return

        if "$ref" in schema:
            if ref_depth >= MAX_REF_DEPTH:
                return
            target = self.resolve_ref(schema["$ref"])
            if target is None:
                logger.debug("Unresolvable reference %s at %s", schema["$ref"], path)
                return
            self._walk(target, path, fields, ref_depth + 1)
            return

        for branch in schema.get("allOf") or []:
            self._walk(branch, path, fields, ref_depth)

        properties = schema.get("properties")
        if isinstance(properties, dict):
            for name, prop in properties.items():
                if not isinstance(prop, dict):
                    continue
                child_path = f"{path}.{name}"
                entry = build_entry(prop)
                if entry is not None and child_path not in fields:
                    fields[child_path] = entry
                self._walk(prop, child_path, fields, ref_depth)

        items = schema.get("items")
        if isinstance(items, dict):
            self._walk(items, path, fields, ref_depth)


def summarize(fields: dict[str, FieldMetadataEntry]) -> ResourceFieldMetadata:
    """Sort the field map and derive the summary lists from it."""
    ordered = {path: fields[path] for path in sorted(fields)}

    server_default_fields = [
        path for path, entry in ordered.items() if entry.has_default or entry.server_default
    ]
    # A field the server fills in is never something the user must supply.
    user_required_fields = [
        path
        for path, entry in ordered.items()
        if entry.is_required_for("create") and not entry.has_default and not entry.server_default
    ]
    recommended_value_fields = [
        path for path, entry in ordered.items() if entry.has_recommended_value
    ]

    return ResourceFieldMetadata(
        fields=ordered,
        server_default_fields=server_default_fields,
        user_required_fields=user_required_fields,
        recommended_value_fields=recommended_value_fields,
    )


def extract_field_metadata(schemas: dict | None, schema_id: str) -> ResourceFieldMetadata | None:
    """Extract the field metadata for a resource, or None if there is none."""
    found = find_spec_schema(schemas or {}, schema_id)
    if found is None:
        return None
    name, schema = found
    fields = FieldMetadataExtractor(schemas).extract(schema)
    if not fields:
        logger.debug("Spec schema %s carries no field metadata", name)
        return None
    return summarize(fields)
