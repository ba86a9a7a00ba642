"""Registry merging and artifact generation.

Descriptors from every document are merged in sorted document order with
first-occurrence-wins deduplication, manual overrides are applied, and the
result is emitted as a sorted JSON snapshot plus a generated Python lookup
module. Both artifacts are byte-identical across runs over the same input.
"""

import json
import logging
from pathlib import Path
from pprint import pformat

from pydantic import ValidationError

from resource_registry.parser.base import (
    FieldMetadataEntry,
    Operation,
    ResourceDescriptor,
    ResourceFieldMetadata,
)
from resource_registry.parser.documents import SpecDocument

from .overrides import (
    DisplayNameOverrides,
    ScopeOverrides,
    apply_display_name_overrides,
    apply_scope_overrides,
)

logger = logging.getLogger(__name__)

REGISTRY_JSON = "resource_types.json"
REGISTRY_MODULE = "resource_types.py"


def merge_descriptors(documents: list[SpecDocument]) -> list[ResourceDescriptor]:
    """Merge descriptors across documents; the first occurrence of a key wins.

    Documents are sorted by identifier first, so the winner never depends on
    the order the caller (or the filesystem) produced them in.
    """
    merged: list[ResourceDescriptor] = []
    seen: set[str] = set()

    for document in sorted(documents, key=lambda doc: doc.identifier):
        try:
            descriptors = document.descriptors()
        except (AttributeError, TypeError, ValueError, ValidationError) as e:
            # A parseable document with an unexpected shape is skipped like an unreadable one.
            logger.error("Skipping %s: malformed document (%s)", document.identifier, e)
            continue

        for descriptor in descriptors:
            if descriptor.resource_key in seen:
                logger.debug(
                    "Duplicate resource %s in %s ignored",
                    descriptor.resource_key,
                    document.identifier,
                )
                continue
            seen.add(descriptor.resource_key)
            merged.append(descriptor)

    logger.info("Parsed %d unique resource types from %d documents", len(merged), len(documents))
    return merged


def _entry_to_dict(entry: FieldMetadataEntry) -> dict:
    data: dict = {}
    if entry.has_default:
        data["default"] = entry.default
    if entry.server_default:
        data["server_default"] = True
    if entry.required_for is not None:
        required_for = entry.required_for.model_dump(exclude_none=True)
        if required_for:
            data["required_for"] = required_for
    if entry.has_recommended_value:
        data["recommended_value"] = entry.recommended_value
    if entry.description:
        data["description"] = entry.description
    if entry.type:
        data["type"] = entry.type
    return data


def _field_metadata_to_dict(metadata: ResourceFieldMetadata) -> dict | None:
    fields = {path: _entry_to_dict(entry) for path, entry in metadata.fields.items()}
    fields = {path: data for path, data in fields.items() if data}
    if not fields:
        return None

    data: dict = {"fields": fields}
    for key in ("server_default_fields", "user_required_fields", "recommended_value_fields"):
        values = getattr(metadata, key)
        if values:
            data[key] = list(values)
    return data


def descriptor_to_dict(descriptor: ResourceDescriptor) -> dict:
    """Serialize a descriptor, leaving out attributes that are not set."""
    data = {
        "api_path": descriptor.api_path,
        "display_name": descriptor.display_name,
        "description": descriptor.description,
        "api_base": descriptor.api_base,
    }
    if descriptor.service_segment:
        data["service_segment"] = descriptor.service_segment
    data.update(
        {
            "full_api_path": descriptor.full_api_path,
            "schema_file": descriptor.schema_file,
            "schema_id": descriptor.schema_id,
            "namespace_scoped": descriptor.namespace_scoped,
            "namespace_scope": descriptor.namespace_scope,
        }
    )
    if descriptor.documentation_url:
        data["documentation_url"] = descriptor.documentation_url
    if descriptor.domain:
        data["domain"] = descriptor.domain
    if descriptor.operation_metadata and not descriptor.operation_metadata.is_empty():
        data["operation_metadata"] = descriptor.operation_metadata.model_dump(
            exclude_none=True, exclude_defaults=True
        )
    if descriptor.field_metadata:
        field_metadata = _field_metadata_to_dict(descriptor.field_metadata)
        if field_metadata:
            data["field_metadata"] = field_metadata
    return data


def descriptor_from_dict(resource_key: str, data: dict) -> ResourceDescriptor:
    # Keys absent from the snapshot stay unset, so "no default" survives the reload.
    return ResourceDescriptor.model_validate(dict(data, resource_key=resource_key))


class Registry:
    """Sorted, deduplicated resource descriptors plus the reverse path index.

    Treated as a read-only snapshot once built.
    """

    def __init__(self, descriptors: list[ResourceDescriptor]):
        ordered = sorted(descriptors, key=lambda d: d.resource_key)
        self.resources: dict[str, ResourceDescriptor] = {d.resource_key: d for d in ordered}
        self.api_path_index: dict[str, str] = {
            d.api_path: d.resource_key for d in self.resources.values()
        }

    def __len__(self) -> int:
        return len(self.resources)

    def __contains__(self, resource_key: str) -> bool:
        return resource_key in self.resources

    def keys(self) -> list[str]:
        return list(self.resources)

    def get(self, resource_key: str) -> ResourceDescriptor | None:
        return self.resources.get(resource_key)

    def resource_key_for_api_path(self, api_path: str) -> str | None:
        return self.api_path_index.get(api_path)

    # Field metadata lookups used by the payload validator

    def field_metadata(self, resource_key: str) -> ResourceFieldMetadata | None:
        descriptor = self.get(resource_key)
        return descriptor.field_metadata if descriptor else None

    def field_entry(self, resource_key: str, field_path: str) -> FieldMetadataEntry | None:
        metadata = self.field_metadata(resource_key)
        return metadata.fields.get(field_path) if metadata else None

    def user_required_fields(self, resource_key: str, operation: Operation) -> list[str]:
        """Fields the caller must supply: required, with no server-side default."""
        metadata = self.field_metadata(resource_key)
        if metadata is None:
            return []
        if operation == "create":
            return list(metadata.user_required_fields)
        return [
            path
            for path, entry in metadata.fields.items()
            if entry.is_required_for(operation) and not entry.has_default and not entry.server_default
        ]

    def required_fields(self, resource_key: str, operation: Operation) -> list[str]:
        """Every field flagged as required for an operation, whether or not the server defaults it."""
        descriptor = self.get(resource_key)
        if descriptor is None:
            return []

        fields: list[str] = []
        if descriptor.field_metadata:
            fields.extend(
                path
                for path, entry in descriptor.field_metadata.fields.items()
                if entry.is_required_for(operation)
            )
        operation_metadata = descriptor.operation_metadata
        declared = getattr(operation_metadata, operation, None) if operation_metadata else None
        if declared:
            fields.extend(f for f in declared.required_fields if f not in fields)
        return fields

    def server_default_fields(self, resource_key: str) -> list[str]:
        metadata = self.field_metadata(resource_key)
        return list(metadata.server_default_fields) if metadata else []

    def is_field_server_defaulted(self, resource_key: str, field_path: str) -> bool:
        entry = self.field_entry(resource_key, field_path)
        return bool(entry and (entry.server_default or entry.has_default))

    def recommended_value_fields(self, resource_key: str) -> list[str]:
        metadata = self.field_metadata(resource_key)
        return list(metadata.recommended_value_fields) if metadata else []

    # Serialization

    def to_dict(self) -> dict:
        return {
            "resource_types": {
                key: descriptor_to_dict(descriptor) for key, descriptor in self.resources.items()
            },
            "api_path_to_resource_key": dict(self.api_path_index),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_dict(cls, data: dict) -> "Registry":
        resource_types = data.get("resource_types") or {}
        return cls([descriptor_from_dict(key, value) for key, value in resource_types.items()])

    @classmethod
    def load(cls, path: Path) -> "Registry":
        return cls.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def render_module(self) -> str:
        """Render the registry as an importable Python lookup module."""
        data = self.to_dict()
        resource_types = pformat(data["resource_types"], indent=1, width=100, sort_dicts=False)
        api_paths = pformat(data["api_path_to_resource_key"], indent=1, width=100, sort_dicts=False)
        return f'''"""Auto-generated resource types from API specification documents.

DO NOT EDIT - regenerate with `resource-registry build`.

Total resource types: {len(self.resources)}
"""

RESOURCE_TYPES = {resource_types}

API_PATH_TO_RESOURCE_KEY = {api_paths}


def get_resource_key_from_api_path(api_path):
    return API_PATH_TO_RESOURCE_KEY.get(api_path)


def get_resource_type(resource_key):
    return RESOURCE_TYPES.get(resource_key)


def get_all_resource_keys():
    return list(RESOURCE_TYPES)
'''

    def write(self, output_dir: Path) -> dict[str, Path]:
        """Write the JSON snapshot and the Python module. Returns {name: path}."""
        output_dir.mkdir(parents=True, exist_ok=True)
        written = {}
        for filename, content in ((REGISTRY_JSON, self.to_json()), (REGISTRY_MODULE, self.render_module())):
            file_path = output_dir / filename
            file_path.write_text(content, encoding="utf-8")
            written[filename] = file_path
        return written


def build_registry(
    documents: list[SpecDocument],
    scope_overrides: ScopeOverrides | None = None,
    display_name_overrides: DisplayNameOverrides | None = None,
) -> Registry:
    """Merge documents into a registry, applying overrides to the merged set."""
    descriptors = merge_descriptors(documents)

    if scope_overrides is not None:
        count = apply_scope_overrides(descriptors, scope_overrides)
        logger.info("Applied %d namespace scope overrides", count)

    if display_name_overrides is not None:
        count = apply_display_name_overrides(descriptors, display_name_overrides)
        logger.info("Applied %d display name overrides", count)

    return Registry(descriptors)
