"""Validates generated registry artifacts for syntax and structural correctness."""

import ast
import json
from pathlib import Path

from resource_registry.parser.base import NAMESPACE_SCOPES

from .registry import REGISTRY_JSON, REGISTRY_MODULE

REQUIRED_RESOURCE_KEYS = (
    "api_path",
    "display_name",
    "api_base",
    "full_api_path",
    "schema_file",
    "schema_id",
    "namespace_scoped",
    "namespace_scope",
)


def validate_module(source: str, filename: str = REGISTRY_MODULE) -> list[str]:
    """Check the generated Python module parses and defines the lookup tables."""
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        return [f"SyntaxError: {e.msg} (line {e.lineno})"]

    assigned = {
        target.id
        for node in tree.body
        if isinstance(node, ast.Assign)
        for target in node.targets
        if isinstance(target, ast.Name)
    }
    return [
        f"Missing definition: {name}"
        for name in ("RESOURCE_TYPES", "API_PATH_TO_RESOURCE_KEY")
        if name not in assigned
    ]


def _duplicate_keys(pairs: list[tuple]) -> dict:
    seen = set()
    duplicates = []
    for key, _ in pairs:
        if key in seen:
            duplicates.append(key)
        seen.add(key)
    if duplicates:
        raise ValueError(", ".join(duplicates))
    return dict(pairs)


def _check_field_metadata(key: str, metadata: dict) -> list[str]:
    errors = []
    fields = metadata.get("fields")
    if not isinstance(fields, dict):
        return [f"{key}: field_metadata.fields must be an object"]

    for list_name in ("server_default_fields", "user_required_fields", "recommended_value_fields"):
        values = metadata.get(list_name, [])
        if not isinstance(values, list):
            errors.append(f"{key}: field_metadata.{list_name} must be a list")

    overlap = set(metadata.get("server_default_fields", [])) & set(
        metadata.get("user_required_fields", [])
    )
    if overlap:
        errors.append(f"{key}: fields both user-required and server-defaulted: {sorted(overlap)}")

    for path, entry in fields.items():
        if not isinstance(entry, dict) or not entry:
            errors.append(f"{key}: field {path} has no metadata")
            continue
        if "server_default" in entry and not isinstance(entry["server_default"], bool):
            errors.append(f"{key}: field {path} server_default must be a boolean")
        for flag, value in (entry.get("required_for") or {}).items():
            if not isinstance(value, bool):
                errors.append(f"{key}: field {path} required_for.{flag} must be a boolean")
    return errors


def validate_registry_data(text: str) -> list[str]:
    """Check the JSON snapshot: no duplicate keys, valid scopes, consistent index."""
    try:
        data = json.loads(text, object_pairs_hook=_duplicate_keys)
    except json.JSONDecodeError as e:
        return [f"JSONDecodeError: {e.msg} (line {e.lineno})"]
    except ValueError as e:
        return [f"Duplicate keys: {e}"]

    resource_types = data.get("resource_types") if isinstance(data, dict) else None
    index = data.get("api_path_to_resource_key") if isinstance(data, dict) else None
    if not isinstance(resource_types, dict) or not isinstance(index, dict):
        return ["Snapshot must define resource_types and api_path_to_resource_key objects"]

    errors = []
    keys = list(resource_types)
    if keys != sorted(keys):
        errors.append("resource_types is not sorted by resource key")

    for key, descriptor in resource_types.items():
        missing = [name for name in REQUIRED_RESOURCE_KEYS if name not in descriptor]
        if missing:
            errors.append(f"{key}: missing {', '.join(missing)}")
        scope = descriptor.get("namespace_scope")
        if scope is not None and scope not in NAMESPACE_SCOPES:
            errors.append(f"{key}: invalid namespace scope {scope!r}")
        if "field_metadata" in descriptor:
            errors.extend(_check_field_metadata(key, descriptor["field_metadata"]))

    for api_path, key in index.items():
        if key not in resource_types:
            errors.append(f"api_path_to_resource_key: {api_path} points to unknown key {key}")
    return errors


def validate_artifacts(output_dir: Path) -> dict[str, list[str]]:
    """Run all checks on a build output directory.

    Returns {filename: [error, ...]} for files with problems.
    """
    errors: dict[str, list[str]] = {}
    checks = ((REGISTRY_JSON, validate_registry_data), (REGISTRY_MODULE, validate_module))
    for filename, check in checks:
        file_path = output_dir / filename
        if not file_path.exists():
            errors[filename] = [f"Missing generated file: {filename}"]
            continue
        problems = check(file_path.read_text(encoding="utf-8"))
        if problems:
            errors[filename] = problems
    return errors
