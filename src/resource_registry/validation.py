"""Pre-validation of resource payloads before create and update calls.

Distinguishes fields the caller must supply from fields the server fills
in by default, and points out recommended values that were left unset.
An invalid payload is a normal result, never an exception.
"""

import json
import re

from resource_registry.generator.registry import Registry
from resource_registry.parser.base import OPERATIONS, Operation, ValidationResult

PATH_PARAMETER_PREFIX = "path."

_MISSING = object()


def get_nested_value(obj, path: str):
    """Value at a dotted path, or a sentinel when any segment is absent."""
    current = obj
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def is_value_present(value) -> bool:
    if value is _MISSING or value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    if isinstance(value, list) and not value:
        return False
    return True


def filter_payload_fields(fields: list[str]) -> list[str]:
    """Drop URL path parameters such as ``path.namespace``."""
    return [field for field in fields if not field.startswith(PATH_PARAMETER_PREFIX)]


def format_field_name(path: str) -> str:
    """``metadata.name`` -> ``Metadata → Name``."""
    return " → ".join(
        re.sub(r"\b\w", lambda m: m.group(0).upper(), part.replace("_", " "))
        for part in path.split(".")
    )


def _bulleted(single: str, plural: str, names: list[str]) -> str:
    if len(names) == 1:
        return f"{single}: {names[0]}"
    return f"{plural}:\n• " + "\n• ".join(names)


def validate_resource_payload(
    registry: Registry,
    resource_key: str,
    operation: Operation,
    payload: dict,
) -> ValidationResult:
    """Validate a payload for a create or update of one resource type.

    Resource types the registry does not know always validate, since there
    is no metadata to check against. An operation other than create or
    update raises ValueError.
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Unsupported operation: {operation!r}. Valid: {OPERATIONS}")

    user_required = filter_payload_fields(registry.user_required_fields(resource_key, operation))
    all_server_defaults = registry.server_default_fields(resource_key)
    recommended_fields = registry.recommended_value_fields(resource_key)

    # Nominally required: explicitly required fields plus every server-defaulted field.
    required = filter_payload_fields(registry.required_fields(resource_key, operation))
    required += [f for f in filter_payload_fields(all_server_defaults) if f not in required]

    missing_fields = [
        field for field in user_required if not is_value_present(get_nested_value(payload, field))
    ]

    server_defaulted_fields = [
        field
        for field in required
        if field not in user_required
        and not is_value_present(get_nested_value(payload, field))
        and registry.is_field_server_defaulted(resource_key, field)
    ]

    recommended_missing = [
        field
        for field in recommended_fields
        if not is_value_present(get_nested_value(payload, field))
    ]

    warnings = []
    hints = []

    if missing_fields:
        names = [format_field_name(f) for f in missing_fields]
        warnings.append(_bulleted("Required field missing", "Required fields missing", names))

    if server_defaulted_fields:
        names = [format_field_name(f) for f in server_defaulted_fields]
        hints.append(
            _bulleted("Server will provide default for", "Server will provide defaults for", names)
        )

    spec = payload.get("spec") if isinstance(payload, dict) else None
    if all_server_defaults and not spec:
        hints.append(
            f"This resource type has {len(all_server_defaults)} field(s) with server defaults. "
            "You can omit these fields and the server will provide values."
        )

    if recommended_missing:
        lines = []
        for field in recommended_missing:
            entry = registry.field_entry(resource_key, field)
            if entry is not None and entry.has_recommended_value:
                lines.append(f"{format_field_name(field)}: {json.dumps(entry.recommended_value)}")
        if lines:
            hints.append("Recommended values available:\n• " + "\n• ".join(lines))

    return ValidationResult(
        valid=not missing_fields,
        missing_fields=missing_fields,
        server_defaulted_fields=server_defaulted_fields,
        recommended_value_fields=recommended_missing or None,
        warnings=warnings,
        hints=hints,
    )


def is_field_required(registry: Registry, resource_key: str, operation: Operation, field_path: str) -> bool:
    return field_path in registry.required_fields(resource_key, operation)


def required_fields_summary(registry: Registry, resource_key: str, operation: Operation) -> list[str]:
    """Human-readable names of the payload fields an operation requires."""
    fields = filter_payload_fields(registry.required_fields(resource_key, operation))
    return [format_field_name(field) for field in fields]
