"""Resource descriptor building.

Combines path classification, schema-id derivation and field metadata
extraction for one document into ResourceDescriptor models.
"""

import logging
import re

from pydantic import ValidationError

from .base import (
    DANGER_LEVELS,
    CommonError,
    OperationMetadata,
    PerformanceImpact,
    ResourceDescriptor,
    ResourceOperationMetadata,
    SideEffects,
)
from .description import normalize_description
from .fields import extract_field_metadata
from .paths import classify_path, derive_namespace_scope, extract_api_info
from .schema_id import (
    derive_api_path_suffix,
    derive_resource_key,
    derive_resource_key_from_api_path,
    schema_id_from_operation_id,
    transform_to_general_doc_url,
)

logger = logging.getLogger(__name__)

TITLE_PREFIX = re.compile(r"^F5 Distributed Cloud Services API for\s+", re.IGNORECASE)
SCHEMA_PATH_PREFIX = re.compile(r"^ves\.io\.schema\.(views\.)?")

# Collection endpoints of domain files, optionally with a service segment:
# /api/config/namespaces/{metadata.namespace}/http_loadbalancers
# /api/config/dns/namespaces/{ns}/dns_zones
LIST_ENDPOINT_PATTERN = re.compile(
    r"^/api/([a-z_-]+)(?:/([a-z_]+))?/namespaces/(?:\{[^}]+\}|system|shared)/([a-z_]+)$"
)

HTTP_METHODS = ("get", "post", "put", "delete")
OPERATION_METADATA_KEYS = ("x-ves-operation-metadata", "x-f5xc-operation-metadata")
DANGER_LEVEL_KEYS = ("x-ves-danger-level", "x-f5xc-danger-level")


def _pluralize_display_name(name: str) -> str:
    if not name.endswith("s") and not name.endswith("ing"):
        name += "s"
    return name


def format_display_name(title: str | None, resource_key: str) -> str:
    """Format a display name from a document title or the resource key.

    ``F5 Distributed Cloud Services API for ves.io.schema.views.http_loadbalancer``
    becomes ``Http Loadbalancers``.
    """
    if title:
        cleaned = TITLE_PREFIX.sub("", title)
        cleaned = SCHEMA_PATH_PREFIX.sub("", cleaned)
        words = re.split(r"[._]", cleaned)
        cleaned = " ".join(word[:1].upper() + word[1:].lower() for word in words)
        return _pluralize_display_name(cleaned)

    words = resource_key.split("_")
    return " ".join(word[:1].upper() + word[1:] for word in words) + "s"


def format_domain_display_name(raw: str | None, resource_key: str) -> str:
    """Display name for a domain-file resource, from its ``x-displayname``."""
    name = (raw or resource_key).rstrip(".")
    return _pluralize_display_name(name)


def extract_doc_url(content: dict) -> str | None:
    """Find a documentation URL: top-level externalDocs, else the first operation's."""
    external = content.get("externalDocs") or {}
    if external.get("url"):
        return external["url"]

    for path_item in (content.get("paths") or {}).values():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method) or {}
            url = (operation.get("externalDocs") or {}).get("url")
            if url:
                return url
    return None


def _danger_level(raw) -> str | None:
    if not isinstance(raw, str):
        return None
    level = raw.lower()
    return level if level in DANGER_LEVELS else None


def convert_operation_metadata(raw: dict | None) -> OperationMetadata | None:
    """Normalize a raw ``x-ves-operation-metadata`` block.

    Empty lists and unknown danger levels are dropped. Returns None when
    nothing useful remains.
    """
    if not raw:
        return None

    values: dict = {}
    if raw.get("purpose"):
        values["purpose"] = raw["purpose"]

    level = _danger_level(raw.get("danger_level"))
    if level:
        values["danger_level"] = level

    if raw.get("confirmation_required") is not None:
        values["confirmation_required"] = raw["confirmation_required"]

    for key in ("required_fields", "optional_fields"):
        if raw.get(key):
            values[key] = list(raw[key])

    conditions = raw.get("conditions") or {}
    for key in ("prerequisites", "postconditions"):
        if conditions.get(key):
            values[key] = list(conditions[key])

    side_effects = raw.get("side_effects") or {}
    effects = {
        key: list(side_effects[key])
        for key in ("creates", "updates", "deletes", "invalidates")
        if side_effects.get(key)
    }
    if effects:
        values["side_effects"] = SideEffects(**effects)

    if raw.get("common_errors"):
        values["common_errors"] = [
            CommonError(
                code=error.get("code", 0),
                message=error.get("message", ""),
                solution=error.get("solution", ""),
            )
            for error in raw["common_errors"]
        ]

    impact = raw.get("performance_impact")
    if impact:
        values["performance_impact"] = PerformanceImpact(
            latency=impact.get("latency") or "unknown",
            resource_usage=impact.get("resource_usage") or "unknown",
        )

    return OperationMetadata(**values) if values else None


def extract_operation_metadata(operation: dict | None) -> OperationMetadata | None:
    """Operation metadata for one operation, with the danger-level fallback."""
    if not operation:
        return None

    raw = None
    for key in OPERATION_METADATA_KEYS:
        if operation.get(key):
            raw = operation[key]
            break
    metadata = convert_operation_metadata(raw)

    if metadata is not None and metadata.danger_level is None:
        for key in DANGER_LEVEL_KEYS:
            level = _danger_level(operation.get(key))
            if level:
                metadata.danger_level = level
                break
    return metadata


def build_operation_metadata(paths: dict, collection_path: str) -> ResourceOperationMetadata | None:
    """Collect CRUD operation metadata for a collection path.

    list/create come from the collection path itself, get/update/delete from
    its ``/{name}`` item path.
    """
    collection = paths.get(collection_path) or {}
    item = paths.get(f"{collection_path}/{{name}}") or {}

    metadata = ResourceOperationMetadata(
        list=extract_operation_metadata(collection.get("get")),
        create=extract_operation_metadata(collection.get("post")),
        get=extract_operation_metadata(item.get("get")),
        update=extract_operation_metadata(item.get("put")),
        delete=extract_operation_metadata(item.get("delete")),
    )
    return None if metadata.is_empty() else metadata


def _schemas(content: dict) -> dict:
    return (content.get("components") or {}).get("schemas") or {}


def build_spec_descriptor(identifier: str, schema_id: str, content: dict) -> ResourceDescriptor | None:
    """Build the descriptor for a single-resource spec document."""
    resource_key = derive_resource_key(schema_id)
    if not resource_key:
        logger.warning("Skipping %s: no resource key in schema id %s", identifier, schema_id)
        return None

    info = content.get("info") or {}
    paths = content.get("paths") or {}
    endpoint = extract_api_info(paths)

    api_base = endpoint.api_base if endpoint else "config"
    service_segment = endpoint.service_segment if endpoint else None
    api_path = endpoint.api_path if endpoint else derive_api_path_suffix(resource_key)

    if endpoint:
        full_api_path = endpoint.full_path
    elif service_segment:
        full_api_path = f"/api/{api_base}/{service_segment}/namespaces/{{ns}}/{api_path}"
    else:
        full_api_path = f"/api/{api_base}/namespaces/{{ns}}/{api_path}"

    operation_url = extract_doc_url(content)
    documentation_url = (
        transform_to_general_doc_url(operation_url, schema_id) if operation_url else None
    )

    operation_metadata = None
    if endpoint and not endpoint.full_path.endswith("}"):
        operation_metadata = build_operation_metadata(paths, endpoint.full_path)

    return ResourceDescriptor(
        resource_key=resource_key,
        api_path=api_path,
        display_name=format_display_name(info.get("title"), resource_key),
        description=normalize_description(info.get("description") or ""),
        api_base=api_base,
        service_segment=service_segment,
        full_api_path=full_api_path,
        schema_file=identifier,
        schema_id=schema_id,
        namespace_scoped=endpoint.namespace_scoped if endpoint else False,
        namespace_scope=endpoint.namespace_scope if endpoint else derive_namespace_scope(None),
        documentation_url=documentation_url,
        operation_metadata=operation_metadata,
        field_metadata=extract_field_metadata(_schemas(content), schema_id),
    )


def _schema_id_for_path_item(api_path: str, path_item: dict) -> str:
    for method in ("post", "get", "put", "delete"):
        operation = path_item.get(method) or {}
        schema_id = schema_id_from_operation_id(operation.get("operationId"))
        if schema_id:
            return schema_id
    return f"ves.io.schema.{derive_resource_key_from_api_path(api_path)}"


def _first_description(path_item: dict) -> str:
    for method in ("get", "post"):
        operation = path_item.get(method) or {}
        if operation.get("description"):
            return normalize_description(operation["description"])
    return ""


def build_domain_descriptors(identifier: str, domain: str | None, content: dict) -> list[ResourceDescriptor]:
    """Build descriptors for every collection endpoint in a domain document."""
    paths = content.get("paths") or {}
    schemas = _schemas(content)
    results = []
    seen = set()

    for path_key, path_item in paths.items():
        if not isinstance(path_item, dict) or not LIST_ENDPOINT_PATTERN.match(path_key):
            continue
        endpoint = classify_path(path_key)
        if endpoint is None:
            continue

        resource_key = derive_resource_key_from_api_path(endpoint.api_path)
        # The same resource may be listed under several namespace patterns.
        if resource_key in seen:
            continue

        try:
            schema_id = _schema_id_for_path_item(endpoint.api_path, path_item)
            descriptor = ResourceDescriptor(
                resource_key=resource_key,
                api_path=endpoint.api_path,
                display_name=format_domain_display_name(path_item.get("x-displayname"), resource_key),
                description=_first_description(path_item),
                api_base=endpoint.api_base,
                service_segment=endpoint.service_segment,
                full_api_path=path_key,
                schema_file=identifier,
                schema_id=schema_id,
                namespace_scoped=True,
                namespace_scope=endpoint.namespace_scope,
                domain=domain,
                operation_metadata=build_operation_metadata(paths, path_key),
                field_metadata=extract_field_metadata(schemas, schema_id),
            )
        except (AttributeError, TypeError, ValueError, ValidationError) as e:
            logger.error("Skipping %s in %s: malformed endpoint (%s)", path_key, identifier, e)
            continue

        seen.add(resource_key)
        results.append(descriptor)

    return results
