"""Schema identifier and resource key derivation.

Spec files are named ``docs-cloud-f5-com.<NNNN>.public.<dotted-id>.ves-swagger.json``
and operations carry ids like ``ves.io.schema.app_firewall.API.Create``.
Both lead to a dotted schema id, from which the resource key and its
pluralized API path suffix are derived.
"""

import re

SPEC_FILENAME_PATTERN = re.compile(r"^docs-cloud-f5-com\.\d+\.public\.(.+)\.ves-swagger\.json$")
OPERATION_ID_PATTERN = re.compile(r"^(ves\.io\.schema\.[^.]+(?:\.[^.]+)*?)\.API\.")

SCHEMA_TOKEN = "schema"
VIEWS_TOKEN = "views"


def extract_schema_id(filename: str) -> str | None:
    """Extract the dotted schema id from a spec filename.

    >>> extract_schema_id("docs-cloud-f5-com.0073.public.ves.io.schema.views.http_loadbalancer.ves-swagger.json")
    'ves.io.schema.views.http_loadbalancer'
    """
    match = SPEC_FILENAME_PATTERN.match(filename or "")
    return match.group(1) if match else None


def schema_id_from_operation_id(operation_id: str | None) -> str | None:
    """Extract the schema id from an ``<schema-id>.API.<Verb>`` operation id."""
    if not operation_id:
        return None
    match = OPERATION_ID_PATTERN.match(operation_id)
    return match.group(1) if match else None


def _segments_after_schema(schema_id: str) -> list[str] | None:
    parts = schema_id.split(".")
    if SCHEMA_TOKEN not in parts:
        return None
    index = parts.index(SCHEMA_TOKEN)
    if index >= len(parts) - 1:
        return None
    return parts[index + 1:]


def derive_resource_key(schema_id: str) -> str | None:
    """Derive the resource key from a dotted schema id.

    ``ves.io.schema.views.http_loadbalancer`` -> ``http_loadbalancer``
    ``ves.io.schema.api_sec.api_crawler`` -> ``api_sec_api_crawler``
    """
    segments = _segments_after_schema(schema_id)
    if not segments:
        return None
    if segments[0] == VIEWS_TOKEN and len(segments) > 1:
        segments = segments[1:]
    return "_".join(segments)


def schema_name_stem(schema_id: str) -> str | None:
    """Component schema name stem: the segments after ``schema`` run together.

    ``ves.io.schema.views.http_loadbalancer`` -> ``viewshttp_loadbalancer``
    """
    segments = _segments_after_schema(schema_id)
    if not segments:
        return None
    return "".join(segments)


def derive_api_path_suffix(resource_key: str) -> str:
    """Pluralize a resource key into its API path suffix.

    This is the API's own convention rather than English: ``+s``, or
    ``+es`` when the key already ends in ``s`` (``service_policy`` becomes
    ``service_policys``).
    """
    if resource_key.endswith("s"):
        return resource_key + "es"
    return resource_key + "s"


def derive_resource_key_from_api_path(api_path: str) -> str:
    """Singularize an API path suffix back into a resource key."""
    if api_path.endswith("ies"):
        return api_path[:-3] + "y"
    if api_path.endswith("ses"):
        return api_path[:-2]
    if api_path.endswith("s"):
        return api_path[:-1]
    return api_path


def transform_to_general_doc_url(operation_url: str, schema_id: str) -> str:
    """Turn an operation-specific docs URL into the resource's general page."""
    segments = _segments_after_schema(schema_id)
    if segments is None:
        return operation_url
    doc_path = "-".join(segments).replace("_", "-")
    return f"https://docs.cloud.f5.com/docs-v2/api/{doc_path}"
