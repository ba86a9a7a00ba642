"""Endpoint path classification.

Turns raw endpoint paths into EndpointDescriptor models. Patterns are tried
in priority order: extended (service segment) paths, standard namespaced
paths, tenant-level paths, then a last-segment fallback.
"""

import re

from .base import EndpointDescriptor, NamespaceScope

_PARAM = r"\{[^}]+\}"

EXTENDED_PATTERN = re.compile(
    rf"^/api/([a-z_-]+)/([a-z_]+)/namespaces/(?:{_PARAM}|[a-z]+)/([a-z_]+)(?:/{_PARAM})?$"
)
NAMESPACE_PATTERN = re.compile(
    rf"^/api/([a-z_-]+)/namespaces/(?:{_PARAM}|[a-z]+)/([a-z_]+)(?:/{_PARAM})?$"
)
TENANT_PATTERN = re.compile(rf"^/api/([a-z_-]+)/([a-z_]+)(?:/{_PARAM})?$")

_FALLBACK_BASE = re.compile(r"^/api/([a-z_-]+)/")
_FALLBACK_EXTENDED = re.compile(r"^/api/([a-z_-]+)/([a-z_]+)/namespaces/")

DEFAULT_API_BASE = "config"


def derive_namespace_scope(full_path: str | None) -> NamespaceScope:
    """Classify which namespaces can hold a resource, from the literal path.

    A parameterized namespace (``{namespace}``) accepts any namespace the
    caller supplies, and tenant-level paths have no namespace at all, so
    both map to ``any``.
    """
    if not full_path:
        return "any"
    if "/namespaces/system/" in full_path:
        return "system"
    if "/namespaces/shared/" in full_path:
        return "shared"
    return "any"


def _match_extended(path: str) -> EndpointDescriptor | None:
    match = EXTENDED_PATTERN.match(path)
    if not match:
        return None
    return EndpointDescriptor(
        full_path=path,
        api_base=match.group(1),
        service_segment=match.group(2),
        api_path=match.group(3),
        namespace_scoped=True,
        namespace_scope=derive_namespace_scope(path),
    )


def _match_namespace(path: str) -> EndpointDescriptor | None:
    match = NAMESPACE_PATTERN.match(path)
    if not match:
        return None
    return EndpointDescriptor(
        full_path=path,
        api_base=match.group(1),
        api_path=match.group(2),
        namespace_scoped=True,
        namespace_scope=derive_namespace_scope(path),
    )


def _match_tenant(path: str) -> EndpointDescriptor | None:
    if "/namespaces/" in path:
        return None
    match = TENANT_PATTERN.match(path)
    if not match:
        return None
    return EndpointDescriptor(
        full_path=path,
        api_base=match.group(1),
        api_path=match.group(2),
        namespace_scoped=False,
        namespace_scope="any",
    )


def _match_fallback(path: str) -> EndpointDescriptor | None:
    if not path.startswith("/api/"):
        return None
    last = path.split("/")[-1]
    if not last or last.startswith("{"):
        return None

    base_match = _FALLBACK_BASE.match(path)
    extended_match = _FALLBACK_EXTENDED.match(path)
    return EndpointDescriptor(
        full_path=path,
        api_base=base_match.group(1) if base_match else DEFAULT_API_BASE,
        service_segment=extended_match.group(2) if extended_match else None,
        api_path=last,
        namespace_scoped="/namespaces/" in path,
        namespace_scope=derive_namespace_scope(path),
    )


# Priority order matters: the first matcher that accepts a path wins.
MATCHERS = (_match_extended, _match_namespace, _match_tenant, _match_fallback)


def classify_path(path: str) -> EndpointDescriptor | None:
    """Classify one endpoint path. Returns None when no pattern applies."""
    for matcher in MATCHERS:
        descriptor = matcher(path)
        if descriptor is not None:
            return descriptor
    return None


def extract_api_info(paths: dict | None) -> EndpointDescriptor | None:
    """Pick the primary endpoint of a document's path map.

    Each pattern is tried against every path before falling through to the
    next, lower-priority pattern.
    """
    if not paths:
        return None
    for matcher in MATCHERS:
        for path in paths:
            descriptor = matcher(path)
            if descriptor is not None:
                return descriptor
    return None
