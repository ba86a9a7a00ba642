"""Manual override rules for namespace scope and display names.

Overrides only adjust descriptors that already exist; a key that no
descriptor carries is ignored.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from resource_registry.parser.base import ResourceDescriptor

logger = logging.getLogger(__name__)


class ScopeBucket(BaseModel):
    resources: list[str] = []


class ScopeBuckets(BaseModel):
    system: ScopeBucket = ScopeBucket()
    shared: ScopeBucket = ScopeBucket()
    any: ScopeBucket = ScopeBucket()


class ScopeOverrides(BaseModel):
    """``{"overrides": {"system": {"resources": [...]}, "shared": ..., "any": ...}}``"""

    overrides: ScopeBuckets = ScopeBuckets()


class DisplayNameOverride(BaseModel):
    display_name: str = Field(alias="displayName")
    reason: str | None = None


class DisplayNameOverrides(BaseModel):
    """``{"overrides": {"<resource key>": {"displayName": "...", "reason": "..."}}}``"""

    overrides: dict[str, DisplayNameOverride] = {}


def _load_json(path: Path | None) -> dict | None:
    if path is None or not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load overrides from %s: %s", path, e)
        return None


def load_scope_overrides(path: Path | None) -> ScopeOverrides | None:
    """Load scope overrides. A missing or unreadable file means no overrides."""
    data = _load_json(path)
    if data is None:
        return None
    try:
        return ScopeOverrides.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid scope overrides in %s: %s", path, e)
        return None


def load_display_name_overrides(path: Path | None) -> DisplayNameOverrides | None:
    """Load display-name overrides. A missing or unreadable file means no overrides."""
    data = _load_json(path)
    if data is None:
        return None
    try:
        return DisplayNameOverrides.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid display name overrides in %s: %s", path, e)
        return None


def apply_scope_overrides(descriptors: list[ResourceDescriptor], overrides: ScopeOverrides) -> int:
    """Force listed resources into a scope bucket. Returns how many changed.

    A key listed in several buckets resolves system, then shared, then any.
    """
    buckets = overrides.overrides
    system = set(buckets.system.resources)
    shared = set(buckets.shared.resources)
    any_scope = set(buckets.any.resources)

    count = 0
    for descriptor in descriptors:
        key = descriptor.resource_key
        if key in system:
            descriptor.namespace_scope = "system"
        elif key in shared:
            descriptor.namespace_scope = "shared"
        elif key in any_scope:
            descriptor.namespace_scope = "any"
        else:
            continue
        count += 1
    return count


def apply_display_name_overrides(
    descriptors: list[ResourceDescriptor], overrides: DisplayNameOverrides
) -> int:
    count = 0
    for descriptor in descriptors:
        override = overrides.overrides.get(descriptor.resource_key)
        if override:
            descriptor.display_name = override.display_name
            count += 1
    return count
