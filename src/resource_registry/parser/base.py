"""Unified data models for parsed API specification documents.

Every document variant (single-resource spec files and domain-merged
files) is reduced to these models before the registry is merged,
persisted, and consumed by the schema synthesizer and payload validator.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

NamespaceScope = Literal["any", "system", "shared"]
DangerLevel = Literal["low", "medium", "high"]
Operation = Literal["create", "update"]

NAMESPACE_SCOPES = ("any", "system", "shared")
DANGER_LEVELS = ("low", "medium", "high")
OPERATIONS = ("create", "update")


class EndpointDescriptor(BaseModel):
    """Structured view of a single API endpoint path."""

    model_config = ConfigDict(frozen=True)

    full_path: str  # /api/config/namespaces/{ns}/http_loadbalancers
    api_base: str  # config / web / infraprotect / ...
    service_segment: str | None = None  # dns for /api/config/dns/namespaces/...
    api_path: str  # http_loadbalancers
    namespace_scoped: bool
    namespace_scope: NamespaceScope


class FieldRequiredFor(BaseModel):
    """When a field is required."""

    minimum_config: bool | None = None
    create: bool | None = None
    update: bool | None = None

    def is_empty(self) -> bool:
        return self.minimum_config is None and self.create is None and self.update is None


class FieldMetadataEntry(BaseModel):
    """Notable metadata for one dotted field path.

    ``default`` may legitimately be ``None``, ``False`` or ``0``; whether a
    default was declared at all is tracked through the model's set fields.
    """

    default: Any = None
    server_default: bool = False
    required_for: FieldRequiredFor | None = None
    recommended_value: Any = None
    description: str | None = None
    type: str | None = None

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set

    @property
    def has_recommended_value(self) -> bool:
        return "recommended_value" in self.model_fields_set

    def is_required_for(self, operation: str) -> bool:
        if self.required_for is None:
            return False
        return bool(getattr(self.required_for, operation, False))

    def is_notable(self) -> bool:
        return (
            self.has_default
            or self.server_default
            or (self.required_for is not None and not self.required_for.is_empty())
            or self.has_recommended_value
        )


class ResourceFieldMetadata(BaseModel):
    """Flat field map for one resource plus the derived summary lists."""

    fields: dict[str, FieldMetadataEntry] = {}
    server_default_fields: list[str] = []
    user_required_fields: list[str] = []
    recommended_value_fields: list[str] = []


class SideEffects(BaseModel):
    creates: list[str] = []
    updates: list[str] = []
    deletes: list[str] = []
    invalidates: list[str] = []


class CommonError(BaseModel):
    code: int
    message: str
    solution: str = ""


class PerformanceImpact(BaseModel):
    latency: str = "unknown"
    resource_usage: str = "unknown"


class OperationMetadata(BaseModel):
    """Human-oriented context about one API operation."""

    purpose: str | None = None
    danger_level: DangerLevel | None = None
    confirmation_required: bool | None = None
    required_fields: list[str] = []
    optional_fields: list[str] = []
    prerequisites: list[str] = []
    postconditions: list[str] = []
    side_effects: SideEffects | None = None
    common_errors: list[CommonError] = []
    performance_impact: PerformanceImpact | None = None


class ResourceOperationMetadata(BaseModel):
    list: OperationMetadata | None = None
    get: OperationMetadata | None = None
    create: OperationMetadata | None = None
    update: OperationMetadata | None = None
    delete: OperationMetadata | None = None

    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is None
            for name in ("list", "get", "create", "update", "delete")
        )


class ResourceDescriptor(BaseModel):
    """The merged per-resource record stored in the registry."""

    resource_key: str  # http_loadbalancer
    api_path: str  # http_loadbalancers
    display_name: str
    description: str = ""
    api_base: str = "config"
    service_segment: str | None = None
    full_api_path: str
    schema_file: str
    schema_id: str
    namespace_scoped: bool
    namespace_scope: NamespaceScope = "any"
    documentation_url: str | None = None
    domain: str | None = None
    operation_metadata: ResourceOperationMetadata | None = None
    field_metadata: ResourceFieldMetadata | None = None


class ValidationResult(BaseModel):
    """Outcome of validating a payload before it is sent to the API."""

    valid: bool
    missing_fields: list[str] = []
    server_defaulted_fields: list[str] = []
    recommended_value_fields: list[str] | None = None
    warnings: list[str] = []
    hints: list[str] = []
