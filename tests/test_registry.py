import ast
import json
from pathlib import Path

import pytest

from resource_registry.generator.overrides import (
    load_display_name_overrides,
    load_scope_overrides,
)
from resource_registry.generator.registry import (
    REGISTRY_JSON,
    REGISTRY_MODULE,
    Registry,
    build_registry,
    descriptor_to_dict,
    merge_descriptors,
)
from resource_registry.parser.documents import load_documents

FIXTURES = Path(__file__).parent / "fixtures"
SPECS = FIXTURES / "specs"
DOMAINS = FIXTURES / "domains"
OVERRIDES = FIXTURES / "overrides"


@pytest.fixture
def documents():
    return load_documents(SPECS)


@pytest.fixture
def registry(documents):
    return build_registry(
        documents,
        scope_overrides=load_scope_overrides(OVERRIDES / "namespace_scope_overrides.json"),
        display_name_overrides=load_display_name_overrides(OVERRIDES / "display_name_overrides.json"),
    )


class TestMerge:
    def test_unique_keys(self, documents):
        keys = [d.resource_key for d in merge_descriptors(documents)]
        assert sorted(keys) == ["app_firewall", "dns_zone", "http_loadbalancer", "site", "tenant_setting"]

    def test_first_document_wins(self, documents):
        merged = {d.resource_key: d for d in merge_descriptors(documents)}
        assert merged["http_loadbalancer"].schema_file.startswith("docs-cloud-f5-com.0073.")

    def test_input_order_does_not_matter(self, documents):
        forward = {d.resource_key: d.schema_file for d in merge_descriptors(documents)}
        backward = {d.resource_key: d.schema_file for d in merge_descriptors(list(reversed(documents)))}
        assert forward == backward

    def test_domain_documents(self):
        merged = {d.resource_key: d for d in merge_descriptors(load_documents(DOMAINS))}
        assert sorted(merged) == ["dns_zone", "origin_pool", "rate_limiter", "service_policy"]
        assert merged["dns_zone"].schema_file == "dns.json"
        assert merged["dns_zone"].display_name == "DNS Zones"
        assert merged["dns_zone"].description == "List DNS zones managed by F5 XC"


class TestOverrides:
    def test_scope_overrides(self, registry):
        assert registry.get("app_firewall").namespace_scope == "system"
        assert registry.get("site").namespace_scope == "any"
        assert registry.get("dns_zone").namespace_scope == "system"
        assert "not_a_resource" not in registry

    def test_display_name_overrides(self, registry):
        assert registry.get("http_loadbalancer").display_name == "HTTP Load Balancers"
        assert "ghost" not in registry

    def test_missing_override_files(self, tmp_path):
        assert load_scope_overrides(tmp_path / "none.json") is None
        assert load_display_name_overrides(None) is None

    def test_malformed_override_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert load_scope_overrides(path) is None

    def test_invalid_override_shape(self, tmp_path):
        path = tmp_path / "shape.json"
        path.write_text(json.dumps({"overrides": {"x": {"reason": "no name"}}}))
        assert load_display_name_overrides(path) is None


class TestRegistry:
    def test_sorted_keys(self, registry):
        assert registry.keys() == ["app_firewall", "dns_zone", "http_loadbalancer", "site", "tenant_setting"]

    def test_reverse_index(self, registry):
        assert registry.resource_key_for_api_path("http_loadbalancers") == "http_loadbalancer"
        assert registry.resource_key_for_api_path("tenant_settings") == "tenant_setting"
        assert registry.resource_key_for_api_path("nothing") is None
        for api_path, key in registry.api_path_index.items():
            assert registry.get(key).api_path == api_path

    def test_tenant_resource(self, registry):
        tenant = registry.get("tenant_setting")
        assert tenant.namespace_scoped is False
        assert tenant.api_base == "web"

    def test_required_fields(self, registry):
        assert registry.required_fields("http_loadbalancer", "create") == [
            "spec.domains",
            "spec.idle_timeout",
            "metadata.name",
            "path.namespace",
        ]
        assert registry.required_fields("http_loadbalancer", "update") == ["spec.domains"]
        assert registry.required_fields("unknown", "create") == []

    def test_user_required_fields(self, registry):
        assert registry.user_required_fields("http_loadbalancer", "create") == ["spec.domains"]
        assert registry.user_required_fields("http_loadbalancer", "update") == ["spec.domains"]
        assert registry.user_required_fields("site", "create") == []

    def test_server_defaults(self, registry):
        assert registry.is_field_server_defaulted("http_loadbalancer", "spec.timeout") is True
        assert registry.is_field_server_defaulted("http_loadbalancer", "spec.routes.path") is True
        assert registry.is_field_server_defaulted("http_loadbalancer", "spec.domains") is False
        assert registry.is_field_server_defaulted("unknown", "spec.timeout") is False

    def test_recommended_value_fields(self, registry):
        assert registry.recommended_value_fields("http_loadbalancer") == [
            "spec.add_location",
            "spec.advertise.port",
            "spec.waf_mode",
        ]


class TestSerialization:
    def test_snapshot_layout(self, registry):
        data = registry.to_dict()
        assert list(data) == ["resource_types", "api_path_to_resource_key"]
        assert list(data["resource_types"]) == registry.keys()

    def test_unset_attributes_are_omitted(self, registry):
        data = descriptor_to_dict(registry.get("site"))
        assert "service_segment" not in data
        assert "field_metadata" not in data
        assert "operation_metadata" not in data
        assert descriptor_to_dict(registry.get("dns_zone"))["service_segment"] == "dns"

    def test_field_entry_serialization(self, registry):
        fields = registry.to_dict()["resource_types"]["http_loadbalancer"]["field_metadata"]["fields"]
        assert fields["spec.timeout"] == {"default": 3, "server_default": True, "type": "integer"}
        assert fields["spec.domains"]["required_for"] == {"minimum_config": True, "create": True, "update": True}
        assert fields["spec.add_location"]["recommended_value"] is True

    def test_build_is_byte_identical(self, documents):
        first = build_registry(documents).to_json()
        second = build_registry(load_documents(SPECS, max_workers=3)).to_json()
        assert first == second

    def test_reload_round_trip(self, registry, tmp_path):
        registry.write(tmp_path)
        reloaded = Registry.load(tmp_path / REGISTRY_JSON)
        assert reloaded.to_json() == registry.to_json()
        assert reloaded.field_entry("http_loadbalancer", "spec.timeout").has_default is True
        assert reloaded.field_entry("http_loadbalancer", "spec.domains").has_default is False

    def test_null_default_survives_reload(self):
        registry = Registry.from_dict({
            "resource_types": {
                "thing": {
                    "api_path": "things",
                    "display_name": "Things",
                    "full_api_path": "/api/config/namespaces/{ns}/things",
                    "schema_file": "t.json",
                    "schema_id": "ves.io.schema.thing",
                    "namespace_scoped": True,
                    "field_metadata": {"fields": {"spec.label": {"default": None}}},
                }
            }
        })
        assert registry.field_entry("thing", "spec.label").has_default is True
        assert registry.is_field_server_defaulted("thing", "spec.label") is True

    def test_write_artifacts(self, registry, tmp_path):
        written = registry.write(tmp_path / "out")
        assert set(written) == {REGISTRY_JSON, REGISTRY_MODULE}
        assert (tmp_path / "out" / REGISTRY_JSON).read_text().endswith("}\n")

    def test_rendered_module_is_importable_data(self, registry):
        source = registry.render_module()
        tree = ast.parse(source)
        namespace: dict = {}
        exec(compile(tree, REGISTRY_MODULE, "exec"), namespace)
        assert namespace["get_resource_key_from_api_path"]("sites") == "site"
        assert namespace["get_all_resource_keys"]() == registry.keys()
        assert namespace["RESOURCE_TYPES"] == registry.to_dict()["resource_types"]

    def test_rendered_module_is_deterministic(self, documents):
        assert build_registry(documents).render_module() == build_registry(documents).render_module()


SITE_FILE = "docs-cloud-f5-com.0100.public.ves.io.schema.site.ves-swagger.json"


def _write_spec(directory: Path, schema_name: str, content) -> None:
    filename = f"docs-cloud-f5-com.0200.public.ves.io.schema.{schema_name}.ves-swagger.json"
    (directory / filename).write_text(json.dumps(content))


class TestMalformedDocuments:
    @pytest.fixture
    def doc_dir(self, tmp_path):
        (tmp_path / SITE_FILE).write_text((SPECS / SITE_FILE).read_text())
        return tmp_path

    def test_non_object_info_is_skipped(self, doc_dir):
        _write_spec(doc_dir, "legacy", {"info": "legacy"})
        documents = load_documents(doc_dir)
        assert len(documents) == 2

        registry = build_registry(documents)
        assert registry.keys() == ["site"]

    def test_bad_error_code_is_skipped(self, doc_dir):
        _write_spec(doc_dir, "widget", {
            "info": {"title": "F5 Distributed Cloud Services API for ves.io.schema.widget"},
            "paths": {
                "/api/config/namespaces/{namespace}/widgets": {
                    "post": {
                        "x-ves-operation-metadata": {
                            "purpose": "Create a widget",
                            "common_errors": [{"code": "NOT_FOUND", "message": "missing"}],
                        }
                    }
                }
            },
        })
        registry = build_registry(load_documents(doc_dir))
        assert registry.keys() == ["site"]

    def test_malformed_document_does_not_shadow_later_duplicate(self, doc_dir):
        (doc_dir / "docs-cloud-f5-com.0050.public.ves.io.schema.site.ves-swagger.json").write_text(
            json.dumps({"info": ["not", "an", "object"]})
        )
        registry = build_registry(load_documents(doc_dir))
        assert registry.get("site").schema_file == SITE_FILE
