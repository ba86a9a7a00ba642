from resource_registry.parser.paths import classify_path, derive_namespace_scope, extract_api_info


class TestDeriveNamespaceScope:
    def test_literal_system(self):
        assert derive_namespace_scope("/api/config/namespaces/system/sites") == "system"

    def test_literal_shared(self):
        assert derive_namespace_scope("/api/config/namespaces/shared/resources") == "shared"

    def test_system_wins_over_shared(self):
        path = "/api/config/namespaces/system/things/namespaces/shared/x"
        assert derive_namespace_scope(path) == "system"

    def test_parameterized_namespace_is_any(self):
        assert derive_namespace_scope("/api/config/namespaces/{namespace}/http_loadbalancers") == "any"
        assert derive_namespace_scope("/api/config/namespaces/{ns}/resources") == "any"

    def test_tenant_level_is_any(self):
        assert derive_namespace_scope("/api/config/tenant_resources") == "any"

    def test_missing_path_is_any(self):
        assert derive_namespace_scope(None) == "any"
        assert derive_namespace_scope("") == "any"

    def test_literal_without_trailing_slash_is_any(self):
        assert derive_namespace_scope("/api/config/namespaces/system") == "any"


class TestClassifyPath:
    def test_extended_pattern(self):
        endpoint = classify_path("/api/config/dns/namespaces/{ns}/dns_zones")
        assert endpoint.api_base == "config"
        assert endpoint.service_segment == "dns"
        assert endpoint.api_path == "dns_zones"
        assert endpoint.namespace_scoped is True
        assert endpoint.namespace_scope == "any"

    def test_extended_pattern_with_item_parameter(self):
        endpoint = classify_path("/api/config/dns/namespaces/system/dns_zones/{name}")
        assert endpoint.api_path == "dns_zones"
        assert endpoint.namespace_scope == "system"

    def test_standard_namespace_pattern(self):
        endpoint = classify_path("/api/infraprotect/namespaces/{namespace}/infraprotect_asns")
        assert endpoint.api_base == "infraprotect"
        assert endpoint.service_segment is None
        assert endpoint.api_path == "infraprotect_asns"
        assert endpoint.namespace_scoped is True

    def test_dotted_namespace_parameter(self):
        endpoint = classify_path("/api/config/namespaces/{metadata.namespace}/http_loadbalancers")
        assert endpoint.api_path == "http_loadbalancers"
        assert endpoint.namespace_scope == "any"

    def test_literal_system_namespace(self):
        endpoint = classify_path("/api/config/namespaces/system/sites")
        assert endpoint.api_path == "sites"
        assert endpoint.namespace_scope == "system"

    def test_hyphenated_api_base(self):
        endpoint = classify_path("/api/gen-ai/namespaces/{namespace}/ai_assistants")
        assert endpoint.api_base == "gen-ai"

    def test_tenant_pattern(self):
        endpoint = classify_path("/api/web/tenant_settings")
        assert endpoint.api_base == "web"
        assert endpoint.api_path == "tenant_settings"
        assert endpoint.namespace_scoped is False
        assert endpoint.namespace_scope == "any"

    def test_fallback_takes_last_literal_segment(self):
        endpoint = classify_path("/api/config/namespaces/{namespace}/healthchecks/{name}/status")
        assert endpoint.api_path == "status"
        assert endpoint.api_base == "config"
        assert endpoint.namespace_scoped is True

    def test_fallback_detects_service_segment(self):
        endpoint = classify_path("/api/data/dns/namespaces/system/zones/{name}/records")
        assert endpoint.service_segment == "dns"
        assert endpoint.namespace_scope == "system"

    def test_fallback_without_namespace(self):
        endpoint = classify_path("/api/web/Custom/Things")
        assert endpoint.api_path == "Things"
        assert endpoint.namespace_scoped is False
        assert endpoint.namespace_scope == "any"

    def test_no_match(self):
        assert classify_path("/public/health") is None
        assert classify_path("/api/config/namespaces/{namespace}/things/{name}/{sub}") is None

    def test_classification_is_pure(self):
        path = "/api/config/namespaces/system/sites"
        assert classify_path(path) == classify_path(path)


class TestExtractApiInfo:
    def test_extended_path_preferred_over_earlier_standard_path(self):
        paths = {
            "/api/config/namespaces/{ns}/dns_domains": {},
            "/api/config/dns/namespaces/{ns}/dns_zones": {},
        }
        endpoint = extract_api_info(paths)
        assert endpoint.api_path == "dns_zones"
        assert endpoint.service_segment == "dns"

    def test_namespace_path_preferred_over_tenant_path(self):
        paths = {
            "/api/web/tenant_things": {},
            "/api/web/namespaces/{namespace}/things": {},
        }
        assert extract_api_info(paths).api_path == "things"

    def test_empty_paths(self):
        assert extract_api_info({}) is None
        assert extract_api_info(None) is None

    def test_only_unmatched_paths(self):
        assert extract_api_info({"/health": {}, "/metrics": {}}) is None
