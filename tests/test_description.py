from resource_registry.parser.description import analyze_description, normalize_description


class TestNormalizeDescription:
    def test_empty(self):
        assert normalize_description("") == ""
        assert normalize_description(None) == ""

    def test_product_name(self):
        assert normalize_description("Managed by Volterra") == "Managed by F5 XC"
        assert normalize_description("managed by volterra") == "managed by F5 XC"

    def test_possessive(self):
        assert normalize_description("Volterra's network") == "F5 XC's network"

    def test_console_name(self):
        assert normalize_description("Open VoltConsole") == "Open F5 XC Console"

    def test_specific_phrase_before_generic(self):
        text = "Deployed on regional sites from volterra"
        assert normalize_description(text) == "Deployed on F5 XC Regional Edge sites"

    def test_product_phrases_use_lowercase_nouns(self):
        assert normalize_description("Register a Volterra Site") == "Register a F5 XC site"
        assert normalize_description("Runs on Volterra Edge Cloud") == "Runs on F5 XC edge cloud"
        assert normalize_description("The Volterra Software Appliance") == "The F5 XC software appliance"
        assert normalize_description("A Volterra Service") == "A F5 XC service"

    def test_console_url_preserved(self):
        text = "See https://console.ves.volterra.io/web for Volterra"
        assert normalize_description(text) == "See https://console.ves.volterra.io/web for F5 XC"

    def test_field_names_preserved(self):
        text = "Set volterra_software_version and dns_volterra_managed on the volterra site"
        assert normalize_description(text) == (
            "Set volterra_software_version and dns_volterra_managed on the F5 XC site"
        )

    def test_repeated_preserved_tokens(self):
        text = "console.ves.volterra.io and console.ves.volterra.io"
        assert normalize_description(text) == text

    def test_unrelated_text_untouched(self):
        assert normalize_description("HTTP load balancer") == "HTTP load balancer"


class TestAnalyzeDescription:
    def test_reports_changes(self):
        report = analyze_description("Managed by Volterra")
        assert report["normalized"] == "Managed by F5 XC"
        assert {"from": "Volterra", "to": "F5 XC"} in report["changes"]

    def test_no_changes(self):
        report = analyze_description("Nothing to see")
        assert report["changes"] == []
        assert report["original"] == report["normalized"]
