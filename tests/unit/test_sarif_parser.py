"""
Tests for the SARIF parser.

Covers level mapping, location/fingerprint extraction, CWE synthesis,
tool-name resolution and the fail-open behaviour on bad files.
"""

import json
import logging

import pytest

from security_gate.parsers.sarif import map_sarif_level, normalize_sarif, parse_sarif

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def codeql_findings(fixtures_dir):
    """Findings parsed from the sample CodeQL SARIF report."""
    return parse_sarif(fixtures_dir / "codeql-results.sarif", "codeql")


def _sarif(results, driver_name=None):
    run = {"results": results}
    if driver_name is not None:
        run["tool"] = {"driver": {"name": driver_name}}
    return {"version": "2.1.0", "runs": [run]}


# ---------------------------------------------------------------------------
# Level mapping
# ---------------------------------------------------------------------------


class TestLevelMapping:
    @pytest.mark.parametrize(
        "level,expected",
        [
            ("error", "high"),
            ("warning", "medium"),
            ("note", "low"),
            ("none", "info"),
            ("ERROR", "high"),
            ("bogus", "info"),
        ],
    )
    def test_fixed_mapping(self, level, expected):
        assert map_sarif_level(level) == expected

    def test_error_is_never_critical(self):
        """SARIF has no level above error, so nothing maps to critical."""
        findings = normalize_sarif(_sarif([{"ruleId": "r", "level": "error"}]), "codeql")
        assert findings[0].severity == "high"


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


class TestSarifFields:
    def test_parses_every_result(self, codeql_findings):
        assert len(codeql_findings) == 5

    def test_driver_name_is_effective_tool(self, codeql_findings):
        assert {f.tool for f in codeql_findings} == {"CodeQL"}

    def test_declared_name_used_without_driver(self):
        findings = normalize_sarif(_sarif([{"ruleId": "r", "level": "note"}]), "semgrep")
        assert findings[0].tool == "semgrep"

    def test_located_error_result(self, codeql_findings):
        finding = codeql_findings[0]
        assert finding.rule_id == "js/sql-injection"
        assert finding.severity == "high"
        assert finding.file == "apps/node-api/src/routes/users.ts"
        assert finding.line == 42
        assert finding.category == "security"
        assert finding.cwe == "CWE-89"
        assert finding.title == "This query depends on a user-provided value."
        assert finding.message == finding.title

    def test_fingerprint_prefers_full_fingerprint(self, codeql_findings):
        assert codeql_findings[0].fingerprint == "abc123:1"

    def test_fingerprint_falls_back_to_partial(self, codeql_findings):
        assert codeql_findings[1].fingerprint == "def456:1"

    def test_missing_location_defaults(self, codeql_findings):
        finding = codeql_findings[1]
        assert finding.file == "unknown"
        assert finding.line is None

    def test_markdown_message_used_but_title_falls_back_to_rule(self, codeql_findings):
        finding = codeql_findings[1]
        assert finding.message == "Route handler is not **rate-limited**."
        assert finding.title == "js/missing-rate-limiting"
        assert finding.category == "availability"

    def test_cwe_only_with_security_severity(self, codeql_findings):
        assert codeql_findings[2].cwe is None

    def test_cwe_unknown_when_id_absent(self):
        result = {"ruleId": "r", "level": "error", "properties": {"security-severity": "9.1"}}
        findings = normalize_sarif(_sarif([result]), "codeql")
        assert findings[0].cwe == "CWE-unknown"

    def test_absent_level_treated_as_warning(self, codeql_findings):
        assert codeql_findings[3].severity == "medium"

    def test_defaults_for_bare_result(self, codeql_findings):
        finding = codeql_findings[4]
        assert finding.rule_id == "unknown"
        assert finding.severity == "info"
        assert finding.message == "No description"
        assert finding.title == "unknown"

    def test_title_truncated_to_100_characters(self):
        text = "x" * 250
        findings = normalize_sarif(_sarif([{"ruleId": "r", "message": {"text": text}}]), "t")
        assert findings[0].title == "x" * 100
        assert findings[0].message == text

    def test_multiple_runs_keep_their_own_tool(self):
        document = {
            "runs": [
                {"tool": {"driver": {"name": "Trivy"}}, "results": [{"ruleId": "a"}]},
                {"tool": {"driver": {"name": "Semgrep OSS"}}, "results": [{"ruleId": "b"}]},
            ]
        }
        findings = normalize_sarif(document, "trivy")
        assert [f.tool for f in findings] == ["Trivy", "Semgrep OSS"]

    def test_run_without_results(self):
        assert normalize_sarif({"runs": [{"tool": {"driver": {"name": "x"}}}]}, "x") == []


# ---------------------------------------------------------------------------
# Fail-open behaviour
# ---------------------------------------------------------------------------


class TestSarifFailOpen:
    def test_missing_file_returns_empty_and_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            findings = parse_sarif(tmp_path / "trivy-results.sarif", "trivy")
        assert findings == []
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_invalid_json_returns_empty_and_logs_error(self, tmp_path, caplog):
        path = tmp_path / "broken.sarif"
        path.write_text("{ not json", encoding="utf-8")
        with caplog.at_level(logging.ERROR):
            findings = parse_sarif(path, "codeql")
        assert findings == []
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_wrong_shape_returns_empty(self, tmp_path):
        path = tmp_path / "list.sarif"
        path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        assert parse_sarif(path, "codeql") == []

    def test_non_list_runs_returns_empty(self, tmp_path):
        path = tmp_path / "runs.sarif"
        path.write_text(json.dumps({"runs": {"oops": True}}), encoding="utf-8")
        assert parse_sarif(path, "codeql") == []
