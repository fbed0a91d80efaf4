"""
Tests for report rendering

Tests report.py: summary layout, scanner status lines, warnings and the
final pass/fail banner.
"""

import io

from security_gate.models import (
    STATUS_MALFORMED,
    STATUS_MISSING,
    EvaluationResult,
    FindingSummary,
    ScanResult,
)
from security_gate.report import print_report, render_report, render_scanner_status


def _result(violations=None, warnings=None, exempted=0):
    summary = FindingSummary(
        total=4,
        by_severity={"critical": 1, "high": 2, "medium": 1, "low": 0},
        by_tool={"gitleaks": 1, "trivy": 3},
    )
    violations = violations or []
    return EvaluationResult(
        passed=not violations,
        blocked=bool(violations),
        findings=summary,
        violations=violations,
        warnings=warnings or [],
        exempted=exempted,
    )


class TestRenderReport:
    def test_passing_report(self):
        text = render_report(_result())
        assert text.startswith("🔍 Security Gate Evaluator\n")
        assert "Total findings: 4" in text
        assert "  Critical: 1" in text
        assert "  High:     2" in text
        assert "  gitleaks: 1" in text
        assert "  trivy: 3" in text
        assert text.rstrip().endswith("✅ Security gate PASSED")
        assert "FAILED" not in text

    def test_failing_report_lists_violations(self):
        text = render_report(_result(violations=["CRITICAL: 1 found, threshold is 0"]))
        assert "🚨 SECURITY GATE FAILED" in text
        assert "  ❌ CRITICAL: 1 found, threshold is 0" in text
        assert "PASSED" not in text

    def test_warnings_section(self):
        text = render_report(_result(warnings=["HIGH: 2 found, warning threshold is 0"]))
        assert "⚠️  Warnings:" in text
        assert "HIGH: 2 found, warning threshold is 0" in text

    def test_no_warnings_section_when_empty(self):
        assert "Warnings:" not in render_report(_result())

    def test_exempted_count_only_when_nonzero(self):
        assert "Exempted" not in render_report(_result())
        assert "  Exempted: 2" in render_report(_result(exempted=2))

    def test_profile_line(self):
        assert "Profile: development" in render_report(_result(), profile="development")

    def test_rendering_is_deterministic(self):
        result = _result(violations=["A"], warnings=["B"])
        assert render_report(result) == render_report(result)

    def test_print_report_writes_to_stream(self):
        out = io.StringIO()
        print_report(_result(), stream=out)
        assert out.getvalue() == render_report(_result())


class TestScannerStatus:
    def test_status_lines(self):
        scans = [
            ScanResult(tool="codeql"),
            ScanResult(tool="checkov", status=STATUS_MISSING),
            ScanResult(tool="trivy", status=STATUS_MISSING),
            ScanResult(tool="gitleaks", status=STATUS_MALFORMED, errors=["Invalid JSON"]),
        ]
        lines = render_scanner_status(scans)
        assert lines == [
            "✓ Loaded 0 findings from codeql",
            "○ No report (scanner did not run?): checkov, trivy",
            "✗ Unreadable report for gitleaks: Invalid JSON",
        ]

    def test_status_in_report(self):
        text = render_report(_result(), scan_results=[ScanResult(tool="semgrep", status=STATUS_MISSING)])
        assert "○ No report (scanner did not run?): semgrep" in text
