"""
Security Gate Report Rendering.

Builds the deterministic textual report printed at the end of a gate run.

Functions:
    render_report: Render the full report as a string
    render_scanner_status: Render the per-scanner ingestion lines
    print_report: Write the report to stdout
"""

from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO

from security_gate.models import (
    STATUS_MALFORMED,
    STATUS_MISSING,
    THRESHOLDED_SEVERITIES,
    EvaluationResult,
    ScanResult,
)

TITLE = "🔍 Security Gate Evaluator"


def _underline(text: str, char: str = "=") -> str:
    return char * len(text)


def render_scanner_status(scan_results: Iterable[ScanResult]) -> list[str]:
    """Lines describing which reports were loaded and which were not.

    A missing or malformed report is indistinguishable from a clean scan in
    the counts, so it is called out here.
    """
    lines: list[str] = []
    missing: list[str] = []
    malformed: list[ScanResult] = []

    for result in scan_results:
        if result.status == STATUS_MISSING:
            missing.append(result.tool)
        elif result.status == STATUS_MALFORMED:
            malformed.append(result)
        else:
            lines.append(f"✓ Loaded {len(result.findings)} findings from {result.tool}")

    if missing:
        lines.append(f"○ No report (scanner did not run?): {', '.join(missing)}")
    for result in malformed:
        detail = result.errors[0] if result.errors else "unreadable report"
        lines.append(f"✗ Unreadable report for {result.tool}: {detail}")
    return lines


def render_report(
    result: EvaluationResult,
    scan_results: Optional[Iterable[ScanResult]] = None,
    profile: Optional[str] = None,
) -> str:
    """Render *result* as the human-readable gate report."""
    lines = [TITLE, _underline(TITLE), ""]
    if profile:
        lines += [f"Profile: {profile}", ""]

    if scan_results is not None:
        lines += render_scanner_status(scan_results)
        lines.append("")

    summary = result.findings
    header = "📊 Security Findings Summary"
    lines += [header, _underline(header), f"Total findings: {summary.total}"]
    for severity in THRESHOLDED_SEVERITIES:
        label = f"{severity.capitalize()}:"
        lines.append(f"  {label:<9} {summary.by_severity.get(severity, 0)}")
    if result.exempted:
        lines.append(f"  Exempted: {result.exempted}")
    lines.append("")

    lines.append("By Tool:")
    for tool, count in summary.by_tool.items():
        lines.append(f"  {tool}: {count}")
    lines.append("")

    if result.warnings:
        lines.append("⚠️  Warnings:")
        lines += [f"  ⚠️  {warning}" for warning in result.warnings]
        lines.append("")

    if result.violations:
        header = "🚨 SECURITY GATE FAILED"
        lines += [header, _underline(header)]
        lines += [f"  ❌ {violation}" for violation in result.violations]
        lines.append("")
    else:
        lines.append("✅ Security gate PASSED")

    return "\n".join(lines).rstrip("\n") + "\n"


def print_report(
    result: EvaluationResult,
    scan_results: Optional[Iterable[ScanResult]] = None,
    profile: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    out = stream or sys.stdout
    out.write(render_report(result, scan_results, profile))
    out.flush()
