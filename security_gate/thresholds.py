"""Threshold evaluation for the security gate.

Aggregates post-exemption findings by severity and by tool, then checks
them against the active profile's block/warn limits and the per-tool block
overrides.

Usage::

    from security_gate.thresholds import GateEvaluator

    evaluator = GateEvaluator(load_config("thresholds.yml"))
    result = evaluator.evaluate(scan_results, now=datetime.now(timezone.utc))
    if result.blocked:
        sys.exit(1)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Mapping

from security_gate.config_loader import GateConfig, ThresholdConfig, ToolOverride
from security_gate.exemptions import apply_exemptions
from security_gate.models import (
    SEVERITY_INFO,
    THRESHOLDED_SEVERITIES,
    EvaluationResult,
    FindingSummary,
    NormalizedFinding,
    ScanResult,
)

logger = logging.getLogger(__name__)


def count_by_severity(findings: Iterable[NormalizedFinding]) -> dict[str, int]:
    """Count findings per thresholded severity; ``info`` is not counted."""
    counts = {severity: 0 for severity in THRESHOLDED_SEVERITIES}
    for finding in findings:
        if finding.severity != SEVERITY_INFO:
            counts[finding.severity] += 1
    return counts


def summarize(findings: list[NormalizedFinding]) -> FindingSummary:
    """Aggregate totals. ``info`` findings count per tool but not per severity."""
    by_tool: dict[str, int] = {}
    for finding in findings:
        by_tool[finding.tool] = by_tool.get(finding.tool, 0) + 1

    return FindingSummary(
        total=len(findings),
        by_severity=count_by_severity(findings),
        by_tool=by_tool,
    )


def check_global_thresholds(
    counts: Mapping[str, int],
    thresholds: ThresholdConfig,
) -> tuple[list[str], list[str]]:
    """Return ``(violations, warnings)`` for the profile-wide limits.

    A severity that breaches its block limit is a violation and is not also
    reported as a warning.
    """
    violations: list[str] = []
    warnings: list[str] = []

    for severity in THRESHOLDED_SEVERITIES:
        count = counts.get(severity, 0)
        block = thresholds.block.limit_for(severity)
        warn = thresholds.warn.limit_for(severity)

        if block is not None and count > block:
            violations.append(f"{severity.upper()}: {count} found, threshold is {block}")
        elif warn is not None and count > warn:
            warnings.append(f"{severity.upper()}: {count} found, warning threshold is {warn}")

    return violations, warnings


def check_tool_override(
    tool: str,
    findings: Iterable[NormalizedFinding],
    override: ToolOverride,
) -> list[str]:
    """Block-only check of one tool's findings against its override."""
    counts = count_by_severity(f for f in findings if f.tool == tool)
    violations = []
    for severity in THRESHOLDED_SEVERITIES:
        block = override.block.limit_for(severity)
        if block is not None and counts[severity] > block:
            violations.append(
                f"[{tool}] {severity.upper()}: {counts[severity]} found, threshold is {block}"
            )
    return violations


def evaluate_findings(
    findings: list[NormalizedFinding],
    config: GateConfig,
    exempted: int = 0,
) -> EvaluationResult:
    """Evaluate already-filtered findings against *config*.

    Tool overrides are additive: a finding counted towards a tool violation
    still counts towards the global limits.
    """
    summary = summarize(findings)
    violations, warnings = check_global_thresholds(
        summary.by_severity, config.active_thresholds
    )

    for tool, override in config.tool_overrides.items():
        violations.extend(check_tool_override(tool, findings, override))

    passed = not violations
    return EvaluationResult(
        passed=passed,
        blocked=not passed,
        findings=summary,
        violations=violations,
        warnings=warnings,
        exempted=exempted,
    )


class GateEvaluator:
    """Runs exemption filtering and threshold checks for one configuration.

    Parameters
    ----------
    config : GateConfig
        Validated threshold configuration; never mutated.
    """

    def __init__(self, config: GateConfig):
        self._config = config

    @property
    def config(self) -> GateConfig:
        return self._config

    @property
    def thresholds(self) -> ThresholdConfig:
        return self._config.active_thresholds

    def evaluate(self, scan_results: Iterable[ScanResult], now: datetime) -> EvaluationResult:
        """Evaluate every finding in *scan_results* at clock value *now*."""
        all_findings = [f for result in scan_results for f in result.findings]
        kept, exempted = apply_exemptions(all_findings, self._config.exemptions, now)

        result = evaluate_findings(kept, self._config, exempted=len(exempted))
        logger.info(
            "Gate %s: %d finding(s), %d violation(s), %d warning(s)",
            "passed" if result.passed else "BLOCKED",
            result.findings.total,
            len(result.violations),
            len(result.warnings),
        )
        return result


__all__ = [
    "GateEvaluator",
    "count_by_severity",
    "summarize",
    "check_global_thresholds",
    "check_tool_override",
    "evaluate_findings",
]
