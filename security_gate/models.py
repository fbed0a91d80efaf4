"""
Security Gate Data Models.

Core dataclass definitions shared by the parsers, the exemption resolver,
the threshold engine and the report renderer.

Classes:
    NormalizedFinding: One security issue from any scanner, in a common shape
    ScanResult: Parse output for one scanner report file
    FindingSummary: Aggregated counts for an evaluation run
    EvaluationResult: The verdict of one gate evaluation
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

SEVERITY_CRITICAL = "critical"
SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"
SEVERITY_LOW = "low"
SEVERITY_INFO = "info"

SEVERITY_ORDER: tuple[str, ...] = (
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_MEDIUM,
    SEVERITY_LOW,
    SEVERITY_INFO,
)

# info is counted per tool but never thresholded
THRESHOLDED_SEVERITIES: tuple[str, ...] = SEVERITY_ORDER[:4]

STATUS_LOADED = "loaded"
STATUS_MISSING = "missing"
STATUS_MALFORMED = "malformed"


@dataclass(frozen=True)
class NormalizedFinding:
    """Unified finding produced by a format parser"""

    tool: str
    category: str
    severity: str  # 'critical', 'high', 'medium', 'low', 'info'
    rule_id: str
    title: str
    file: str
    message: str
    line: Optional[int] = None
    cwe: Optional[str] = None
    cvss: Optional[float] = None
    fingerprint: Optional[str] = None  # identity hint, never deduplicated here

    def __post_init__(self):
        if self.severity not in SEVERITY_ORDER:
            raise ValueError(f"Unknown severity '{self.severity}'")

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase wire form, omitting unset optional fields."""
        data: dict[str, Any] = {
            "tool": self.tool,
            "category": self.category,
            "severity": self.severity,
            "ruleId": self.rule_id,
            "title": self.title,
            "file": self.file,
        }
        if self.line is not None:
            data["line"] = self.line
        if self.cwe is not None:
            data["cwe"] = self.cwe
        if self.cvss is not None:
            data["cvss"] = self.cvss
        data["message"] = self.message
        if self.fingerprint is not None:
            data["fingerprint"] = self.fingerprint
        return data


@dataclass
class ScanResult:
    """Findings and ingestion status for one scanner report.

    ``status`` separates a scanner that ran and found nothing (``loaded``
    with no findings) from one whose report is absent (``missing``) or
    unreadable (``malformed``).
    """

    tool: str
    findings: list[NormalizedFinding] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    status: str = STATUS_LOADED
    source: str = ""

    @property
    def ran(self) -> bool:
        return self.status == STATUS_LOADED


@dataclass
class FindingSummary:
    total: int = 0
    by_severity: dict[str, int] = field(
        default_factory=lambda: {sev: 0 for sev in THRESHOLDED_SEVERITIES}
    )
    by_tool: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "bySeverity": dict(self.by_severity),
            "byTool": dict(self.by_tool),
        }


@dataclass
class EvaluationResult:
    """Result of a security gate evaluation.

    Attributes
    ----------
    passed : bool
        ``True`` when no violation was raised.
    blocked : bool
        Mirror of ``passed``; the pipeline must halt when set.
    findings : FindingSummary
        Counts over the findings left after exemptions.
    violations : list[str]
        Block-tier threshold breaches, global first, then per tool.
    warnings : list[str]
        Warn-tier threshold breaches.
    exempted : int
        Number of findings removed by active exemptions.
    """

    passed: bool
    blocked: bool
    findings: FindingSummary
    violations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    exempted: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "blocked": self.blocked,
            "findings": self.findings.to_dict(),
            "violations": list(self.violations),
            "warnings": list(self.warnings),
            "exempted": self.exempted,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


__all__ = [
    "NormalizedFinding",
    "ScanResult",
    "FindingSummary",
    "EvaluationResult",
    "SEVERITY_ORDER",
    "THRESHOLDED_SEVERITIES",
    "STATUS_LOADED",
    "STATUS_MISSING",
    "STATUS_MALFORMED",
]
