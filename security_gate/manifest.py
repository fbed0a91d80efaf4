"""Declarative list of the scanner reports the gate looks for.

Adding a scanner means adding a ``ReportSource`` entry here; discovery and
parsing code never names individual tools.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from security_gate.models import ScanResult
from security_gate.parsers import (
    normalize_dotnet_vulnerable,
    normalize_gitleaks,
    normalize_npm_audit,
    normalize_sarif,
)
from security_gate.parsers.base import Normalizer, PathLike, load_scan_result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSource:
    """One expected scanner report under the results directory."""

    tool: str
    filename: str
    normalizer: Normalizer

    def path_in(self, results_dir: PathLike) -> Path:
        return Path(results_dir) / self.filename


DEFAULT_MANIFEST: tuple[ReportSource, ...] = (
    ReportSource("codeql", "codeql-results.sarif", normalize_sarif),
    ReportSource("checkov", "checkov-results.sarif", normalize_sarif),
    ReportSource("trivy", "trivy-results.sarif", normalize_sarif),
    ReportSource("semgrep", "semgrep-results.sarif", normalize_sarif),
    ReportSource("gitleaks", "gitleaks-report.json", normalize_gitleaks),
    ReportSource("npm-audit", "npm-audit.json", normalize_npm_audit),
    ReportSource("dotnet-vulnerable", "dotnet-vulnerable.json", normalize_dotnet_vulnerable),
)


def collect_scan_results(
    results_dir: PathLike,
    manifest: Iterable[ReportSource] = DEFAULT_MANIFEST,
) -> list[ScanResult]:
    """Parse every manifest entry found under *results_dir*.

    Absent reports are not an error: they come back as ``missing``
    ``ScanResult`` entries with no findings, in manifest order.
    """
    results = []
    for source in manifest:
        result = load_scan_result(source.path_in(results_dir), source.tool, source.normalizer)
        if result.ran:
            logger.info("✓ Loaded %d findings from %s", len(result.findings), source.tool)
        results.append(result)
    return results
