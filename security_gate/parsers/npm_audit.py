"""npm audit (v7+) JSON report parser."""

from __future__ import annotations

from typing import Any, Optional

from security_gate.models import NormalizedFinding
from security_gate.parsers.base import PathLike, parse_report, require_dict

TOOL_NAME = "npm-audit"

NPM_SEVERITY_MAP = {
    "critical": "critical",
    "high": "high",
    "moderate": "medium",
    "low": "low",
}


def map_npm_severity(severity: Optional[str]) -> str:
    return NPM_SEVERITY_MAP.get((severity or "").lower(), "info")


def _first_advisory(vuln: dict) -> dict:
    # via[] mixes advisory objects with bare package names of transitive hops
    via = vuln.get("via") or []
    if via and isinstance(via[0], dict):
        return via[0]
    return {}


def normalize_npm_audit(document: Any, tool_name: str = TOOL_NAME) -> list[NormalizedFinding]:
    """Convert the ``vulnerabilities`` map of an npm audit report.

    Reports in the legacy (v6) ``advisories`` format carry no
    ``vulnerabilities`` key and produce no findings.
    """
    audit = require_dict(document, "npm audit report")
    vulnerabilities = audit.get("vulnerabilities")
    if not vulnerabilities:
        return []

    findings = []
    for package, vuln in require_dict(vulnerabilities, "vulnerabilities").items():
        vuln = require_dict(vuln, f"vulnerability '{package}'")
        advisory = _first_advisory(vuln)

        source = advisory.get("source")
        rule_id = advisory.get("cve") or (str(source) if source else None) or f"vuln-{package}"
        cwes = advisory.get("cwe")
        cvss = (advisory.get("cvss") or {}).get("score")

        findings.append(
            NormalizedFinding(
                tool=TOOL_NAME,
                category="dependency",
                severity=map_npm_severity(vuln.get("severity")),
                rule_id=rule_id,
                title=f"{package}: {advisory.get('title') or 'Vulnerability'}",
                file="package.json",
                cwe=", ".join(cwes) if cwes else None,
                cvss=float(cvss) if cvss is not None else None,
                message=advisory.get("url") or "See npm audit for details",
            )
        )
    return findings


def parse_npm_audit(path: PathLike, tool_name: str = TOOL_NAME) -> list[NormalizedFinding]:
    return parse_report(path, tool_name, normalize_npm_audit)
