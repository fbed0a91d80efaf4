"""Parser for ``dotnet list package --vulnerable --format json`` output.

Two shapes are accepted: vulnerabilities listed directly under each target
framework (entries carry ``packageId``), and the SDK's native layout where
they hang off ``topLevelPackages`` / ``transitivePackages`` entries.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from security_gate.models import NormalizedFinding
from security_gate.parsers.base import PathLike, parse_report, require_dict, require_list

TOOL_NAME = "dotnet-vulnerable"

DOTNET_SEVERITY_MAP = {
    "critical": "critical",
    "high": "high",
    "moderate": "medium",
    "medium": "medium",
    "low": "low",
}

PACKAGE_SECTIONS = ("topLevelPackages", "transitivePackages")


def map_dotnet_severity(severity: Optional[str]) -> str:
    return DOTNET_SEVERITY_MAP.get((severity or "").lower(), "info")


def _framework_vulnerabilities(framework: dict) -> Iterator[tuple[Optional[str], dict]]:
    for vuln in require_list(framework.get("vulnerabilities"), "vulnerabilities"):
        vuln = require_dict(vuln, "vulnerability")
        yield vuln.get("packageId"), vuln

    for section in PACKAGE_SECTIONS:
        for package in require_list(framework.get(section), section):
            package = require_dict(package, "package")
            for vuln in require_list(package.get("vulnerabilities"), "vulnerabilities"):
                yield package.get("id"), require_dict(vuln, "vulnerability")


def normalize_dotnet_vulnerable(document: Any, tool_name: str = TOOL_NAME) -> list[NormalizedFinding]:
    data = require_dict(document, "dotnet vulnerable report")
    findings = []

    for project in require_list(data.get("projects"), "projects"):
        project = require_dict(project, "project")
        for framework in require_list(project.get("frameworks"), "frameworks"):
            for package_id, vuln in _framework_vulnerabilities(require_dict(framework, "framework")):
                advisory_url = vuln.get("advisoryUrl") or vuln.get("advisoryurl")
                severity = vuln.get("severity")
                findings.append(
                    NormalizedFinding(
                        tool=TOOL_NAME,
                        category="dependency",
                        severity=map_dotnet_severity(severity),
                        rule_id=advisory_url or f"vuln-{package_id}",
                        title=f"{package_id}: {severity} vulnerability",
                        file=project.get("path") or "project",
                        message=advisory_url or "No advisory URL",
                    )
                )
    return findings


def parse_dotnet_vulnerable(path: PathLike, tool_name: str = TOOL_NAME) -> list[NormalizedFinding]:
    return parse_report(path, tool_name, normalize_dotnet_vulnerable)
