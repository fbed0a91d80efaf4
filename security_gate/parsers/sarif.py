"""SARIF 2.1.0 parser (CodeQL, Checkov, Trivy, Semgrep and friends)."""

from __future__ import annotations

import logging
from typing import Any

from security_gate.models import NormalizedFinding
from security_gate.parsers.base import (
    PathLike,
    dig,
    parse_report,
    require_dict,
    require_list,
)

logger = logging.getLogger(__name__)

SARIF_LEVEL_MAP = {
    "error": "high",
    "warning": "medium",
    "note": "low",
}

TITLE_MAX_LENGTH = 100


def map_sarif_level(level: Any) -> str:
    """Map a SARIF result level to a normalized severity.

    Only ``error``, ``warning`` and ``note`` carry meaning; everything else
    (``none``, unknown values) becomes ``info``.
    """
    return SARIF_LEVEL_MAP.get(str(level).lower(), "info")


def normalize_sarif(document: Any, tool_name: str) -> list[NormalizedFinding]:
    """Convert a decoded SARIF log into normalized findings.

    The run's ``tool.driver.name`` wins over *tool_name*, which is only used
    when the run does not name its driver.
    """
    sarif = require_dict(document, "SARIF log")
    findings: list[NormalizedFinding] = []

    for run in require_list(sarif.get("runs"), "runs"):
        tool = dig(run, "tool", "driver", "name") or tool_name

        for result in require_list(dig(run, "results"), "results"):
            findings.append(_normalize_result(require_dict(result, "result"), tool))

    logger.debug("Normalized %d SARIF results for %s", len(findings), tool_name)
    return findings


def _normalize_result(result: dict, tool: str) -> NormalizedFinding:
    rule_id = result.get("ruleId") or "unknown"
    text = dig(result, "message", "text")
    message = text or dig(result, "message", "markdown") or "No description"
    severity = map_sarif_level(result.get("level") or "warning")

    locations = result.get("locations") or []
    primary = dig(locations[0], "physicalLocation") if locations else None
    file = dig(primary, "artifactLocation", "uri") or "unknown"
    line = dig(primary, "region", "startLine")

    properties = result.get("properties") or {}
    cwe = None
    if properties.get("security-severity"):
        cwe = f"CWE-{properties.get('cwe-id') or 'unknown'}"

    fingerprint = dig(result, "fingerprints", "primaryLocationLineHash") or dig(
        result, "partialFingerprints", "primaryLocationLineHash"
    )

    return NormalizedFinding(
        tool=tool,
        category=properties.get("category") or "security",
        severity=severity,
        rule_id=str(rule_id),
        title=text[:TITLE_MAX_LENGTH] if text else str(rule_id),
        file=str(file),
        line=int(line) if line is not None else None,
        cwe=cwe,
        message=str(message),
        fingerprint=fingerprint,
    )


def parse_sarif(path: PathLike, tool_name: str) -> list[NormalizedFinding]:
    """Parse a SARIF file; missing or malformed files yield ``[]``."""
    return parse_report(path, tool_name, normalize_sarif)
