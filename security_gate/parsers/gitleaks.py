"""Gitleaks JSON report parser.

Every gitleaks hit is a leaked credential, so all findings are ``critical``
secrets regardless of the rule that fired. The raw secret never reaches the
normalized message: only a short excerpt of the matched text is kept, with
the secret value itself masked when gitleaks reports it separately.
"""

from __future__ import annotations

from typing import Any

from security_gate.models import NormalizedFinding
from security_gate.parsers.base import PathLike, parse_report, require_dict, require_list

TOOL_NAME = "gitleaks"
MATCH_EXCERPT_LENGTH = 50
REDACTED = "REDACTED"


def redact_match(match: Any, secret: Any = None) -> str:
    """Return a truncated excerpt of *match* with *secret* masked."""
    if not match:
        return "redacted"
    text = str(match)
    if secret:
        text = text.replace(str(secret), REDACTED)
    return text[:MATCH_EXCERPT_LENGTH] + "..."


def normalize_gitleaks(document: Any, tool_name: str = TOOL_NAME) -> list[NormalizedFinding]:
    findings = []
    for item in require_list(document, "gitleaks report"):
        item = require_dict(item, "gitleaks entry")
        rule_id = item.get("RuleID") or item.get("Rule") or "secret-detected"
        line = item.get("StartLine") or item.get("LineNumber")
        findings.append(
            NormalizedFinding(
                tool=TOOL_NAME,
                category="secrets",
                severity="critical",
                rule_id=str(rule_id),
                title=item.get("Description") or f"Secret detected: {rule_id}",
                file=item.get("File") or "unknown",
                line=int(line) if line is not None else None,
                message=f"Secret detected: {redact_match(item.get('Match'), item.get('Secret'))}",
                fingerprint=item.get("Fingerprint"),
            )
        )
    return findings


def parse_gitleaks(path: PathLike, tool_name: str = TOOL_NAME) -> list[NormalizedFinding]:
    return parse_report(path, tool_name, normalize_gitleaks)
