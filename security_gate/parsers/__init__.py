"""
Format parsers for scanner reports.

Each format exposes a fail-open ``parse_<format>(path, tool_name)`` function
and a pure ``normalize_<format>(document, tool_name)`` counterpart that works
on already-decoded JSON.
"""

from .base import load_scan_result, parse_report, read_report
from .dotnet_vulnerable import normalize_dotnet_vulnerable, parse_dotnet_vulnerable
from .gitleaks import normalize_gitleaks, parse_gitleaks
from .npm_audit import normalize_npm_audit, parse_npm_audit
from .sarif import normalize_sarif, parse_sarif

__all__ = [
    "load_scan_result",
    "parse_report",
    "read_report",
    "normalize_sarif",
    "parse_sarif",
    "normalize_gitleaks",
    "parse_gitleaks",
    "normalize_npm_audit",
    "parse_npm_audit",
    "normalize_dotnet_vulnerable",
    "parse_dotnet_vulnerable",
]
