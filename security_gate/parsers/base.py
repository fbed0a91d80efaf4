"""Shared report-reading plumbing for the format parsers.

Every format parser is a pure normalizer over an already-decoded JSON
document. This module owns the file boundary: it reads and decodes the
report, turns I/O and shape problems into ``ScannerOutputError`` subclasses,
and applies the fail-open policy (log, then fall back to zero findings).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Union

from security_gate.exceptions import (
    ScannerOutputError,
    ScannerOutputMalformed,
    ScannerOutputMissing,
)
from security_gate.models import (
    STATUS_MALFORMED,
    STATUS_MISSING,
    NormalizedFinding,
    ScanResult,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Normalizer = Callable[[Any, str], list[NormalizedFinding]]


def read_report(path: PathLike) -> Any:
    """Read and decode a JSON (or SARIF) report.

    Raises
    ------
    ScannerOutputMissing
        If the file does not exist.
    ScannerOutputMalformed
        If the file cannot be read as UTF-8 JSON.
    """
    report_path = Path(path)
    if not report_path.is_file():
        raise ScannerOutputMissing(f"Report not found: {report_path}", str(report_path))

    try:
        content = report_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ScannerOutputMalformed(
            f"Cannot read report {report_path}: {exc}", str(report_path)
        ) from exc

    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ScannerOutputMalformed(
            f"Invalid JSON in {report_path}: {exc}", str(report_path)
        ) from exc


def dig(data: Any, *keys: str, default: Any = None) -> Any:
    """Walk nested mappings, returning *default* at the first gap."""
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def require_list(value: Any, what: str) -> list:
    """Return *value* as a list; ``None`` means empty."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ScannerOutputMalformed(f"Expected a list for {what}, got {type(value).__name__}")
    return value


def require_dict(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise ScannerOutputMalformed(f"Expected an object for {what}, got {type(value).__name__}")
    return value


def load_scan_result(path: PathLike, tool_name: str, normalizer: Normalizer) -> ScanResult:
    """Parse one report into a ``ScanResult``, never raising for bad input.

    Missing reports are logged as warnings, malformed ones as errors; both
    yield zero findings with the problem recorded on the result.
    """
    source = str(path)
    try:
        document = read_report(path)
        findings = _normalize(document, tool_name, normalizer, source)
    except ScannerOutputMissing as exc:
        logger.warning("⚠️  %s", exc)
        return ScanResult(tool=tool_name, errors=[str(exc)], status=STATUS_MISSING, source=source)
    except ScannerOutputError as exc:
        logger.error("❌ Error parsing %s report %s: %s", tool_name, source, exc)
        return ScanResult(tool=tool_name, errors=[str(exc)], status=STATUS_MALFORMED, source=source)

    return ScanResult(tool=tool_name, findings=findings, source=source)


def parse_report(path: PathLike, tool_name: str, normalizer: Normalizer) -> list[NormalizedFinding]:
    """Fail-open parse: the findings of :func:`load_scan_result` only."""
    return load_scan_result(path, tool_name, normalizer).findings


def _normalize(document: Any, tool_name: str, normalizer: Normalizer, source: str) -> list[NormalizedFinding]:
    try:
        return normalizer(document, tool_name)
    except ScannerOutputMalformed as exc:
        exc.path = source
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        # Unexpected document shape deep inside a record
        raise ScannerOutputMalformed(f"Unexpected report structure: {exc}", source) from exc
