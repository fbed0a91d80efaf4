#!/usr/bin/env python3
"""
Normalize Security Results

Converts every scanner report in the results directory into one normalized
JSON document, tagged with the CI run metadata.

Usage:
    security-gate-normalize --results-dir reports --output normalized.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from security_gate.config_loader import DEFAULT_RESULTS_DIR
from security_gate.manifest import DEFAULT_MANIFEST, ReportSource, collect_scan_results
from security_gate.models import NormalizedFinding

logger = logging.getLogger(__name__)

# metadata key -> GitHub Actions variable
_METADATA_ENV = {
    "repository": "GITHUB_REPOSITORY",
    "branch": "GITHUB_REF_NAME",
    "commit": "GITHUB_SHA",
    "triggeredBy": "GITHUB_ACTOR",
}


def normalize_results(
    results_dir: Union[str, Path],
    manifest: Iterable[ReportSource] = DEFAULT_MANIFEST,
) -> list[NormalizedFinding]:
    """Return the findings of every available report, in manifest order."""
    return [
        finding
        for result in collect_scan_results(results_dir, manifest)
        for finding in result.findings
    ]


def build_output(
    findings: Iterable[NormalizedFinding],
    now: datetime,
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    metadata: dict[str, Any] = {"timestamp": now.isoformat()}
    for key, env_name in _METADATA_ENV.items():
        metadata[key] = env.get(env_name) or "unknown"
    return {
        "metadata": metadata,
        "findings": [finding.to_dict() for finding in findings],
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="security-gate-normalize",
        description="Normalize security scanner reports into a single JSON file",
    )
    parser.add_argument("--results-dir", default=str(DEFAULT_RESULTS_DIR), help="Directory holding scanner reports")
    parser.add_argument("--output", help="Output path (default: <results-dir>/normalized.json)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    results_dir = Path(args.results_dir)
    output_path = Path(args.output) if args.output else results_dir / "normalized.json"

    logger.info("📋 Normalizing security scan results...")
    output = build_output(normalize_results(results_dir), datetime.now(timezone.utc))

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(output, fh, indent=2)
    except OSError:
        logger.exception("❌ Failed to write normalized results to %s", output_path)
        return 1

    logger.info("✅ Normalized %d findings", len(output["findings"]))
    logger.info("   Output: %s", output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
